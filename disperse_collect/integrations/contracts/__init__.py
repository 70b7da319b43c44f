"""
Contracts (data models and interfaces) for chain integrations.

Both the web3 client and the in-memory mock implement ``ChainClient`` and
exchange the dataclasses defined in interfaces.py, so the core behaves the
same against either.
"""
