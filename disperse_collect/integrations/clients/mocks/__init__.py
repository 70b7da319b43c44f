"""
Mock chain client.

Keeps balances, allowances and signers in memory and never touches the
network. Used when no RPC endpoint is configured and by the test-suite.
"""

from .chain import MockChainClient

__all__ = ["MockChainClient"]
