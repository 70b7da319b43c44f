"""
Integrations layer.

All chain access (RPC reads, call encoding, signing, sending) goes through a
``ChainClient`` implementation:
- clients/web3_chain.py     real node over JSON-RPC (web3.py)
- clients/mocks/chain.py    in-memory ledger for development and tests

Key rule:
- The core never imports web3 directly; it only talks to ``ChainClient``.
- The selection of mock vs real client happens in ONE place
  (disperse_collect/api/main.py).
"""

from .contracts.interfaces import (
    AccessList,
    ChainClient,
    ChainClientError,
    ChainTransportError,
    ContractCall,
    ContractNotFoundError,
    PendingTransaction,
    TransactionReceipt,
)

__all__ = [
    "AccessList",
    "ChainClient",
    "ChainClientError",
    "ChainTransportError",
    "ContractCall",
    "ContractNotFoundError",
    "PendingTransaction",
    "TransactionReceipt",
]
