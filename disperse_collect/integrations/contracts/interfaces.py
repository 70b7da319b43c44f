from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple


# ---------------------------------------------------------------------------
# Errors raised by chain clients
# ---------------------------------------------------------------------------

class ChainClientError(Exception):
    """Base class for failures reported by a ChainClient."""


class ChainTransportError(ChainClientError):
    """The node could not be reached or did not answer in time."""


class ContractNotFoundError(ChainClientError):
    """No contract, or no matching function, at the called address."""

    def __init__(self, address: str, message: str = "") -> None:
        super().__init__(message or f"no contract function found at {address}")
        self.address = address


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

AccessList = List[Dict[str, Any]]


@dataclass(frozen=True)
class ContractCall:
    """An encoded, unsent call. ``data`` is empty for plain value transfers."""
    to: str
    data: str = "0x"
    value: int = 0
    function: str = ""
    args: Tuple[Any, ...] = ()

    @property
    def description(self) -> str:
        return self.function or "transfer"


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    sender: str
    block_number: int
    description: str = ""


@dataclass
class PendingTransaction:
    """A sent transaction; ``get_receipt`` waits for inclusion."""
    tx_hash: str
    sender: str
    client: "ChainClient" = field(repr=False)
    description: str = ""

    async def get_receipt(self) -> TransactionReceipt:
        return await self.client.wait_for_receipt(self)


# ---------------------------------------------------------------------------
# Abstract client interface
# ---------------------------------------------------------------------------

class ChainClient(ABC):
    """Every chain backend (real node or in-memory) implements this interface."""

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short label used in logs and health output."""

    @property
    @abstractmethod
    def disperse_contract_address(self) -> str:
        """Address of the DisperseCollect contract; the allowance spender."""

    # -- Reads --

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native currency balance in wei."""

    @abstractmethod
    async def token_balance_of(self, token: str, owner: str) -> int:
        """ERC20 ``balanceOf(owner)``."""

    @abstractmethod
    async def token_allowance(self, token: str, owner: str, spender: str) -> int:
        """ERC20 ``allowance(owner, spender)``."""

    # -- Call descriptors --

    @abstractmethod
    def native_transfer(self, to: str, amount: int) -> ContractCall:
        """Plain value transfer."""

    @abstractmethod
    def token_transfer(self, token: str, to: str, amount: int) -> ContractCall:
        """ERC20 ``transfer(to, amount)``."""

    @abstractmethod
    def token_approve(self, token: str, spender: str, amount: int) -> ContractCall:
        """ERC20 ``approve(spender, amount)``."""

    @abstractmethod
    def disperse_eth(self, addresses: Sequence[str], amounts: Sequence[int]) -> ContractCall:
        """``disperseEth(addresses, amounts)`` carrying the amount sum as value."""

    @abstractmethod
    def disperse_erc20(
        self, spender: str, token: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        """``disperseERC20(spender, token, addresses, amounts)``."""

    @abstractmethod
    def collect_erc20(
        self, token: str, recipient: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        """``collectERC20(token, recipient, addresses, amounts)``."""

    # -- Signing / sending --

    @abstractmethod
    def has_signer_for(self, address: str) -> bool:
        """True if a signing key for ``address`` is configured."""

    @abstractmethod
    async def create_access_list(self, call: ContractCall, sender: str) -> AccessList:
        """Simulate ``call`` from ``sender`` and return its optimised access list."""

    @abstractmethod
    async def send_transaction(
        self, call: ContractCall, sender: str, access_list: AccessList
    ) -> PendingTransaction:
        """Sign and broadcast ``call``."""

    @abstractmethod
    async def wait_for_receipt(self, pending: PendingTransaction) -> TransactionReceipt:
        """Block until ``pending`` is included on chain."""

    async def close(self) -> None:
        """Release network resources; a no-op unless overridden."""
