"""
Mock Chain Client.

Purpose:
- In-memory ledger of native balances, ERC20 balances and allowances
- Does NOT make any network calls
- Applies the effect of every sent call so successive requests see
  updated balances

Usage:
- Selected in disperse_collect/api/main.py when no RPC endpoint is configured
- Used by the test-suite, which seeds balances and inspects ``sent``

Failure injection:
- ``fail_reads_for`` makes reads touching an address raise ChainTransportError
- ``fail_sends`` makes every send raise ChainTransportError
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from disperse_collect.core.types import to_address
from disperse_collect.integrations.contracts.interfaces import (
    AccessList,
    ChainClient,
    ChainTransportError,
    ContractCall,
    ContractNotFoundError,
    PendingTransaction,
    TransactionReceipt,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTRACT_ADDRESS = "0x00000000000000000000000000000000D15C011E"


@dataclass(frozen=True)
class SentTransaction:
    call: ContractCall
    sender: str
    access_list: AccessList
    tx_hash: str


class MockChainClient(ChainClient):
    def __init__(
        self,
        contract_address: str = DEFAULT_CONTRACT_ADDRESS,
        signers: Sequence[str] = (),
    ) -> None:
        self._contract_address = to_address(contract_address)
        self.signers: Set[str] = {to_address(s) for s in signers}
        self.balances: Dict[str, int] = {}
        self.tokens: Dict[str, Dict[str, int]] = {}
        self.allowances: Dict[Tuple[str, str, str], int] = {}
        self.sent: List[SentTransaction] = []
        self.reads: List[Tuple[str, ...]] = []
        self.fail_reads_for: Set[str] = set()
        self.fail_sends = False
        self._block_number = 0

    # -- Seeding helpers --

    def set_balance(self, address: str, amount: int) -> None:
        self.balances[to_address(address)] = amount

    def deploy_token(self, token: str) -> None:
        self.tokens.setdefault(to_address(token), {})

    def set_token_balance(self, token: str, owner: str, amount: int) -> None:
        self.deploy_token(token)
        self.tokens[to_address(token)][to_address(owner)] = amount

    def set_allowance(self, token: str, owner: str, spender: str, amount: int) -> None:
        self.deploy_token(token)
        self.allowances[(to_address(token), to_address(owner), to_address(spender))] = amount

    def add_signer(self, address: str) -> None:
        self.signers.add(to_address(address))

    # -- ChainClient --

    @property
    def kind(self) -> str:
        return "mock"

    @property
    def disperse_contract_address(self) -> str:
        return self._contract_address

    async def get_balance(self, address: str) -> int:
        self._record_read("balance", address)
        return self.balances.get(to_address(address), 0)

    async def token_balance_of(self, token: str, owner: str) -> int:
        self._record_read("balanceOf", token, owner)
        return self._token_ledger(token).get(to_address(owner), 0)

    async def token_allowance(self, token: str, owner: str, spender: str) -> int:
        self._record_read("allowance", token, owner, spender)
        self._token_ledger(token)
        return self.allowances.get((to_address(token), to_address(owner), to_address(spender)), 0)

    def native_transfer(self, to: str, amount: int) -> ContractCall:
        return ContractCall(to=to_address(to), value=amount)

    def token_transfer(self, token: str, to: str, amount: int) -> ContractCall:
        return ContractCall(to=to_address(token), function="transfer", args=(to, amount))

    def token_approve(self, token: str, spender: str, amount: int) -> ContractCall:
        return ContractCall(to=to_address(token), function="approve", args=(spender, amount))

    def disperse_eth(self, addresses: Sequence[str], amounts: Sequence[int]) -> ContractCall:
        return ContractCall(
            to=self._contract_address,
            value=sum(amounts),
            function="disperseEth",
            args=(tuple(addresses), tuple(amounts)),
        )

    def disperse_erc20(
        self, spender: str, token: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        return ContractCall(
            to=self._contract_address,
            function="disperseERC20",
            args=(spender, token, tuple(addresses), tuple(amounts)),
        )

    def collect_erc20(
        self, token: str, recipient: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        return ContractCall(
            to=self._contract_address,
            function="collectERC20",
            args=(token, recipient, tuple(addresses), tuple(amounts)),
        )

    def has_signer_for(self, address: str) -> bool:
        return to_address(address) in self.signers

    async def create_access_list(self, call: ContractCall, sender: str) -> AccessList:
        if self.fail_sends:
            raise ChainTransportError("mock node unavailable")
        return [{"address": call.to, "storageKeys": []}]

    async def send_transaction(
        self, call: ContractCall, sender: str, access_list: AccessList
    ) -> PendingTransaction:
        if self.fail_sends:
            raise ChainTransportError("mock node unavailable")

        sender = to_address(sender)
        seed = f"{len(self.sent)}:{sender}:{call!r}".encode("utf-8")
        tx_hash = "0x" + hashlib.sha256(seed).hexdigest()

        self._apply(call, sender)
        self.sent.append(SentTransaction(call=call, sender=sender, access_list=access_list, tx_hash=tx_hash))
        logger.debug("Mock sent %s from %s: %s", call.description, sender, tx_hash)
        return PendingTransaction(tx_hash=tx_hash, sender=sender, client=self, description=call.description)

    async def wait_for_receipt(self, pending: PendingTransaction) -> TransactionReceipt:
        self._block_number += 1
        return TransactionReceipt(
            tx_hash=pending.tx_hash,
            sender=pending.sender,
            block_number=self._block_number,
            description=pending.description,
        )

    # -- Internals --

    def _record_read(self, *parts: str) -> None:
        self.reads.append(parts)
        failing = {to_address(a) for a in self.fail_reads_for}
        if any(to_address(p) in failing for p in parts[1:]):
            raise ChainTransportError(f"mock read failed: {parts[0]}")

    def _token_ledger(self, token: str) -> Dict[str, int]:
        ledger = self.tokens.get(to_address(token))
        if ledger is None:
            raise ContractNotFoundError(to_address(token))
        return ledger

    def _move_token(self, token: str, owner: str, to: str, amount: int, via: Optional[str] = None) -> None:
        ledger = self._token_ledger(token)
        owner, to = to_address(owner), to_address(to)
        ledger[owner] = ledger.get(owner, 0) - amount
        ledger[to] = ledger.get(to, 0) + amount
        if via is not None:
            key = (to_address(token), owner, to_address(via))
            self.allowances[key] = self.allowances.get(key, 0) - amount

    def _apply(self, call: ContractCall, sender: str) -> None:
        if call.value:
            self.balances[sender] = self.balances.get(sender, 0) - call.value

        if not call.function:
            self.balances[call.to] = self.balances.get(call.to, 0) + call.value
        elif call.function == "transfer":
            to, amount = call.args
            self._move_token(call.to, sender, to, amount)
        elif call.function == "approve":
            spender, amount = call.args
            self.set_allowance(call.to, sender, spender, amount)
        elif call.function == "disperseEth":
            for address, amount in zip(*call.args):
                address = to_address(address)
                self.balances[address] = self.balances.get(address, 0) + amount
        elif call.function == "disperseERC20":
            spender, token, addresses, amounts = call.args
            for address, amount in zip(addresses, amounts):
                self._move_token(token, spender, address, amount, via=self._contract_address)
        elif call.function == "collectERC20":
            token, recipient, addresses, amounts = call.args
            for address, amount in zip(addresses, amounts):
                self._move_token(token, address, recipient, amount, via=self._contract_address)
