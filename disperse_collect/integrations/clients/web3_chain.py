"""
Real chain client over JSON-RPC.

Used when an RPC endpoint is configured. Reads go through AsyncWeb3,
transactions are signed locally with eth_account keys and sent raw.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import (
    ABIFunctionNotFound,
    BadFunctionCallOutput,
    NoABIFunctionsFound,
    ProviderConnectionError,
    TimeExhausted,
)

from disperse_collect.core.types import to_address
from disperse_collect.integrations.contracts.abis import DISPERSE_COLLECT_ABI, ERC20_ABI
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

_TRANSPORT_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
    ProviderConnectionError,
    TimeExhausted,
)
_MISSING_CONTRACT_ERRORS = (BadFunctionCallOutput, ABIFunctionNotFound, NoABIFunctionsFound)


@contextmanager
def translate_errors(address: Optional[str] = None) -> Iterator[None]:
    """Re-raise web3/aiohttp failures as integration-layer errors."""
    try:
        yield
    except _MISSING_CONTRACT_ERRORS as exc:
        raise ContractNotFoundError(address or "", str(exc)) from exc
    except _TRANSPORT_ERRORS as exc:
        raise ChainTransportError(str(exc) or type(exc).__name__) from exc


class Web3ChainClient(ChainClient):
    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_keys: Sequence[str] = (),
        request_timeout: float = 30.0,
        receipt_timeout: float = 120.0,
        w3: Optional[AsyncWeb3] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.receipt_timeout = receipt_timeout
        self.w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                rpc_url,
                request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            )
        )
        self._contract_address = to_address(contract_address)
        self._disperse = self.w3.eth.contract(address=self._contract_address, abi=DISPERSE_COLLECT_ABI)

        self._signers: Dict[str, LocalAccount] = {}
        for key in private_keys:
            account: LocalAccount = Account.from_key(key)
            self._signers[to_address(account.address)] = account

    @property
    def kind(self) -> str:
        return "web3"

    @property
    def disperse_contract_address(self) -> str:
        return self._contract_address

    @property
    def signer_addresses(self) -> Sequence[str]:
        return sorted(self._signers)

    def _erc20(self, token: str):
        return self.w3.eth.contract(address=to_address(token), abi=ERC20_ABI)

    # -- Reads --

    async def get_balance(self, address: str) -> int:
        with translate_errors():
            return await self.w3.eth.get_balance(to_address(address))

    async def token_balance_of(self, token: str, owner: str) -> int:
        with translate_errors(token):
            return await self._erc20(token).functions.balanceOf(to_address(owner)).call()

    async def token_allowance(self, token: str, owner: str, spender: str) -> int:
        with translate_errors(token):
            return await (
                self._erc20(token).functions.allowance(to_address(owner), to_address(spender)).call()
            )

    # -- Call descriptors --

    def _encode(self, contract, function: str, args: Sequence[Any], value: int = 0) -> ContractCall:
        return ContractCall(
            to=contract.address,
            data=contract.encode_abi(function, args=list(args)),
            value=value,
            function=function,
            args=tuple(args),
        )

    def native_transfer(self, to: str, amount: int) -> ContractCall:
        return ContractCall(to=to_address(to), value=amount)

    def token_transfer(self, token: str, to: str, amount: int) -> ContractCall:
        return self._encode(self._erc20(token), "transfer", [to_address(to), amount])

    def token_approve(self, token: str, spender: str, amount: int) -> ContractCall:
        return self._encode(self._erc20(token), "approve", [to_address(spender), amount])

    def disperse_eth(self, addresses: Sequence[str], amounts: Sequence[int]) -> ContractCall:
        return self._encode(
            self._disperse, "disperseEth", [list(addresses), list(amounts)], value=sum(amounts)
        )

    def disperse_erc20(
        self, spender: str, token: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        return self._encode(
            self._disperse,
            "disperseERC20",
            [to_address(spender), to_address(token), list(addresses), list(amounts)],
        )

    def collect_erc20(
        self, token: str, recipient: str, addresses: Sequence[str], amounts: Sequence[int]
    ) -> ContractCall:
        return self._encode(
            self._disperse,
            "collectERC20",
            [to_address(token), to_address(recipient), list(addresses), list(amounts)],
        )

    # -- Signing / sending --

    def has_signer_for(self, address: str) -> bool:
        return to_address(address) in self._signers

    @staticmethod
    def _base_tx(call: ContractCall, sender: str) -> Dict[str, Any]:
        return {"from": to_address(sender), "to": call.to, "value": call.value, "data": call.data}

    async def create_access_list(self, call: ContractCall, sender: str) -> AccessList:
        with translate_errors():
            result = await self.w3.eth.create_access_list(self._base_tx(call, sender))

        return [
            {
                "address": to_address(entry["address"]),
                "storageKeys": [k if isinstance(k, str) else Web3.to_hex(k) for k in entry["storageKeys"]],
            }
            for entry in result["accessList"]
        ]

    async def send_transaction(
        self, call: ContractCall, sender: str, access_list: AccessList
    ) -> PendingTransaction:
        account = self._signers[to_address(sender)]
        tx = self._base_tx(call, sender)
        tx["accessList"] = access_list

        with translate_errors():
            tx["chainId"] = await self.w3.eth.chain_id
            tx["nonce"] = await self.w3.eth.get_transaction_count(account.address, "pending")
            tx["gas"] = await self.w3.eth.estimate_gas(tx)

            latest = await self.w3.eth.get_block("latest")
            priority_fee = await self.w3.eth.max_priority_fee
            tx["type"] = 2
            tx["maxPriorityFeePerGas"] = priority_fee
            tx["maxFeePerGas"] = 2 * latest["baseFeePerGas"] + priority_fee

            signed = account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)

        return PendingTransaction(
            tx_hash=Web3.to_hex(tx_hash),
            sender=account.address,
            client=self,
            description=call.description,
        )

    async def wait_for_receipt(self, pending: PendingTransaction) -> TransactionReceipt:
        with translate_errors():
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                pending.tx_hash, timeout=self.receipt_timeout
            )

        return TransactionReceipt(
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            sender=pending.sender,
            block_number=receipt["blockNumber"],
            description=pending.description,
        )

    async def close(self) -> None:
        await self.w3.provider.disconnect()
