"""Offline tests for the web3-backed chain client (no node required)."""

import asyncio

import aiohttp
import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, TimeExhausted

from disperse_collect.integrations.clients.web3_chain import Web3ChainClient, translate_errors
from disperse_collect.integrations.contracts.interfaces import (
    ChainTransportError,
    ContractNotFoundError,
    PendingTransaction,
)
from tests.conftest import A, B, SPENDER, TOKEN

CONTRACT = "0x" + "cd" * 20


def selector(signature):
    return Web3.to_hex(Web3.keccak(text=signature)[:4])


@pytest.fixture
def account():
    return Account.create()


@pytest.fixture
def client(account):
    return Web3ChainClient(
        rpc_url="http://127.0.0.1:1",
        contract_address=CONTRACT,
        private_keys=[account.key.hex()],
    )


def test_missing_contract_errors_become_contract_not_found():
    with pytest.raises(ContractNotFoundError) as exc_info:
        with translate_errors(TOKEN):
            raise BadFunctionCallOutput("Could not decode contract function call")
    assert exc_info.value.address == TOKEN


@pytest.mark.parametrize(
    "exc",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError(), TimeExhausted("no receipt")],
)
def test_network_errors_become_transport_errors(exc):
    with pytest.raises(ChainTransportError):
        with translate_errors():
            raise exc


def test_other_errors_pass_through():
    with pytest.raises(KeyError):
        with translate_errors():
            raise KeyError("baseFeePerGas")


def test_signer_lookup_is_case_insensitive(client, account):
    assert client.has_signer_for(account.address.lower())
    assert not client.has_signer_for(SPENDER)
    assert client.signer_addresses == [account.address]


def test_disperse_eth_call_carries_value_and_selector(client):
    call = client.disperse_eth([A, B], [1, 2])

    assert call.to == Web3.to_checksum_address(CONTRACT)
    assert call.value == 3
    assert call.data.startswith(selector("disperseEth(address[],uint256[])"))
    assert call.args == ([A, B], [1, 2])


def test_erc20_calls_target_the_token(client):
    transfer = client.token_transfer(TOKEN, A, 5)
    approve = client.token_approve(TOKEN, SPENDER, 7)
    collect = client.collect_erc20(TOKEN, B, [A], [1])

    assert transfer.to == TOKEN and transfer.value == 0
    assert transfer.data.startswith(selector("transfer(address,uint256)"))
    assert approve.data.startswith(selector("approve(address,uint256)"))
    assert collect.to == Web3.to_checksum_address(CONTRACT)
    assert collect.data.startswith(selector("collectERC20(address,address,address[],uint256[])"))


def test_native_transfer_has_no_calldata(client):
    call = client.native_transfer(A, 9)
    assert (call.to, call.data, call.value) == (A, "0x", 9)


@pytest.mark.asyncio
async def test_access_list_is_normalised(client, account, monkeypatch):
    seen = {}

    async def fake_create_access_list(tx, *args, **kwargs):
        seen.update(tx)
        return {
            "accessList": [{"address": TOKEN.lower(), "storageKeys": [HexBytes(b"\x01" * 32)]}],
            "gasUsed": 21000,
        }

    monkeypatch.setattr(client.w3.eth, "create_access_list", fake_create_access_list)

    access_list = await client.create_access_list(client.token_transfer(TOKEN, A, 1), account.address)

    assert seen["from"] == account.address and seen["to"] == TOKEN
    assert access_list == [{"address": TOKEN, "storageKeys": ["0x" + "01" * 32]}]


@pytest.mark.asyncio
async def test_receipt_timeout_is_transport_error(client, account, monkeypatch):
    async def never_mined(tx_hash, timeout=120, poll_latency=0.1):
        raise TimeExhausted("not mined")

    monkeypatch.setattr(client.w3.eth, "wait_for_transaction_receipt", never_mined)
    pending = PendingTransaction(tx_hash="0x" + "00" * 32, sender=account.address, client=client)

    with pytest.raises(ChainTransportError):
        await pending.get_receipt()
