"""Tests for concurrent balance/allowance reads."""

import asyncio
import gc
import logging

import pytest

from disperse_collect.core.errors import DcError, DcErrorKind
from disperse_collect.core.fetcher import BalanceFetcher, gather_all
from disperse_collect.core.funds import BalanceSnapshot
from tests.conftest import A, B, C, CALLER, TOKEN

UNDEPLOYED = "0x6666666666666666666666666666666666666666"


@pytest.mark.asyncio
async def test_gather_all_preserves_submission_order():
    async def delayed(value, delay):
        await asyncio.sleep(delay)
        return value

    assert await gather_all([delayed(1, 0.02), delayed(2, 0), delayed(3, 0.01)]) == [1, 2, 3]


@pytest.mark.asyncio
async def test_gather_all_cancels_siblings_on_first_failure():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def boom():
        raise RuntimeError("read failed")

    with pytest.raises(RuntimeError, match="read failed"):
        await gather_all([slow(), boom()])
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_gather_all_of_nothing_is_empty():
    assert await gather_all([]) == []


@pytest.mark.asyncio
async def test_token_snapshot_reads_balance_and_allowance(chain):
    chain.set_token_balance(TOKEN, A, 10)
    chain.set_allowance(TOKEN, A, chain.disperse_contract_address, 5)

    snapshot = await BalanceFetcher(chain).token_snapshot(TOKEN, A, chain.disperse_contract_address)

    assert snapshot == BalanceSnapshot(balance=10, allowance=5)


@pytest.mark.asyncio
async def test_token_snapshots_are_keyed_and_ordered_by_owner(chain):
    spender = chain.disperse_contract_address
    for owner, balance in ((C, 3), (A, 1), (B, 2)):
        chain.set_token_balance(TOKEN, owner, balance)
        chain.set_allowance(TOKEN, owner, spender, balance * 10)

    snapshots = await BalanceFetcher(chain).token_snapshots(TOKEN, [C, A, B, A], spender)

    assert list(snapshots) == [A, B, C]
    assert snapshots[B] == BalanceSnapshot(balance=2, allowance=20)


@pytest.mark.asyncio
async def test_any_failed_read_fails_the_whole_fetch(chain):
    chain.fail_reads_for.add(B)

    with pytest.raises(DcError) as exc_info:
        await BalanceFetcher(chain).token_snapshots(TOKEN, [A, B, C], chain.disperse_contract_address)

    assert exc_info.value.kind is DcErrorKind.TRANSPORT


@pytest.mark.asyncio
async def test_missing_token_contract_is_token_not_found(chain):
    with pytest.raises(DcError) as exc_info:
        await BalanceFetcher(chain).token_balance(UNDEPLOYED, CALLER)

    assert exc_info.value.kind is DcErrorKind.TOKEN_NOT_FOUND
    assert exc_info.value.address == UNDEPLOYED
    assert exc_info.value.is_client_error


@pytest.mark.asyncio
async def test_native_balance_transport_failure(chain):
    chain.fail_reads_for.add(CALLER)

    with pytest.raises(DcError) as exc_info:
        await BalanceFetcher(chain).native_balance(CALLER)

    assert exc_info.value.kind is DcErrorKind.TRANSPORT
    assert not exc_info.value.is_client_error


@pytest.mark.asyncio
async def test_unknown_token_failures_are_all_retrieved(chain, caplog):
    async def snapshot_of_unknown_token():
        with pytest.raises(DcError) as exc_info:
            await BalanceFetcher(chain).token_snapshot(UNDEPLOYED, A, chain.disperse_contract_address)
        assert exc_info.value.kind is DcErrorKind.TOKEN_NOT_FOUND

    with caplog.at_level(logging.ERROR, logger="asyncio"):
        await snapshot_of_unknown_token()
        gc.collect()

    assert "never retrieved" not in caplog.text


@pytest.mark.asyncio
async def test_gather_all_raises_first_of_several_failures(caplog):
    async def boom(message):
        raise RuntimeError(message)

    async def run():
        with pytest.raises(RuntimeError, match="first"):
            await gather_all([boom("first"), boom("second")])

    with caplog.at_level(logging.ERROR, logger="asyncio"):
        await run()
        gc.collect()

    assert "never retrieved" not in caplog.text
