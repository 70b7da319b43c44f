"""
Balance/allowance reads against the chain client.

Multi-address reads fan out one balance+allowance pair per address and fan
back in before returning. Any failed read fails the whole fetch: the
remaining reads are cancelled and no partial snapshot is returned.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List

from disperse_collect.core.errors import DcError
from disperse_collect.core.funds import BalanceSnapshot
from disperse_collect.core.types import address_sort_key
from disperse_collect.integrations.contracts.interfaces import ChainClient

logger = logging.getLogger(__name__)


async def gather_all(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """Run awaitables concurrently; on the first failure cancel the rest and raise it."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # Retrieve every failure so none is reported as unhandled; raise the first.
    errors = [task.exception() for task in tasks if not task.cancelled()]
    for error in errors:
        if error is not None:
            raise error
    return [task.result() for task in tasks]


class BalanceFetcher:
    def __init__(self, chain: ChainClient) -> None:
        self.chain = chain

    async def native_balance(self, address: str) -> int:
        try:
            return await self.chain.get_balance(address)
        except Exception as exc:
            raise DcError.from_chain_error(exc) from exc

    async def token_balance(self, token: str, owner: str) -> int:
        try:
            return await self.chain.token_balance_of(token, owner)
        except Exception as exc:
            raise DcError.from_erc20_error(exc, token) from exc

    async def token_snapshot(self, token: str, owner: str, spender: str) -> BalanceSnapshot:
        """Balance of ``owner`` and its allowance towards ``spender``, read concurrently."""
        try:
            balance, allowance = await gather_all(
                [
                    self.chain.token_balance_of(token, owner),
                    self.chain.token_allowance(token, owner, spender),
                ]
            )
        except Exception as exc:
            raise DcError.from_erc20_error(exc, token) from exc
        return BalanceSnapshot(balance=balance, allowance=allowance)

    async def token_snapshots(
        self, token: str, owners: Iterable[str], spender: str
    ) -> Dict[str, BalanceSnapshot]:
        """One snapshot per distinct owner, keyed and ordered by owner address."""
        ordered = sorted(set(owners), key=address_sort_key)
        logger.debug("Fetching %d token snapshots for %s", len(ordered), token)
        snapshots = await gather_all(self.token_snapshot(token, owner, spender) for owner in ordered)
        return dict(zip(ordered, snapshots))
