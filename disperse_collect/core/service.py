"""
Distribution operations.

Each operation is a fixed pipeline:
fetch reference balances -> resolve and validate amounts -> assemble batch
-> submit. Every failure is terminal for the request; nothing is retried.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from disperse_collect.core.amounts import FractionOrAmount, resolve_amount
from disperse_collect.core.batch import DistributionBatch, TransferMap, assemble_batch
from disperse_collect.core.fetcher import BalanceFetcher
from disperse_collect.core.funds import ensure_sufficient, resolve_aggregate, resolve_per_entry
from disperse_collect.core.submitter import TransactionSubmitter
from disperse_collect.integrations.contracts.interfaces import ChainClient, TransactionReceipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionResult:
    receipt: TransactionReceipt
    batch: DistributionBatch

    @property
    def tx_hash(self) -> str:
        return self.receipt.tx_hash

    @property
    def transfers(self) -> TransferMap:
        return self.batch.transfers()


class DistributionService:
    def __init__(
        self,
        chain: ChainClient,
        fetcher: Optional[BalanceFetcher] = None,
        submitter: Optional[TransactionSubmitter] = None,
    ) -> None:
        self.chain = chain
        self.fetcher = fetcher or BalanceFetcher(chain)
        self.submitter = submitter or TransactionSubmitter(chain)

    async def disperse_eth(
        self, caller: str, recipients: Mapping[str, FractionOrAmount]
    ) -> DistributionResult:
        available = await self.fetcher.native_balance(caller)

        batch = assemble_batch(resolve_aggregate(caller, available, recipients))
        call = self.chain.disperse_eth(batch.addresses, batch.amounts)

        receipt = await self.submitter.submit(call, caller)
        logger.info("disperse-eth %s: %d recipients, total %s", receipt.tx_hash, len(batch), batch.total)
        return DistributionResult(receipt=receipt, batch=batch)

    async def disperse_erc20(
        self,
        caller: str,
        spender: str,
        token: str,
        recipients: Mapping[str, FractionOrAmount],
    ) -> DistributionResult:
        snapshot = await self.fetcher.token_snapshot(
            token, spender, self.chain.disperse_contract_address
        )

        batch = assemble_batch(resolve_aggregate(spender, snapshot.available, recipients))
        call = self.chain.disperse_erc20(spender, token, batch.addresses, batch.amounts)

        receipt = await self.submitter.submit(call, caller)
        logger.info("disperse-erc20 %s: %d recipients of %s", receipt.tx_hash, len(batch), token)
        return DistributionResult(receipt=receipt, batch=batch)

    async def collect_erc20(
        self,
        caller: str,
        recipient: str,
        token: str,
        spenders: Mapping[str, FractionOrAmount],
    ) -> DistributionResult:
        snapshots = await self.fetcher.token_snapshots(
            token, spenders.keys(), self.chain.disperse_contract_address
        )

        batch = assemble_batch(resolve_per_entry(spenders, snapshots))
        call = self.chain.collect_erc20(token, recipient, batch.addresses, batch.amounts)

        receipt = await self.submitter.submit(call, caller)
        logger.info("collect-erc20 %s: %d spenders of %s into %s", receipt.tx_hash, len(batch), token, recipient)
        return DistributionResult(receipt=receipt, batch=batch)

    async def transfer(
        self,
        caller: str,
        recipient: str,
        value: FractionOrAmount,
        token: Optional[str] = None,
    ) -> TransactionReceipt:
        if token is None:
            balance = await self.fetcher.native_balance(caller)
        else:
            balance = await self.fetcher.token_balance(token, caller)

        amount = resolve_amount(value, balance)
        ensure_sufficient(amount, balance, caller)

        if token is None:
            call = self.chain.native_transfer(recipient, amount)
        else:
            call = self.chain.token_transfer(token, recipient, amount)
        return await self.submitter.submit(call, caller)

    async def approve(
        self,
        caller: str,
        spender: str,
        token: str,
        amount: FractionOrAmount,
    ) -> TransactionReceipt:
        # Approvals may exceed the current balance, so only the fraction is resolved.
        balance = await self.fetcher.token_balance(token, caller)
        resolved = resolve_amount(amount, balance)

        call = self.chain.token_approve(token, spender, resolved)
        return await self.submitter.submit(call, caller)
