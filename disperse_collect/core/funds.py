"""
Funds validation.

Aggregate mode checks the sum of a batch against one sender's ceiling
(disperse). Per-entry mode checks each source against its own
``min(balance, allowance)`` and stops at the first violation (collect).
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

from disperse_collect.core.amounts import FractionOrAmount, resolve_amount
from disperse_collect.core.errors import DcError
from disperse_collect.core.types import checked_sum, iter_by_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balance and (optionally) allowance of one address at fetch time."""
    balance: int
    allowance: Optional[int] = None

    @property
    def available(self) -> int:
        if self.allowance is None:
            return self.balance
        return min(self.balance, self.allowance)


def ensure_sufficient(required: int, available: int, address: str) -> None:
    if required > available:
        logger.info(
            "Insufficient funds for %s: required=%s available=%s", address, required, available
        )
        raise DcError.insufficient_funds(required=required, available=available, address=address)


def validate_aggregate(sender: str, available: int, amounts: Iterable[int]) -> int:
    """Check the batch sum against ``available``; returns the sum."""
    amounts = list(amounts)
    try:
        total = checked_sum(amounts)
    except OverflowError:
        # Anything past uint256 exceeds every balance; report the exact sum.
        total = sum(amounts)
    ensure_sufficient(total, available, sender)
    return total


def resolve_aggregate(
    sender: str,
    available: int,
    recipients: Mapping[str, FractionOrAmount],
) -> List[Tuple[str, int]]:
    """Resolve every recipient against ``available``, then validate the sum."""
    resolved = [
        (address, resolve_amount(spec, available))
        for address, spec in iter_by_address(recipients)
    ]
    validate_aggregate(sender, available, (amount for _, amount in resolved))
    return resolved


def resolve_per_entry(
    sources: Mapping[str, FractionOrAmount],
    snapshots: Mapping[str, BalanceSnapshot],
) -> List[Tuple[str, int]]:
    """Resolve each source against its own balance, validate against its own ceiling."""
    resolved = []
    for address, spec in iter_by_address(sources):
        snapshot = snapshots[address]
        amount = resolve_amount(spec, snapshot.balance)
        ensure_sufficient(amount, snapshot.available, address)
        resolved.append((address, amount))
    return resolved
