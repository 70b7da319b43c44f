"""
Batch assembly: parallel address/amount sequences for one contract call.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from disperse_collect.core.types import address_sort_key, checked_sum

TransferMap = Dict[str, int]


@dataclass(frozen=True)
class DistributionBatch:
    addresses: Tuple[str, ...]
    amounts: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.addresses) != len(self.amounts):
            raise ValueError(
                f"batch length mismatch: {len(self.addresses)} addresses, {len(self.amounts)} amounts"
            )
        keys = [address_sort_key(a) for a in self.addresses]
        if any(left >= right for left, right in zip(keys, keys[1:])):
            raise ValueError("batch addresses must be unique and ascending")

    def __len__(self) -> int:
        return len(self.addresses)

    @property
    def total(self) -> int:
        return checked_sum(self.amounts)

    def transfers(self) -> TransferMap:
        return dict(zip(self.addresses, self.amounts))


def assemble_batch(entries: Iterable[Tuple[str, int]]) -> DistributionBatch:
    """Build a batch from resolved (address, amount) pairs, ordered by address."""
    ordered = sorted(entries, key=lambda entry: address_sort_key(entry[0]))
    return DistributionBatch(
        addresses=tuple(address for address, _ in ordered),
        amounts=tuple(amount for _, amount in ordered),
    )
