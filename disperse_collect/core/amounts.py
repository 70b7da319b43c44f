"""
Amount resolution.

Turns a ``FractionOrAmount`` into an absolute uint256 amount against a
reference balance. Fractions are ``floor(reference * fraction / units)``;
a fraction that resolves to zero is rejected, a fixed amount of zero is not.
"""

from typing import Union

from pydantic import BaseModel, ConfigDict

from disperse_collect.core.errors import DcError
from disperse_collect.core.types import Uint256, checked_mul

DEFAULT_UNITS = 100


class FractionalAmount(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fraction: Uint256
    units: Uint256 = DEFAULT_UNITS

    def __str__(self) -> str:
        return f"{self.fraction}/{self.units}"

    def to_absolute(self, total: int) -> int:
        """Calculates ``total * fraction / units``.

        Raises OverflowError if the product exceeds uint256 and
        ZeroDivisionError if ``units`` is zero.
        """
        return checked_mul(total, self.fraction) // self.units


class FixedAmount(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Uint256

    def __str__(self) -> str:
        return str(self.amount)


FractionOrAmount = Union[FractionalAmount, FixedAmount]


def resolve_amount(spec: FractionOrAmount, reference_balance: int) -> int:
    if isinstance(spec, FixedAmount):
        return spec.amount

    try:
        amount = spec.to_absolute(reference_balance)
    except (OverflowError, ZeroDivisionError) as exc:
        raise DcError.invalid_fractional_amount(spec) from exc

    if amount == 0:
        raise DcError.invalid_fractional_amount(spec)
    return amount
