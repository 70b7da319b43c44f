"""
Request/response bodies for the distribution endpoints (camelCase JSON).
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

from disperse_collect.core.amounts import FractionOrAmount
from disperse_collect.core.types import Address, Uint256


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _unique_address_map(value: Any) -> Any:
    """Reject empty maps and keys that collide once case is normalised."""
    if not isinstance(value, dict):
        return value
    if not value:
        raise ValueError("at least one address is required")
    seen = set()
    for key in value:
        normalized = key.lower() if isinstance(key, str) else key
        if normalized in seen:
            raise ValueError(f"duplicate address: {key}")
        seen.add(normalized)
    return value


AddressMap = Annotated[Dict[Address, FractionOrAmount], BeforeValidator(_unique_address_map)]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class DisperseEthRequest(CamelModel):
    recipients: AddressMap
    caller: Address


class DisperseErc20Request(CamelModel):
    recipients: AddressMap
    token: Address
    spender: Address
    caller: Address


class CollectErc20Request(CamelModel):
    caller: Address
    recipient: Address
    token: Address
    spenders: AddressMap


class TransferRequest(CamelModel):
    recipient: Address
    value: FractionOrAmount
    token: Optional[Address] = None
    caller: Address


class ApproveRequest(CamelModel):
    spender: Address
    amount: FractionOrAmount
    token: Address
    caller: Address


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TransactionResponse(CamelModel):
    tx_hash: str


class DisperseCollectResponse(TransactionResponse):
    transfers: Dict[str, Uint256]


class ErrorResponse(BaseModel):
    error: str
