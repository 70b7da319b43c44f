"""
Address and uint256 value types shared by the API schemas and the core.
"""

from typing import Any, Iterable, Iterator, Mapping, Tuple, TypeVar

from eth_typing import ChecksumAddress
from eth_utils import is_hex_address, to_checksum_address
from pydantic import BeforeValidator, PlainSerializer
from typing_extensions import Annotated

UINT256_MAX = 2**256 - 1

V = TypeVar("V")


def to_address(value: Any) -> ChecksumAddress:
    """Normalise any-case 20-byte hex into its EIP-55 checksum form."""
    if not isinstance(value, str) or not is_hex_address(value):
        raise ValueError(f"invalid address: {value!r}")
    return to_checksum_address(value)


def address_sort_key(address: str) -> bytes:
    return bytes.fromhex(address[2:])


def iter_by_address(mapping: Mapping[str, V]) -> Iterator[Tuple[str, V]]:
    """Yield mapping items in ascending byte order of their address keys."""
    for address in sorted(mapping, key=address_sort_key):
        yield address, mapping[address]


def to_uint256(value: Any) -> int:
    """Accept a JSON number, a decimal string or a 0x-prefixed hex string."""
    if isinstance(value, bool):
        raise ValueError("booleans are not amounts")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as exc:
            raise ValueError(f"invalid integer: {value!r}") from exc
    else:
        raise ValueError(f"invalid integer: {value!r}")

    if parsed < 0 or parsed > UINT256_MAX:
        raise ValueError(f"integer out of uint256 range: {value!r}")
    return parsed


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > UINT256_MAX:
        raise OverflowError("uint256 addition overflow")
    return result


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > UINT256_MAX:
        raise OverflowError("uint256 multiplication overflow")
    return result


def checked_sum(values: Iterable[int]) -> int:
    total = 0
    for value in values:
        total = checked_add(total, value)
    return total


Address = Annotated[ChecksumAddress, BeforeValidator(to_address)]

Uint256 = Annotated[
    int,
    BeforeValidator(to_uint256),
    PlainSerializer(hex, return_type=str, when_used="json"),
]
