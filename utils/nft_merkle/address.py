from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from eth_utils import is_hex_address

from .errors import MalformedAddressError
from .hashing import keccak


@dataclass(frozen=True, slots=True)
class Address:
    """A whitelist address in canonical form: lowercase hex with a ``0x`` prefix.

    Build instances through :func:`parse_address`; the constructor does not
    validate.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @property
    def leaf(self) -> bytes:
        return encode_leaf(self)


def parse_address(raw: str) -> Address:
    """Validate ``raw`` and return its canonical :class:`Address`.

    The checksum casing of mixed-case input is not checked; input is simply
    lowercased.
    """
    if not isinstance(raw, str):
        raise MalformedAddressError(f"Address must be a string, got {type(raw).__name__}")
    candidate = raw.strip()
    if candidate[:2] not in ("0x", "0X"):
        raise MalformedAddressError(f"Address must start with 0x: {raw!r}")
    if not is_hex_address("0x" + candidate[2:]):
        raise MalformedAddressError(f"Address must be 40 hex digits after 0x: {raw!r}")
    return Address("0x" + candidate[2:].lower())


def encode_leaf(address: Union[Address, str]) -> bytes:
    # Deployed roots hash the UTF-8 text of the address, not its 20 raw bytes.
    if not isinstance(address, Address):
        address = parse_address(address)
    return keccak(address.value.encode("utf-8"))
