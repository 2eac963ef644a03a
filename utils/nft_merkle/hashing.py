from __future__ import annotations

import hashlib

from eth_hash.auto import keccak as _keccak


HASH_LENGTH = 32


def keccak(data: bytes) -> bytes:
    """Keccak-256 as used by the EVM (not the padded SHA3-256 variant)."""
    return _keccak(data)


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def from_hex(text: str) -> bytes:
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    return bytes.fromhex(text)
