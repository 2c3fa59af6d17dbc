#!/usr/bin/env python3
"""
TokenId codec for Respect1155 award tokens

A non-fungible Respect token id is a 32-byte value packing:
    byte  3        mint type
    bytes 4..12    period number (uint64, big-endian)
    bytes 12..32   owner address
Token id 0 is reserved for the fungible Respect unit.
"""

from dataclasses import dataclass
from typing import Union

from web3 import Web3


TOKEN_ID_BYTES = 32
FUNGIBLE_TOKEN_ID = 0

MINT_TYPE_SLICE = slice(3, 4)
PERIOD_NUMBER_SLICE = slice(4, 12)
OWNER_SLICE = slice(12, 32)

TokenIdLike = Union[int, bytes, bytearray, str]


@dataclass(frozen=True)
class TokenIdFields:
    mint_type: int
    period_number: int
    owner: str


def strip_0x(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value


def token_id_to_bytes(token_id: TokenIdLike) -> bytes:
    """Coerce a token id to exactly 32 bytes, left-padding with zeros"""
    if isinstance(token_id, bool):
        raise TypeError("token id must be an int, bytes or hex string, not bool")
    if isinstance(token_id, int):
        if token_id < 0:
            raise ValueError(f"token id must be non-negative, got {token_id}")
        if token_id.bit_length() > TOKEN_ID_BYTES * 8:
            raise ValueError(f"token id {token_id} does not fit in {TOKEN_ID_BYTES} bytes")
        return token_id.to_bytes(TOKEN_ID_BYTES, "big")

    if isinstance(token_id, (bytes, bytearray)):
        raw = bytes(token_id)
    elif isinstance(token_id, str):
        digits = strip_0x(token_id.strip())
        if len(digits) % 2:
            digits = "0" + digits
        try:
            raw = bytes.fromhex(digits)
        except ValueError as exc:
            raise ValueError(f"token id is not valid hex: {token_id!r}") from exc
    else:
        raise TypeError(f"unsupported token id type: {type(token_id).__name__}")

    if len(raw) > TOKEN_ID_BYTES:
        raise ValueError(f"token id is {len(raw)} bytes, expected at most {TOKEN_ID_BYTES}")
    return raw.rjust(TOKEN_ID_BYTES, b"\x00")


def normalize_token_id(token_id: TokenIdLike) -> str:
    """Canonical form: 0x followed by 64 lowercase hex digits"""
    return "0x" + token_id_to_bytes(token_id).hex()


def decode_token_id(token_id: TokenIdLike) -> TokenIdFields:
    raw = token_id_to_bytes(token_id)
    return TokenIdFields(
        mint_type=int.from_bytes(raw[MINT_TYPE_SLICE], "big"),
        period_number=int.from_bytes(raw[PERIOD_NUMBER_SLICE], "big"),
        owner=Web3.to_checksum_address("0x" + raw[OWNER_SLICE].hex()),
    )


def encode_token_id(mint_type: int, period_number: int, owner: str) -> str:
    """Pack fields into a canonical token id (bytes 0..3 are left zero)"""
    if not 0 <= mint_type < 2 ** 8:
        raise ValueError(f"mint type out of range: {mint_type}")
    if not 0 <= period_number < 2 ** 64:
        raise ValueError(f"period number out of range: {period_number}")
    owner_bytes = bytes.fromhex(strip_0x(owner))
    if len(owner_bytes) != 20:
        raise ValueError(f"owner must be a 20-byte address, got {owner!r}")

    raw = bytearray(TOKEN_ID_BYTES)
    raw[MINT_TYPE_SLICE] = mint_type.to_bytes(1, "big")
    raw[PERIOD_NUMBER_SLICE] = period_number.to_bytes(8, "big")
    raw[OWNER_SLICE] = owner_bytes
    return "0x" + bytes(raw).hex()
