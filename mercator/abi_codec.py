"""
Minimal ABI codec for the read-only calls mercator issues.

Calldata is `selector ++ word*`, every integer argument right-aligned in a
32-byte big-endian word. Responses are 0x-prefixed hex strings that are
decoded into addresses, uint256 values, uint32 triples, dynamic uint256[]
arrays narrowed to 64 bits, and packed semver integers.
"""

from __future__ import annotations

import re
from typing import List, Sequence, Tuple, Union

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import encode_hex, keccak, to_normalized_address

from .errors import DecodeError

WORD_SIZE = 32
SELECTOR_SIZE = 4
UINT64_MAX = (1 << 64) - 1
UINT32_MAX = (1 << 32) - 1
UINT256_MAX = (1 << 256) - 1

ZERO_ADDRESS = "0x" + "00" * 20

_HEX_BODY_RE = re.compile(r"^[0-9a-fA-F]*$")

Word = Union[int, bytes]


def function_selector(signature: str) -> bytes:
    """First four bytes of keccak-256 over the canonical function signature."""
    return keccak(text=signature)[:SELECTOR_SIZE]


def encode_word(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"abi word value must be an int, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"value {value} does not fit into an abi word")
    return value.to_bytes(WORD_SIZE, "big")


def encode_call(selector: bytes, args: Sequence[Word] = ()) -> str:
    """Concatenate the selector and each argument word into 0x-prefixed calldata.

    Integers are left-padded to 32 bytes; raw 32-byte words are passed through.
    """
    if len(selector) != SELECTOR_SIZE:
        raise ValueError(f"selector must be {SELECTOR_SIZE} bytes, got {len(selector)}")
    parts = [bytes(selector)]
    for arg in args:
        if isinstance(arg, (bytes, bytearray)):
            if len(arg) != WORD_SIZE:
                raise ValueError(f"raw abi word must be {WORD_SIZE} bytes, got {len(arg)}")
            parts.append(bytes(arg))
        else:
            parts.append(encode_word(arg))
    return encode_hex(b"".join(parts))


def decode_hex_data(value: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise DecodeError("eth_call result was not 0x-prefixed")
    body = value[2:]
    if not _HEX_BODY_RE.fullmatch(body):
        raise DecodeError("eth_call result contains non-hex characters")
    if len(body) % 2:
        raise DecodeError("eth_call result has an odd number of hex digits")
    return bytes.fromhex(body)


def _as_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return decode_hex_data(data)
    return bytes(data)


def _require_words(data: bytes, count: int, what: str) -> None:
    if len(data) < count * WORD_SIZE:
        raise DecodeError(
            f"{what} needs {count * WORD_SIZE} bytes, response has {len(data)}"
        )


def _word_to_uint64(word: bytes, what: str) -> int:
    # only the low 8 bytes may be populated
    if any(word[: WORD_SIZE - 8]):
        raise DecodeError(f"{what} does not fit into u64")
    return int.from_bytes(word[WORD_SIZE - 8 :], "big")


def decode_address(data: Union[str, bytes]) -> str:
    """Canonical lowercase address held in the low 20 bytes of the first word.

    The 12 high bytes are not checked; nodes are not consistent about them.
    """
    raw = _as_bytes(data)
    _require_words(raw, 1, "address")
    return to_normalized_address(raw[12:WORD_SIZE])


def decode_uint256(data: Union[str, bytes]) -> int:
    raw = _as_bytes(data)
    try:
        (value,) = abi_decode(["uint256"], raw)
    except DecodingError as err:
        raise DecodeError(str(err)) from err
    return value


def decode_uint32_triple(data: Union[str, bytes]) -> Tuple[int, int, int]:
    raw = _as_bytes(data)
    try:
        major, minor, patch = abi_decode(["uint32", "uint32", "uint32"], raw)
    except DecodingError as err:
        raise DecodeError(str(err)) from err
    return major, minor, patch


def decode_uint64_array(data: Union[str, bytes]) -> List[int]:
    """Decode a dynamic `uint256[]` return value whose elements fit into 64 bits.

    Layout: head word = byte offset of the tail; tail = length word followed by
    `length` element words.
    """
    raw = _as_bytes(data)
    if len(raw) < WORD_SIZE:
        raise DecodeError("response shorter than one abi word")

    offset = int.from_bytes(raw[:WORD_SIZE], "big")
    if offset + WORD_SIZE > len(raw):
        raise DecodeError(f"array offset {offset} out of bounds for {len(raw)} bytes")

    length = _word_to_uint64(raw[offset : offset + WORD_SIZE], "array length")
    start = offset + WORD_SIZE
    end = start + length * WORD_SIZE
    if end > len(raw):
        raise DecodeError(
            f"array of {length} elements at offset {offset} exceeds {len(raw)} bytes"
        )

    values = []
    for idx in range(length):
        pos = start + idx * WORD_SIZE
        values.append(_word_to_uint64(raw[pos : pos + WORD_SIZE], f"array element {idx}"))
    return values


def decode_packed_semver(value: int) -> Tuple[int, int, int]:
    """Split a packed protocol version: major bits 64..95, minor 32..63, patch 0..31."""
    if value < 0 or value > UINT256_MAX:
        raise DecodeError("packed semver is not a uint256")
    fields = (
        ("major", (value >> 64) & UINT32_MAX),
        ("minor", (value >> 32) & UINT32_MAX),
        ("patch", value & UINT32_MAX),
    )
    for name, field in fields:
        if field > UINT32_MAX:
            raise DecodeError(f"semver {name} does not fit into u32")
    return fields[0][1], fields[1][1], fields[2][1]


def format_semver(version: Tuple[int, int, int]) -> str:
    major, minor, patch = version
    return f"{major}.{minor}.{patch}"


def is_zero_address(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS
