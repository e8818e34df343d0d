"""
Input/output codec for the Fibonacci guest program.

Input:  the guest reads a single u32 `n` from its stdin, serialized
        little-endian (4 bytes).
Output: the guest commits the ABI encoding of (uint32 n, uint32 a, uint32 b),
        i.e. three 32-byte big-endian words, the layout an EVM verifier
        contract decodes with abi.decode.
"""

import struct
from dataclasses import dataclass
from typing import List

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError

from fibprove.core.errors import DecodeError

PUBLIC_VALUES_TYPES = ["uint32", "uint32", "uint32"]
PUBLIC_VALUES_SIZE = 32 * len(PUBLIC_VALUES_TYPES)

U32_MAX = 2**32 - 1


def check_u32(value: int, name: str = "n") -> int:
    """Validate an unsigned 32-bit integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"{name} must be in [0, {U32_MAX}], got {value}")
    return value


# =============================================================================
# Program Input
# =============================================================================


class ProgramStdin:
    """
    Input buffer handed to the guest program.

    Each write appends one length-delimited item; the guest reads them back
    in order.
    """

    def __init__(self):
        self.buffer: List[bytes] = []

    def write_u32(self, value: int) -> "ProgramStdin":
        self.buffer.append(struct.pack("<I", check_u32(value, "value")))
        return self

    def write_slice(self, data: bytes) -> "ProgramStdin":
        self.buffer.append(bytes(data))
        return self

    def to_hex(self) -> List[str]:
        """Wire form: one hex string per item."""
        return [item.hex() for item in self.buffer]

    def __len__(self) -> int:
        return len(self.buffer)

    def __eq__(self, other) -> bool:
        return isinstance(other, ProgramStdin) and self.buffer == other.buffer

    def __repr__(self) -> str:
        return f"ProgramStdin(items={len(self.buffer)})"


def encode_input(n: int) -> ProgramStdin:
    """Build the guest input for `n`. Total and lossless over u32."""
    return ProgramStdin().write_u32(n)


def decode_input_u32(item: bytes) -> int:
    """Read back a u32 written with ProgramStdin.write_u32."""
    if len(item) != 4:
        raise DecodeError(f"Expected 4-byte u32 input, got {len(item)} bytes")
    return struct.unpack("<I", item)[0]


# =============================================================================
# Public Values
# =============================================================================


@dataclass(frozen=True)
class PublicValues:
    """Committed output of the guest: n and the two Fibonacci values."""
    n: int
    a: int
    b: int

    def __post_init__(self):
        check_u32(self.n, "n")
        check_u32(self.a, "a")
        check_u32(self.b, "b")

    def to_bytes(self) -> bytes:
        """ABI-encode as (uint32, uint32, uint32)."""
        return abi_encode(PUBLIC_VALUES_TYPES, [self.n, self.a, self.b])

    @classmethod
    def from_bytes(cls, data: bytes) -> "PublicValues":
        return decode_public_values(data)


def decode_public_values(data: bytes) -> PublicValues:
    """
    Decode committed public values.

    Either all three fields parse or DecodeError is raised; there is no
    partial result.

    Raises:
        DecodeError: wrong length, non-zero padding, or out-of-range value
    """
    data = bytes(data)
    if len(data) != PUBLIC_VALUES_SIZE:
        raise DecodeError(
            f"Public values must be {PUBLIC_VALUES_SIZE} bytes, got {len(data)}"
        )
    try:
        n, a, b = abi_decode(PUBLIC_VALUES_TYPES, data)
    except DecodingError as e:
        raise DecodeError(f"Malformed public values: {e}") from e
    return PublicValues(n=n, a=a, b=b)
