"""
Cryptographic helpers for fibprove.

This module provides:
- Keccak-256 hashing for verifying key digests and proof seals
- Hex conversion in the 0x-prefixed convention used by fixtures
- secp256k1 request signing for authenticated prover network calls

Design Notes:
-------------
Keccak-256 is used wherever a value ends up on-chain (verifying key
fingerprint, EVM verifier selector) to match EVM conventions.
Requester keys are secp256k1, the same curve the network uses to derive
requester addresses.
"""

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# secp256k1 curve order (number of points on the curve)
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: verifying key digests, proof seals, requester addresses.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Requester Keys
# =============================================================================


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    Derive public key from private key.

    Args:
        private_key: 32-byte private key

    Returns:
        64-byte uncompressed public key (x || y)
    """
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    public_key_point = secp256k1.privtopub(private_key)
    x_bytes = public_key_point[0].to_bytes(32, byteorder="big")
    y_bytes = public_key_point[1].to_bytes(32, byteorder="big")
    return x_bytes + y_bytes


def address_from_public_key(public_key: bytes) -> str:
    """Last 20 bytes of keccak256(public_key), 0x-prefixed."""
    return "0x" + keccak256(public_key)[-20:].hex()


def sign(message_hash: bytes, private_key: bytes) -> bytes:
    """
    Sign a message hash using ECDSA on secp256k1.

    Args:
        message_hash: 32-byte hash of the message to sign
        private_key: 32-byte private key

    Returns:
        65-byte signature (r || s || v), v in {27, 28}, with s in the lower half of the curve order
    """
    if len(message_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    v, r, s = secp256k1.ecdsa_raw_sign(message_hash, private_key)

    # Normalize s to the lower half of the curve order (EIP-2); negating s
    # flips the recovery parity
    if s > SECP256K1_ORDER // 2:
        s = SECP256K1_ORDER - s
        v = 55 - v

    return r.to_bytes(32, byteorder="big") + s.to_bytes(32, byteorder="big") + bytes([v])


def recover_public_key(message_hash: bytes, signature: bytes) -> bytes:
    """Recover the 64-byte public key from a 65-byte (r || s || v) signature."""
    if len(message_hash) != 32 or len(signature) != 65:
        raise ValueError("Expected 32-byte hash and 65-byte signature")

    r = int.from_bytes(signature[:32], byteorder="big")
    s = int.from_bytes(signature[32:64], byteorder="big")
    v = signature[64]

    x, y = secp256k1.ecdsa_raw_recover(message_hash, (v, r, s))
    return x.to_bytes(32, byteorder="big") + y.to_bytes(32, byteorder="big")


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to lowercase hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith("0x") or hex_str.startswith("0X"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)
