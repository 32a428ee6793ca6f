"""Ed25519 key material and multibase encoding for peer DIDs.

Peer DIDs created by this package use numalgo 0: the DID is the inception
key itself, encoded exactly like a ``did:key`` identifier.

Encoding
--------
1. Generate an Ed25519 public key (32 raw bytes).
2. Prepend the Ed25519 multicodec prefix: ``0xed 0x01`` (2 bytes).
3. Encode the 34-byte result with base58btc.
4. Prefix the encoded string with ``z`` (the multibase indicator for base58btc).
"""
from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

# Multicodec prefix for Ed25519 public keys (varint-encoded 0xed01)
ED25519_MULTICODEC_PREFIX: bytes = b"\xed\x01"

_BASE58_ALPHABET: str = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def base58btc_encode(data: bytes) -> str:
    """Encode *data* to a base58btc string."""
    n = int.from_bytes(data, "big")
    result: list[str] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_BASE58_ALPHABET[remainder])
    # Leading zero bytes are carried as '1' characters
    for byte in data:
        if byte != 0:
            break
        result.append("1")
    return "".join(reversed(result))


def base58btc_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    ValueError
        If the string contains a character not in the base58btc alphabet.
    """
    n = 0
    for char in encoded:
        index = _BASE58_ALPHABET.find(char)
        if index < 0:
            raise ValueError(
                f"Invalid base58btc character {char!r} in encoded string {encoded!r}"
            )
        n = n * 58 + index
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = len(encoded) - len(encoded.lstrip("1"))
    return b"\x00" * pad_size + body


def multibase_ed25519(public_key: bytes) -> str:
    """Return the ``z``-prefixed multibase form of an Ed25519 public key."""
    return "z" + base58btc_encode(ED25519_MULTICODEC_PREFIX + public_key)


def decode_multibase_ed25519(value: str) -> bytes:
    """Recover the raw public key from :func:`multibase_ed25519` output.

    Raises
    ------
    ValueError
        If the value is not base58btc multibase or not an Ed25519 key.
    """
    if not value.startswith("z") or len(value) < 2:
        raise ValueError(f"Expected a base58btc multibase value, got {value!r}")
    decoded = base58btc_decode(value[1:])
    if not decoded.startswith(ED25519_MULTICODEC_PREFIX):
        raise ValueError(
            f"Unsupported multicodec prefix 0x{decoded[:2].hex()} in {value!r}. "
            "Only Ed25519 (0xed01) keys are supported."
        )
    public_key = decoded[len(ED25519_MULTICODEC_PREFIX):]
    if len(public_key) != 32:
        raise ValueError(
            f"Ed25519 public key must be 32 bytes, got {len(public_key)} in {value!r}"
        )
    return public_key


class Ed25519KeyManager:
    """Generates Ed25519 keypairs as raw bytes.

    Example
    -------
    ::

        manager = Ed25519KeyManager()
        private_bytes, public_bytes = manager.generate_keypair()
    """

    def generate_keypair(self) -> tuple[bytes, bytes]:
        """Generate a new Ed25519 keypair.

        Returns
        -------
        tuple[bytes, bytes]
            A ``(private_key_bytes, public_key_bytes)`` pair, both 32 bytes.
        """
        private_key = Ed25519PrivateKey.generate()
        private_bytes = private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return private_bytes, public_bytes


__all__ = [
    "ED25519_MULTICODEC_PREFIX",
    "Ed25519KeyManager",
    "base58btc_decode",
    "base58btc_encode",
    "decode_multibase_ed25519",
    "multibase_ed25519",
]
