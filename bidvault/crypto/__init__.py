"""
Identity primitives for BidVault.

Participant identities are Ethereum-style addresses: the last 20 bytes of
keccak256 over a secp256k1 public key, written as 0x-prefixed hex. Mixed-case
addresses carry an EIP-55 checksum, which is verified before an address is
accepted; the checksummed form is the canonical one used as a storage key.
"""

import re
import secrets
from dataclasses import dataclass

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# =============================================================================
# Constants
# =============================================================================

# Order of the secp256k1 base point; private keys live in [1, N-1]
CURVE_ORDER = secp256k1.N

ADDRESS_BYTES = 20
ADDRESS_HEX_LENGTH = 2 + 2 * ADDRESS_BYTES

_HEX_BODY = re.compile(r"[0-9a-fA-F]{40}")


def keccak256(data: bytes) -> bytes:
    """Keccak-256 as used by Ethereum (pre-NIST padding, not SHA3-256)."""
    return keccak.new(data=data, digest_bits=256).digest()


# =============================================================================
# Keys
# =============================================================================


@dataclass
class KeyPair:
    """
    A secp256k1 keypair.

    Attributes:
        private_key: 32-byte big-endian scalar
        public_key: 64-byte uncompressed point, x then y
    """
    private_key: bytes
    public_key: bytes

    @property
    def address(self) -> str:
        return address_from_public_key(self.public_key)


def public_key_from_private(private_key: bytes) -> bytes:
    """Multiply the generator by private_key; returns x || y."""
    if len(private_key) != 32:
        raise ValueError(f"private key must be 32 bytes, got {len(private_key)}")
    x, y = secp256k1.privtopub(private_key)
    return x.to_bytes(32, "big") + y.to_bytes(32, "big")


def generate_keypair() -> KeyPair:
    """Fresh random keypair; used for test accounts and contract addresses."""
    scalar = 1 + secrets.randbelow(CURVE_ORDER - 1)
    private_key = scalar.to_bytes(32, "big")
    return KeyPair(private_key, public_key_from_private(private_key))


# =============================================================================
# Addresses
# =============================================================================


def to_checksum_address(address: str) -> str:
    """
    Encode an address with its EIP-55 mixed-case checksum.

    Each hex letter is upper-cased when the matching nibble of
    keccak256(lowercase_hex) is >= 8.
    """
    body = address[2:].lower() if address[:2] in ("0x", "0X") else address.lower()
    digest = keccak256(body.encode("ascii")).hex()
    return "0x" + "".join(
        ch.upper() if ch.isalpha() and int(digest[i], 16) >= 8 else ch
        for i, ch in enumerate(body)
    )


def address_from_public_key(public_key: bytes) -> str:
    """Checksummed address of a 64-byte public key."""
    if len(public_key) != 64:
        raise ValueError(f"public key must be 64 bytes, got {len(public_key)}")
    return to_checksum_address(keccak256(public_key)[-ADDRESS_BYTES:].hex())


def is_valid_address(address: str) -> bool:
    """
    Check the address format.

    All-lowercase and all-uppercase bodies are accepted as-is; mixed case
    must match the EIP-55 checksum.
    """
    if not isinstance(address, str) or len(address) != ADDRESS_HEX_LENGTH:
        return False
    prefix, body = address[:2], address[2:]
    if prefix != "0x" or not _HEX_BODY.fullmatch(body):
        return False
    if body in (body.lower(), body.upper()):
        return True
    return to_checksum_address(address) == address
