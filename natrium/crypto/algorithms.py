"""
Natrium Algorithm Identifiers

Symmetric and asymmetric algorithm enums, with the fixed sizes of each
construction. The enums carry no behaviour; the registries in
symmetric.py and asymmetric.py map them to implementations.
"""

import enum

from .primitives import (
    AEGIS256_NONCE_SIZE,
    AEGIS256_TAG_SIZE,
    AES256GCM_NONCE_SIZE,
    AES256GCM_TAG_SIZE,
    BLAKE2B_SIZE,
    POLY1305_TAG_SIZE,
    XCHACHA20_NONCE_SIZE,
    XSALSA20_NONCE_SIZE,
)


# Split-key construction: salt (32) || xor nonce (24)
XCHACHA20_BLAKE2B_SALT_SIZE = 32  # bytes
XCHACHA20_BLAKE2B_NONCE_SIZE = XCHACHA20_BLAKE2B_SALT_SIZE + XCHACHA20_NONCE_SIZE
XCHACHA20_BLAKE2B_TAG_SIZE = BLAKE2B_SIZE


class SymmetricAlgorithm(enum.Enum):
    """Symmetric AEAD constructions."""
    AEGIS256 = "aegis-256"
    XCHACHA20_BLAKE2B = "xchacha20-blake2b"
    XCHACHA20_POLY1305 = "xchacha20-poly1305-ietf"
    AES256_GCM = "aes-256-gcm"
    XSALSA20_POLY1305 = "xsalsa20-poly1305"

    @property
    def nonce_size(self) -> int:
        return _SYMMETRIC_SIZES[self][0]

    @property
    def tag_size(self) -> int:
        return _SYMMETRIC_SIZES[self][1]

    @property
    def min_ciphertext_size(self) -> int:
        return self.nonce_size + self.tag_size

    @property
    def supports_aad(self) -> bool:
        return self is not SymmetricAlgorithm.XSALSA20_POLY1305


# (nonce, tag) in bytes
_SYMMETRIC_SIZES = {
    SymmetricAlgorithm.AEGIS256: (AEGIS256_NONCE_SIZE, AEGIS256_TAG_SIZE),
    SymmetricAlgorithm.XCHACHA20_BLAKE2B: (XCHACHA20_BLAKE2B_NONCE_SIZE, XCHACHA20_BLAKE2B_TAG_SIZE),
    SymmetricAlgorithm.XCHACHA20_POLY1305: (XCHACHA20_NONCE_SIZE, POLY1305_TAG_SIZE),
    SymmetricAlgorithm.AES256_GCM: (AES256GCM_NONCE_SIZE, AES256GCM_TAG_SIZE),
    SymmetricAlgorithm.XSALSA20_POLY1305: (XSALSA20_NONCE_SIZE, POLY1305_TAG_SIZE),
}


class AsymmetricAlgorithm(enum.Enum):
    """X25519 key exchange paired with one symmetric construction."""
    X25519_AEGIS256 = "x25519-aegis-256"
    X25519_XCHACHA20_BLAKE2B = "x25519-xchacha20-blake2b"
    X25519_XCHACHA20_POLY1305 = "x25519-xchacha20-poly1305-ietf"
    X25519_AES256_GCM = "x25519-aes-256-gcm"
    X25519_XSALSA20_POLY1305 = "x25519-xsalsa20-poly1305"

    @property
    def symmetric(self) -> SymmetricAlgorithm:
        return SymmetricAlgorithm(self.value[len("x25519-"):])


def parse_symmetric(name: str) -> SymmetricAlgorithm:
    """Look up a symmetric algorithm by value or enum member name."""
    return _parse(SymmetricAlgorithm, name)


def parse_asymmetric(name: str) -> AsymmetricAlgorithm:
    """Look up an asymmetric algorithm by value or enum member name."""
    return _parse(AsymmetricAlgorithm, name)


def _parse(enum_type, name):
    if isinstance(name, enum_type):
        return name
    key = str(name).strip()
    try:
        return enum_type(key.lower())
    except ValueError:
        pass
    try:
        return enum_type[key.upper().replace("-", "_")]
    except KeyError:
        raise ValueError(f"Unknown {enum_type.__name__}: {name!r}")
