"""
Natrium Cryptographic Primitives

Low-level functions wrapping the underlying libraries behind one uniform
shape: every function takes and returns ``bytes``, every AEAD decrypt
returns None on authentication failure instead of raising.

SECURITY NOTES:
- All randomness from os.urandom (kernel CSPRNG)
- All comparisons use constant-time operations
- Derived key material is held in bytearrays and zeroed after use

Dependencies:
- cryptography (AES-256-GCM)
- PyNaCl (libsodium: BLAKE2b and HKDF-BLAKE2b, XChaCha20-Poly1305, secretbox, box, kx)
- pycryptodome (raw XChaCha20 stream cipher)
- aeg (AEGIS-256, optional at runtime)
"""

import os
import hmac
import struct
import logging
from functools import lru_cache
from typing import Optional

import nacl.bindings
import nacl.encoding
import nacl.exceptions
import nacl.hash
from Crypto.Cipher import ChaCha20
from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

try:
    from aeg import aegis256 as _aegis256
except (ImportError, OSError):
    _aegis256 = None

from .errors import AlgorithmUnavailable, CryptoLogicError


logger = logging.getLogger(__name__)


# Key and hash constants
KEY_SIZE = 32  # bytes, every symmetric key in the package
X25519_KEY_SIZE = 32  # bytes
ED25519_SECRET_KEY_SIZE = 64  # bytes (seed || public)
ED25519_SIGNATURE_SIZE = 64  # bytes
BLAKE2B_SIZE = 32  # bytes, default generichash output
BLAKE2B_MIN_SIZE = 16  # bytes
BLAKE2B_MAX_SIZE = 64  # bytes

# AEAD constants
AEGIS256_NONCE_SIZE = 32  # bytes
AEGIS256_TAG_SIZE = 32  # bytes
AES256GCM_NONCE_SIZE = 12  # bytes
AES256GCM_TAG_SIZE = 16  # bytes
XCHACHA20_NONCE_SIZE = 24  # bytes
XSALSA20_NONCE_SIZE = 24  # bytes
POLY1305_TAG_SIZE = 16  # bytes
SEALED_BOX_OVERHEAD = 48  # bytes, ephemeral public key + Poly1305 tag


def random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of random bytes to generate

    Returns:
        bytes: Cryptographically secure random bytes

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError("Length must be non-negative")
    return os.urandom(length)


def blake2b_hash(
    data: bytes,
    digest_size: int = BLAKE2B_SIZE,
    key: Optional[bytes] = None,
) -> bytes:
    """
    Compute a BLAKE2b digest, keyed when ``key`` is given.

    This is libsodium's ``crypto_generichash``, so keyed output is a real
    BLAKE2b MAC and matches other libsodium bindings byte for byte.

    Args:
        data: Data to hash
        digest_size: Output size in bytes (16-64, default 32)
        key: Optional MAC key (16-64 bytes)

    Returns:
        bytes: BLAKE2b digest

    Raises:
        ValueError: If parameters are out of range
    """
    if not BLAKE2B_MIN_SIZE <= digest_size <= BLAKE2B_MAX_SIZE:
        raise ValueError("Digest size must be 16-64 bytes")

    if key is not None and not BLAKE2B_MIN_SIZE <= len(key) <= BLAKE2B_MAX_SIZE:
        raise ValueError("Key must be 16-64 bytes")

    return nacl.hash.blake2b(
        bytes(data),
        digest_size=digest_size,
        key=bytes(key) if key is not None else b"",
        encoder=nacl.encoding.RawEncoder,
    )


def hkdf_blake2b(
    input_key_material: bytes,
    length: int,
    info: bytes,
    salt: Optional[bytes] = None,
) -> bytes:
    """
    Derive key material using HKDF (RFC 5869) with keyed BLAKE2b as the PRF.

    Keyed BLAKE2b-256 takes the place of HMAC in both steps:

        PRK  = BLAKE2b(ikm, key=salt)          salt defaults to 32 zero bytes
        T(i) = BLAKE2b(T(i-1) || info || i, key=PRK)
        OKM  = T(1) || T(2) || ... truncated to length

    A 32-byte request is therefore a single expand block,
    BLAKE2b(info || 0x01, key=PRK), which is what other libsodium
    implementations of the split-key construction compute.

    Args:
        input_key_material: Source key material
        length: Desired output length in bytes
        info: Context string for domain separation
        salt: Optional extract salt (16-64 bytes)

    Returns:
        bytes: Derived key material

    Raises:
        ValueError: If length or salt is out of range
    """
    if length < 1:
        raise ValueError("Length must be at least 1")

    if length > 255 * BLAKE2B_SIZE:
        raise ValueError("Length too large for HKDF")

    if not salt:
        salt = bytes(KEY_SIZE)

    prk = bytearray(blake2b_hash(bytes(input_key_material), key=salt))
    okm = bytearray()
    block = b""
    try:
        for counter in range(1, 256):
            block = blake2b_hash(block + bytes(info) + bytes([counter]), key=bytes(prk))
            okm += block
            if len(okm) >= length:
                break
        return bytes(okm[:length])
    finally:
        secure_zero(prk)
        secure_zero(okm)


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Comparison time depends only on the length of the inputs, never on
    where they differ.
    """
    return hmac.compare_digest(bytes(a), bytes(b))


def secure_zero(data: bytearray) -> None:
    """
    Overwrite a bytearray with zeros in place.

    Note: This is best-effort. Immutable ``bytes`` copies handed to C
    libraries cannot be reached from here.
    """
    for i in range(len(data)):
        data[i] = 0


def pae(*parts: bytes) -> bytes:
    """
    Pre-Authentication Encoding of an ordered list of byte strings.

    PAE(p0, p1, ...) = LE64(count) || LE64(len(p0)) || p0 || LE64(len(p1)) || p1 ...

    Used only as MAC input, never transmitted. Length prefixes make the
    encoding injective, so moving bytes between fields changes the output.
    """
    encoded = [struct.pack("<Q", len(parts))]
    for part in parts:
        encoded.append(struct.pack("<Q", len(part)))
        encoded.append(bytes(part))
    return b"".join(encoded)


def xchacha20_xor(data: bytes, nonce: bytes, key: bytes) -> bytes:
    """
    XOR data with the XChaCha20 keystream (block counter 0).

    pycryptodome switches to XChaCha20 when given a 24-byte nonce; the
    keystream is identical to libsodium's crypto_stream_xchacha20_xor.
    """
    if len(nonce) != XCHACHA20_NONCE_SIZE:
        raise ValueError(f"XChaCha20 nonce must be {XCHACHA20_NONCE_SIZE} bytes")
    cipher = ChaCha20.new(key=bytes(key), nonce=bytes(nonce))
    return cipher.encrypt(bytes(data))


# =============================================================================
# AEGIS-256
# =============================================================================

def aegis256_available() -> bool:
    """Return True if the AEGIS-256 backend could be loaded."""
    return _aegis256 is not None


def _require_aegis256():
    if _aegis256 is None:
        raise AlgorithmUnavailable("AEGIS-256 is not supported on this platform")
    return _aegis256


def aegis256_encrypt(plaintext: bytes, aad: bytes, nonce: bytes, key: bytes) -> bytes:
    """Encrypt with AEGIS-256, returning ciphertext || 32-byte tag."""
    aegis = _require_aegis256()
    return bytes(aegis.encrypt(key, nonce, plaintext, aad, maclen=AEGIS256_TAG_SIZE))


def aegis256_decrypt(ciphertext: bytes, aad: bytes, nonce: bytes, key: bytes) -> Optional[bytes]:
    """Decrypt AEGIS-256 ciphertext || tag, or return None if it does not verify."""
    aegis = _require_aegis256()
    if len(ciphertext) < AEGIS256_TAG_SIZE:
        return None
    try:
        return bytes(aegis.decrypt(key, nonce, ciphertext, aad, maclen=AEGIS256_TAG_SIZE))
    except ValueError:
        return None


# =============================================================================
# AES-256-GCM
# =============================================================================

@lru_cache(maxsize=1)
def aes256gcm_available() -> bool:
    """Return True if the OpenSSL backend provides AES-256-GCM."""
    try:
        AESGCM(bytes(KEY_SIZE))
    except UnsupportedAlgorithm:
        logger.warning("AES-256-GCM is unavailable in the cryptography backend")
        return False
    return True


def _require_aes256gcm() -> None:
    if not aes256gcm_available():
        raise AlgorithmUnavailable("AES-256-GCM is not supported on this platform")


def aes256gcm_encrypt(plaintext: bytes, aad: bytes, nonce: bytes, key: bytes) -> bytes:
    """Encrypt with AES-256-GCM, returning ciphertext || 16-byte tag."""
    _require_aes256gcm()
    return AESGCM(key).encrypt(nonce, plaintext, aad or None)


def aes256gcm_decrypt(ciphertext: bytes, aad: bytes, nonce: bytes, key: bytes) -> Optional[bytes]:
    """Decrypt AES-256-GCM ciphertext || tag, or return None if it does not verify."""
    _require_aes256gcm()
    if len(ciphertext) < AES256GCM_TAG_SIZE:
        return None
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, aad or None)
    except InvalidTag:
        return None


# =============================================================================
# XChaCha20-Poly1305-IETF
# =============================================================================

def xchacha20poly1305_encrypt(plaintext: bytes, aad: bytes, nonce: bytes, key: bytes) -> bytes:
    """Encrypt with XChaCha20-Poly1305-IETF, returning ciphertext || 16-byte tag."""
    return nacl.bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
        bytes(plaintext), bytes(aad), bytes(nonce), bytes(key)
    )


def xchacha20poly1305_decrypt(ciphertext: bytes, aad: bytes, nonce: bytes, key: bytes) -> Optional[bytes]:
    """Decrypt XChaCha20-Poly1305-IETF ciphertext || tag, or return None."""
    if len(ciphertext) < POLY1305_TAG_SIZE:
        return None
    try:
        return nacl.bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
            bytes(ciphertext), bytes(aad), bytes(nonce), bytes(key)
        )
    except nacl.exceptions.CryptoError:
        return None


# =============================================================================
# XSalsa20-Poly1305 (secretbox, box, sealed box)
# =============================================================================

def secretbox_encrypt(plaintext: bytes, nonce: bytes, key: bytes) -> bytes:
    """Encrypt with crypto_secretbox, returning tag || ciphertext."""
    return nacl.bindings.crypto_secretbox(bytes(plaintext), bytes(nonce), bytes(key))


def secretbox_decrypt(ciphertext: bytes, nonce: bytes, key: bytes) -> Optional[bytes]:
    """Open a crypto_secretbox, or return None."""
    if len(ciphertext) < POLY1305_TAG_SIZE:
        return None
    try:
        return nacl.bindings.crypto_secretbox_open(bytes(ciphertext), bytes(nonce), bytes(key))
    except nacl.exceptions.CryptoError:
        return None


def box_encrypt(plaintext: bytes, nonce: bytes, public_key: bytes, secret_key: bytes) -> bytes:
    """
    Encrypt with crypto_box (X25519 + XSalsa20-Poly1305).

    Raises:
        CryptoLogicError: If libsodium rejects the peer public key (low order)
    """
    try:
        return nacl.bindings.crypto_box(bytes(plaintext), bytes(nonce), bytes(public_key), bytes(secret_key))
    except nacl.exceptions.CryptoError:
        raise CryptoLogicError("crypto_box failed: invalid peer public key")


def box_decrypt(ciphertext: bytes, nonce: bytes, public_key: bytes, secret_key: bytes) -> Optional[bytes]:
    """Open a crypto_box, or return None."""
    if len(ciphertext) < POLY1305_TAG_SIZE:
        return None
    try:
        return nacl.bindings.crypto_box_open(
            bytes(ciphertext), bytes(nonce), bytes(public_key), bytes(secret_key)
        )
    except nacl.exceptions.CryptoError:
        return None


def box_seal(plaintext: bytes, public_key: bytes) -> bytes:
    """
    Anonymous crypto_box_seal, returning ephemeral_pk || tag || ciphertext.

    Raises:
        CryptoLogicError: If libsodium rejects the recipient public key (low order)
    """
    try:
        return nacl.bindings.crypto_box_seal(bytes(plaintext), bytes(public_key))
    except nacl.exceptions.CryptoError:
        raise CryptoLogicError("crypto_box_seal failed: invalid recipient public key")


def box_seal_open(ciphertext: bytes, public_key: bytes, secret_key: bytes) -> Optional[bytes]:
    """Open a crypto_box_seal message, or return None."""
    if len(ciphertext) < SEALED_BOX_OVERHEAD:
        return None
    try:
        return nacl.bindings.crypto_box_seal_open(bytes(ciphertext), bytes(public_key), bytes(secret_key))
    except nacl.exceptions.CryptoError:
        return None
