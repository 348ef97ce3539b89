"""
Natrium Symmetric Encryption

Five interchangeable constructions sharing one contract:

    encrypt(key, plaintext, aad) -> EncryptedMessage(nonce, ciphertext)
    decrypt(key, message, aad)   -> plaintext or None

Algorithms:
- AEGIS-256: 256-bit nonce and tag (default)
- XChaCha20-BLAKE2b: key-committing encrypt-then-MAC with HKDF split keys
- XChaCha20-Poly1305-IETF
- AES-256-GCM: 96-bit nonce, interoperability only
- XSalsa20-Poly1305: legacy secretbox, no associated data

SECURITY NOTES:
- Nonces are always generated here, never accepted from callers
- decrypt returns None for every authentication failure, with no reason
- Short input returns None before any primitive is called
"""

import abc
import logging
from typing import Dict, Optional, Union

from .algorithms import (
    SymmetricAlgorithm,
    XCHACHA20_BLAKE2B_SALT_SIZE,
    XCHACHA20_BLAKE2B_TAG_SIZE,
)
from .binary import BytesLike, Ciphertext, MessageSignature, Nonce
from .errors import CryptoLogicError, InvalidKeyLength
from .keys import SharedKey
from .messages import EncryptedMessage
from .primitives import (
    BLAKE2B_SIZE,
    KEY_SIZE,
    aegis256_available,
    aegis256_decrypt,
    aegis256_encrypt,
    aes256gcm_available,
    aes256gcm_decrypt,
    aes256gcm_encrypt,
    blake2b_hash,
    constant_time_compare,
    hkdf_blake2b,
    pae,
    random_bytes,
    secretbox_decrypt,
    secretbox_encrypt,
    secure_zero,
    xchacha20_xor,
    xchacha20poly1305_decrypt,
    xchacha20poly1305_encrypt,
)


logger = logging.getLogger(__name__)

CiphertextInput = Union[EncryptedMessage, Ciphertext, bytes, bytearray]

# HKDF info labels for the split-key construction
ENCRYPTION_KEY_INFO = b"EncryptionKey"
AUTHENTICATION_KEY_INFO = b"AuthenticationKey"


def _key_bytes(key: Union[SharedKey, BytesLike]) -> bytes:
    data = bytes(key)
    if len(data) != KEY_SIZE:
        raise InvalidKeyLength(f"Symmetric key must be {KEY_SIZE} bytes, got {len(data)}")
    return data


class SymmetricEncryptionAlgorithm(abc.ABC):
    """
    Stateless strategy for one symmetric construction.

    Subclasses implement the nonce-explicit pair ``_encrypt_with_nonce`` /
    ``_decrypt_with_nonce``. The public methods add random nonce
    generation, framing, the AAD guard and the short-input rule.
    Sealing in asymmetric.py reuses the nonce-explicit pair with a
    nonce derived from the two public keys.
    """

    ALGORITHM: SymmetricAlgorithm

    @property
    def nonce_size(self) -> int:
        return self.ALGORITHM.nonce_size

    @property
    def tag_size(self) -> int:
        return self.ALGORITHM.tag_size

    @property
    def min_ciphertext_size(self) -> int:
        return self.ALGORITHM.min_ciphertext_size

    def available(self) -> bool:
        """Return True if the running platform supports this construction."""
        return True

    def encrypt(self, key: SharedKey, plaintext: bytes, aad: bytes = b"") -> EncryptedMessage:
        """
        Encrypt plaintext under a fresh random nonce.

        Args:
            key: 32-byte shared key
            plaintext: Data to encrypt
            aad: Additional authenticated data

        Returns:
            EncryptedMessage: nonce and ciphertext-with-tag

        Raises:
            CryptoLogicError: On bad key length or unsupported AAD
            AlgorithmUnavailable: If the primitive is missing
        """
        self._check_aad(aad)
        key = _key_bytes(key)
        nonce = random_bytes(self.nonce_size)
        ciphertext = self._encrypt_with_nonce(key, bytes(plaintext), nonce, bytes(aad))
        return EncryptedMessage(self.ALGORITHM, Ciphertext(ciphertext), Nonce(nonce))

    def decrypt(self, key: SharedKey, message: CiphertextInput, aad: bytes = b"") -> Optional[bytes]:
        """
        Verify and decrypt ``nonce || ciphertext``.

        Returns:
            bytes: The plaintext, or None if the message does not
            authenticate under this key and AAD

        Raises:
            CryptoLogicError: On bad key length or unsupported AAD
            AlgorithmUnavailable: If the primitive is missing
        """
        self._check_aad(aad)
        key = _key_bytes(key)
        data = bytes(message)
        if len(data) < self.min_ciphertext_size:
            return None
        nonce, ciphertext = data[:self.nonce_size], data[self.nonce_size:]
        plaintext = self._decrypt_with_nonce(key, ciphertext, nonce, bytes(aad))
        if plaintext is None:
            logger.debug("%s: authentication failed", self.ALGORITHM.value)
        return plaintext

    def _check_aad(self, aad: bytes) -> None:
        if aad and not self.ALGORITHM.supports_aad:
            raise CryptoLogicError(f"{self.name} is not an AEAD Construction")

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def _encrypt_with_nonce(self, key: bytes, plaintext: bytes, nonce: bytes, aad: bytes) -> bytes:
        """Return ciphertext-with-tag, excluding the nonce."""

    @abc.abstractmethod
    def _decrypt_with_nonce(self, key: bytes, ciphertext: bytes, nonce: bytes, aad: bytes) -> Optional[bytes]:
        """Return plaintext, or None on authentication failure."""


class Aegis256(SymmetricEncryptionAlgorithm):
    """AEGIS-256 with a random 256-bit nonce and a 256-bit tag."""

    ALGORITHM = SymmetricAlgorithm.AEGIS256

    def available(self) -> bool:
        return aegis256_available()

    def _encrypt_with_nonce(self, key, plaintext, nonce, aad):
        return aegis256_encrypt(plaintext, aad, nonce, key)

    def _decrypt_with_nonce(self, key, ciphertext, nonce, aad):
        return aegis256_decrypt(ciphertext, aad, nonce, key)


class XChaCha20Blake2b(SymmetricEncryptionAlgorithm):
    """
    Key-committing AEAD from the XChaCha20 stream cipher and keyed BLAKE2b.

    Construction:
        salt      = random(32)
        enc_key   = HKDF-BLAKE2b(key, info="EncryptionKey" || salt)
        auth_key  = HKDF-BLAKE2b(key, info="AuthenticationKey" || salt)
        ct        = XChaCha20(plaintext, xor_nonce, enc_key)
        tag       = BLAKE2b-256(PAE(salt, xor_nonce, aad, ct), key=auth_key)

    Wire format:
        salt (32) || xor_nonce (24) || ct || tag (32)

    The "nonce" of this construction is salt || xor_nonce. Decryption
    verifies the tag in constant time before any keystream is applied.
    """

    ALGORITHM = SymmetricAlgorithm.XCHACHA20_BLAKE2B

    @staticmethod
    def _split_keys(key: bytes, salt: bytes):
        enc_key = bytearray(hkdf_blake2b(key, KEY_SIZE, ENCRYPTION_KEY_INFO + salt))
        auth_key = bytearray(hkdf_blake2b(key, KEY_SIZE, AUTHENTICATION_KEY_INFO + salt))
        return enc_key, auth_key

    @staticmethod
    def _tag(auth_key: bytearray, salt: bytes, xor_nonce: bytes, aad: bytes, ciphertext: bytes) -> bytes:
        return blake2b_hash(
            pae(salt, xor_nonce, aad, ciphertext),
            digest_size=XCHACHA20_BLAKE2B_TAG_SIZE,
            key=bytes(auth_key),
        )

    def _encrypt_with_nonce(self, key, plaintext, nonce, aad):
        salt, xor_nonce = nonce[:XCHACHA20_BLAKE2B_SALT_SIZE], nonce[XCHACHA20_BLAKE2B_SALT_SIZE:]
        enc_key, auth_key = self._split_keys(key, salt)
        try:
            ciphertext = xchacha20_xor(plaintext, xor_nonce, bytes(enc_key))
            tag = self._tag(auth_key, salt, xor_nonce, aad, ciphertext)
        finally:
            secure_zero(enc_key)
            secure_zero(auth_key)
        return ciphertext + tag

    def _decrypt_with_nonce(self, key, ciphertext, nonce, aad):
        if len(ciphertext) < XCHACHA20_BLAKE2B_TAG_SIZE:
            return None
        salt, xor_nonce = nonce[:XCHACHA20_BLAKE2B_SALT_SIZE], nonce[XCHACHA20_BLAKE2B_SALT_SIZE:]
        body, tag = ciphertext[:-XCHACHA20_BLAKE2B_TAG_SIZE], ciphertext[-XCHACHA20_BLAKE2B_TAG_SIZE:]
        enc_key, auth_key = self._split_keys(key, salt)
        try:
            expected = self._tag(auth_key, salt, xor_nonce, aad, body)
            if not constant_time_compare(expected, tag):
                return None
            return xchacha20_xor(body, xor_nonce, bytes(enc_key))
        finally:
            secure_zero(enc_key)
            secure_zero(auth_key)


class XChaCha20Poly1305(SymmetricEncryptionAlgorithm):
    """XChaCha20-Poly1305-IETF with a random 192-bit nonce."""

    ALGORITHM = SymmetricAlgorithm.XCHACHA20_POLY1305

    def _encrypt_with_nonce(self, key, plaintext, nonce, aad):
        return xchacha20poly1305_encrypt(plaintext, aad, nonce, key)

    def _decrypt_with_nonce(self, key, ciphertext, nonce, aad):
        return xchacha20poly1305_decrypt(ciphertext, aad, nonce, key)


class Aes256Gcm(SymmetricEncryptionAlgorithm):
    """
    AES-256-GCM with a random 96-bit nonce.

    Exposed for interoperability. The short nonce limits the number of
    messages that may safely be encrypted under one key.
    """

    ALGORITHM = SymmetricAlgorithm.AES256_GCM

    def available(self) -> bool:
        return aes256gcm_available()

    def _encrypt_with_nonce(self, key, plaintext, nonce, aad):
        return aes256gcm_encrypt(plaintext, aad, nonce, key)

    def _decrypt_with_nonce(self, key, ciphertext, nonce, aad):
        return aes256gcm_decrypt(ciphertext, aad, nonce, key)


class XSalsa20Poly1305(SymmetricEncryptionAlgorithm):
    """
    Legacy crypto_secretbox. Not an AEAD: any non-empty AAD raises
    CryptoLogicError on both encrypt and decrypt.
    """

    ALGORITHM = SymmetricAlgorithm.XSALSA20_POLY1305

    @property
    def name(self) -> str:
        return "XSalsa20-Poly1305"

    def _encrypt_with_nonce(self, key, plaintext, nonce, aad):
        return secretbox_encrypt(plaintext, nonce, key)

    def _decrypt_with_nonce(self, key, ciphertext, nonce, aad):
        return secretbox_decrypt(ciphertext, nonce, key)


_REGISTRY: Dict[SymmetricAlgorithm, SymmetricEncryptionAlgorithm] = {
    impl.ALGORITHM: impl
    for impl in (
        Aegis256(),
        XChaCha20Blake2b(),
        XChaCha20Poly1305(),
        Aes256Gcm(),
        XSalsa20Poly1305(),
    )
}


def get_algorithm(algorithm: SymmetricAlgorithm) -> SymmetricEncryptionAlgorithm:
    """Return the implementation registered for ``algorithm``."""
    return _REGISTRY[algorithm]


class Symmetric:
    """
    Symmetric encryption and MAC service.

    The algorithm used for decryption is taken from the message when it
    is an EncryptedMessage, otherwise from the ``algorithm`` argument.
    """

    def __init__(self, default: SymmetricAlgorithm = SymmetricAlgorithm.AEGIS256):
        self.default = default

    def encrypt(
        self,
        key: SharedKey,
        plaintext: bytes,
        aad: bytes = b"",
        algorithm: Optional[SymmetricAlgorithm] = None,
    ) -> EncryptedMessage:
        return get_algorithm(algorithm or self.default).encrypt(key, plaintext, aad)

    def decrypt(
        self,
        key: SharedKey,
        message: CiphertextInput,
        aad: bytes = b"",
        algorithm: Optional[SymmetricAlgorithm] = None,
    ) -> Optional[bytes]:
        if isinstance(message, EncryptedMessage):
            algorithm = message.algorithm
        return get_algorithm(algorithm or self.default).decrypt(key, message, aad)

    def sign(self, key: SharedKey, message: bytes) -> MessageSignature:
        """Compute a 256-bit keyed BLAKE2b MAC over ``message``."""
        return MessageSignature(blake2b_hash(bytes(message), digest_size=BLAKE2B_SIZE, key=_key_bytes(key)))

    def verify(self, key: SharedKey, signature: MessageSignature, message: bytes) -> bool:
        """Check a MAC from :meth:`sign` in constant time."""
        expected = blake2b_hash(bytes(message), digest_size=BLAKE2B_SIZE, key=_key_bytes(key))
        return constant_time_compare(expected, bytes(signature))
