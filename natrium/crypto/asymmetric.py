"""
Natrium Asymmetric Encryption

Each algorithm pairs X25519 key exchange with one symmetric construction
and offers two modes:

Authenticated (encrypt/decrypt):
    key  = KeyExchange.encryption(sender_pair, recipient_public)
    box  = EncryptedMessageBox(sender, recipient, symmetric.encrypt(key, ...))

Anonymous (seal/unseal):
    eph   = fresh EncryptionKeyPair
    key   = KeyExchange.encryption(eph, recipient_public)
    nonce = BLAKE2b(eph.public || recipient_public, digest_size=nonce_size)
    wire  = eph.public (32) || ciphertext_with_tag

The seal nonce is derived rather than random. It is safe because the
ephemeral key pair, and therefore the session key, is never reused.

Exceptions to the pattern:
- X25519-AES-256-GCM refuses seal/unseal (96-bit nonce)
- X25519-XSalsa20-Poly1305 uses libsodium crypto_box / crypto_box_seal
  for interoperability and refuses any associated data
"""

import abc
import logging
from typing import Dict, Optional, Union

import nacl.exceptions
import nacl.signing

from .algorithms import AsymmetricAlgorithm, SymmetricAlgorithm
from .binary import Ciphertext, MessageSignature, Nonce
from .errors import CryptoLogicError, UnsupportedOperation
from .key_exchange import KeyExchange
from .keys import (
    EncryptionKeyPair,
    EncryptionPublicKey,
    SignatureKeyPair,
    SignaturePublicKey,
)
from .messages import EncryptedMessageBox, SealedMessageBox
from .primitives import (
    X25519_KEY_SIZE,
    XSALSA20_NONCE_SIZE,
    blake2b_hash,
    box_decrypt,
    box_encrypt,
    box_seal,
    box_seal_open,
    random_bytes,
)
from .symmetric import SymmetricEncryptionAlgorithm, get_algorithm as get_symmetric


logger = logging.getLogger(__name__)

BoxInput = Union[EncryptedMessageBox, Ciphertext, bytes, bytearray]
SealedInput = Union[SealedMessageBox, Ciphertext, bytes, bytearray]


def sealing_nonce(
    ephemeral_public_key: EncryptionPublicKey,
    recipient_public_key: EncryptionPublicKey,
    size: int,
) -> bytes:
    """Deterministic seal nonce: BLAKE2b(ephemeral_public || recipient_public)."""
    return blake2b_hash(
        bytes(ephemeral_public_key) + bytes(recipient_public_key),
        digest_size=size,
    )


def seal_with(
    symmetric: SymmetricEncryptionAlgorithm,
    algorithm: AsymmetricAlgorithm,
    public_key: EncryptionPublicKey,
    plaintext: bytes,
    aad: bytes = b"",
) -> SealedMessageBox:
    """
    Anonymously encrypt to ``public_key`` with any symmetric construction
    that tolerates a derived nonce.

    The ephemeral secret key and the session key are wiped before return.
    """
    symmetric._check_aad(aad)
    with EncryptionKeyPair.generate() as ephemeral:
        nonce = sealing_nonce(ephemeral.public_key, public_key, symmetric.nonce_size)
        with KeyExchange.encryption(ephemeral, public_key) as key:
            ciphertext = symmetric._encrypt_with_nonce(bytes(key), bytes(plaintext), nonce, bytes(aad))

    return SealedMessageBox(
        algorithm=algorithm,
        ephemeral_public_key=ephemeral.public_key,
        recipient_public_key=public_key,
        ciphertext=Ciphertext(ciphertext),
    )


def unseal_with(
    symmetric: SymmetricEncryptionAlgorithm,
    key_pair: EncryptionKeyPair,
    ciphertext: SealedInput,
    aad: bytes = b"",
) -> Optional[bytes]:
    """
    Reverse :func:`seal_with` using only the recipient's key pair.

    Returns:
        bytes: The plaintext, or None if the message does not authenticate
    """
    symmetric._check_aad(aad)
    data = bytes(ciphertext)
    if len(data) < X25519_KEY_SIZE + symmetric.tag_size:
        return None

    ephemeral_public_key = EncryptionPublicKey(data[:X25519_KEY_SIZE])
    nonce = sealing_nonce(ephemeral_public_key, key_pair.public_key, symmetric.nonce_size)
    try:
        key = KeyExchange.decryption(key_pair, ephemeral_public_key)
    except CryptoLogicError:
        return None

    with key:
        return symmetric._decrypt_with_nonce(bytes(key), data[X25519_KEY_SIZE:], nonce, bytes(aad))


class AsymmetricEncryptionAlgorithm(abc.ABC):
    """Stateless strategy for one asymmetric algorithm."""

    ALGORITHM: AsymmetricAlgorithm

    @property
    def symmetric(self) -> SymmetricEncryptionAlgorithm:
        return get_symmetric(self.ALGORITHM.symmetric)

    def encrypt(
        self,
        key_pair: EncryptionKeyPair,
        public_key: EncryptionPublicKey,
        plaintext: bytes,
        aad: bytes = b"",
    ) -> EncryptedMessageBox:
        """
        Authenticated encryption from ``key_pair`` to ``public_key``.

        Raises:
            CryptoLogicError: On unsupported AAD or an invalid public key
        """
        symmetric = self.symmetric
        symmetric._check_aad(aad)
        with KeyExchange.encryption(key_pair, public_key) as key:
            message = symmetric.encrypt(key, plaintext, aad)

        return EncryptedMessageBox(
            algorithm=self.ALGORITHM,
            sender_public_key=key_pair.public_key,
            recipient_public_key=public_key,
            ciphertext=message.ciphertext,
            nonce=message.nonce,
        )

    def decrypt(
        self,
        key_pair: EncryptionKeyPair,
        public_key: EncryptionPublicKey,
        ciphertext: BoxInput,
        aad: bytes = b"",
    ) -> Optional[bytes]:
        """
        Decrypt a box sent by ``public_key`` to ``key_pair``.

        Returns:
            bytes: The plaintext, or None if the message does not authenticate
        """
        symmetric = self.symmetric
        symmetric._check_aad(aad)
        try:
            key = KeyExchange.decryption(key_pair, public_key)
        except CryptoLogicError:
            return None

        with key:
            return symmetric.decrypt(key, bytes(ciphertext), aad)

    def seal(self, public_key: EncryptionPublicKey, plaintext: bytes, aad: bytes = b"") -> SealedMessageBox:
        """Anonymous encryption to ``public_key``."""
        return seal_with(self.symmetric, self.ALGORITHM, public_key, plaintext, aad)

    def unseal(self, key_pair: EncryptionKeyPair, ciphertext: SealedInput, aad: bytes = b"") -> Optional[bytes]:
        """Open a sealed message addressed to ``key_pair``, or return None."""
        return unseal_with(self.symmetric, key_pair, ciphertext, aad)


class X25519Aegis256(AsymmetricEncryptionAlgorithm):
    ALGORITHM = AsymmetricAlgorithm.X25519_AEGIS256


class X25519XChaCha20Blake2b(AsymmetricEncryptionAlgorithm):
    ALGORITHM = AsymmetricAlgorithm.X25519_XCHACHA20_BLAKE2B


class X25519XChaCha20Poly1305(AsymmetricEncryptionAlgorithm):
    ALGORITHM = AsymmetricAlgorithm.X25519_XCHACHA20_POLY1305


class X25519Aes256Gcm(AsymmetricEncryptionAlgorithm):
    """Authenticated mode only. The 96-bit nonce is too short to seal with."""

    ALGORITHM = AsymmetricAlgorithm.X25519_AES256_GCM

    def seal(self, public_key, plaintext, aad=b""):
        raise UnsupportedOperation("Sealing is not supported with AES-256-GCM (Weak Nonce Length)")

    def unseal(self, key_pair, ciphertext, aad=b""):
        raise UnsupportedOperation("Sealing is not supported with AES-256-GCM (Weak Nonce Length)")


class X25519XSalsa20Poly1305(AsymmetricEncryptionAlgorithm):
    """
    Legacy libsodium crypto_box and crypto_box_seal.

    Wire formats match other libsodium bindings:
        encrypt: nonce (24) || tag (16) || ciphertext
        seal:    ephemeral_public_key (32) || tag (16) || ciphertext
    """

    ALGORITHM = AsymmetricAlgorithm.X25519_XSALSA20_POLY1305

    @staticmethod
    def _check_aad(aad: bytes) -> None:
        if aad:
            raise CryptoLogicError("XSalsa20-Poly1305 is not an AEAD Construction")

    def encrypt(self, key_pair, public_key, plaintext, aad=b""):
        self._check_aad(aad)
        nonce = random_bytes(XSALSA20_NONCE_SIZE)
        ciphertext = box_encrypt(bytes(plaintext), nonce, bytes(public_key), bytes(key_pair.secret_key))
        return EncryptedMessageBox(
            algorithm=self.ALGORITHM,
            sender_public_key=key_pair.public_key,
            recipient_public_key=public_key,
            ciphertext=Ciphertext(ciphertext),
            nonce=Nonce(nonce),
        )

    def decrypt(self, key_pair, public_key, ciphertext, aad=b""):
        self._check_aad(aad)
        data = bytes(ciphertext)
        if len(data) < SymmetricAlgorithm.XSALSA20_POLY1305.min_ciphertext_size:
            return None
        nonce, body = data[:XSALSA20_NONCE_SIZE], data[XSALSA20_NONCE_SIZE:]
        return box_decrypt(body, nonce, bytes(public_key), bytes(key_pair.secret_key))

    def seal(self, public_key, plaintext, aad=b""):
        self._check_aad(aad)
        sealed = box_seal(bytes(plaintext), bytes(public_key))
        return SealedMessageBox(
            algorithm=self.ALGORITHM,
            ephemeral_public_key=EncryptionPublicKey(sealed[:X25519_KEY_SIZE]),
            recipient_public_key=public_key,
            ciphertext=Ciphertext(sealed[X25519_KEY_SIZE:]),
        )

    def unseal(self, key_pair, ciphertext, aad=b""):
        self._check_aad(aad)
        return box_seal_open(bytes(ciphertext), bytes(key_pair.public_key), bytes(key_pair.secret_key))


_REGISTRY: Dict[AsymmetricAlgorithm, AsymmetricEncryptionAlgorithm] = {
    impl.ALGORITHM: impl
    for impl in (
        X25519Aegis256(),
        X25519XChaCha20Blake2b(),
        X25519XChaCha20Poly1305(),
        X25519Aes256Gcm(),
        X25519XSalsa20Poly1305(),
    )
}


def get_algorithm(algorithm: AsymmetricAlgorithm) -> AsymmetricEncryptionAlgorithm:
    """Return the implementation registered for ``algorithm``."""
    return _REGISTRY[algorithm]


class Asymmetric:
    """
    Asymmetric encryption and Ed25519 signature service.

    The algorithm used to decrypt or unseal is taken from the message box
    when one is given, otherwise from the ``algorithm`` argument.
    """

    def __init__(self, default: AsymmetricAlgorithm = AsymmetricAlgorithm.X25519_AEGIS256):
        self.default = default

    def encrypt(
        self,
        key_pair: EncryptionKeyPair,
        public_key: EncryptionPublicKey,
        plaintext: bytes,
        aad: bytes = b"",
        algorithm: Optional[AsymmetricAlgorithm] = None,
    ) -> EncryptedMessageBox:
        return get_algorithm(algorithm or self.default).encrypt(key_pair, public_key, plaintext, aad)

    def decrypt(
        self,
        key_pair: EncryptionKeyPair,
        public_key: EncryptionPublicKey,
        ciphertext: BoxInput,
        aad: bytes = b"",
        algorithm: Optional[AsymmetricAlgorithm] = None,
    ) -> Optional[bytes]:
        if isinstance(ciphertext, EncryptedMessageBox):
            algorithm = ciphertext.algorithm
        plaintext = get_algorithm(algorithm or self.default).decrypt(key_pair, public_key, ciphertext, aad)
        if plaintext is None:
            logger.debug("asymmetric decrypt: authentication failed")
        return plaintext

    def seal(
        self,
        public_key: EncryptionPublicKey,
        plaintext: bytes,
        aad: bytes = b"",
        algorithm: Optional[AsymmetricAlgorithm] = None,
    ) -> SealedMessageBox:
        return get_algorithm(algorithm or self.default).seal(public_key, plaintext, aad)

    def unseal(
        self,
        key_pair: EncryptionKeyPair,
        ciphertext: SealedInput,
        aad: bytes = b"",
        algorithm: Optional[AsymmetricAlgorithm] = None,
    ) -> Optional[bytes]:
        if isinstance(ciphertext, SealedMessageBox):
            algorithm = ciphertext.algorithm
        plaintext = get_algorithm(algorithm or self.default).unseal(key_pair, ciphertext, aad)
        if plaintext is None:
            logger.debug("unseal: authentication failed")
        return plaintext

    def sign(self, key_pair: SignatureKeyPair, message: bytes) -> MessageSignature:
        """Create a detached 64-byte Ed25519 signature."""
        signing_key = nacl.signing.SigningKey(key_pair.secret_key.seed)
        return MessageSignature(signing_key.sign(bytes(message)).signature)

    def verify(self, public_key: SignaturePublicKey, signature: MessageSignature, message: bytes) -> bool:
        """Check a detached Ed25519 signature. Never raises for a bad signature."""
        try:
            nacl.signing.VerifyKey(bytes(public_key)).verify(bytes(message), bytes(signature))
        except (nacl.exceptions.BadSignatureError, ValueError):
            return False
        return True
