"""
Natrium Facade

Single entry point binding the app KeyChain and default algorithms to
the crypto core. Consuming code only needs this class.

Operations:
- hash / hmac                      BLAKE2b, keyed by a shared key
- encrypt / decrypt                symmetric, per-context shared key
- sign / verify                    keyed BLAKE2b MAC, per-context shared key
- encrypt_with_public_key / decrypt_with_secret_key
                                   authenticated X25519 encryption
- sign_with_secret_key / verify_with_public_key
                                   Ed25519 detached signatures
- seal / unseal                    anonymous encryption
- encrypt_for_multiple_public_keys / decrypt_from_multiple
                                   multi-recipient envelopes

Prefer authenticated encryption; seal only when the sender must stay
anonymous.
"""

from typing import Iterable, Optional, Union

from .config import Config
from .crypto.asymmetric import Asymmetric, BoxInput, SealedInput
from .crypto.binary import BinaryValue, MessageSignature
from .crypto.envelope import decrypt_for_recipient, encrypt_for_recipients
from .crypto.keys import EncryptionPublicKey, SignaturePublicKey
from .crypto.messages import (
    EncryptedMessage,
    EncryptedMessageBox,
    MultipleRecipientMessageBox,
    SealedMessageBox,
)
from .crypto.primitives import BLAKE2B_SIZE, blake2b_hash
from .crypto.symmetric import CiphertextInput, Symmetric
from .keychain import KeyChain, load_app_key


Text = Union[str, bytes, bytearray, BinaryValue]


def _bytes(value: Text) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Natrium:
    """
    Facade over the natrium crypto core.

    Args:
        keys: KeyChain holding the app key
        config: Default algorithms (default: Config())
    """

    def __init__(self, keys: KeyChain, config: Optional[Config] = None):
        self.keys = keys
        self.config = config or Config()
        self.symmetric = Symmetric(self.config.crypto.symmetric)
        self.asymmetric = Asymmetric(self.config.crypto.asymmetric)

    @classmethod
    def from_config(cls, config: Config, create_key: bool = False) -> "Natrium":
        """Build a facade from the app key file named in ``config``."""
        app_key = load_app_key(config.keys.key_file, create_if_missing=create_key)
        return cls(KeyChain(app_key), config)

    # Hashing

    def hash(self, plaintext: Text) -> bytes:
        """Unkeyed 256-bit BLAKE2b digest."""
        return blake2b_hash(_bytes(plaintext), digest_size=BLAKE2B_SIZE)

    def hmac(self, plaintext: Text, context: Optional[str] = None) -> bytes:
        """256-bit keyed BLAKE2b digest under the shared key for ``context``."""
        return blake2b_hash(
            _bytes(plaintext),
            digest_size=BLAKE2B_SIZE,
            key=bytes(self.keys.shared(context)),
        )

    # Symmetric

    def encrypt(
        self,
        plaintext: Text,
        context: Optional[str] = None,
        additional_data: Text = b"",
    ) -> EncryptedMessage:
        return self.symmetric.encrypt(
            self.keys.shared(context),
            _bytes(plaintext),
            _bytes(additional_data),
        )

    def decrypt(
        self,
        ciphertext: CiphertextInput,
        context: Optional[str] = None,
        additional_data: Text = b"",
    ) -> Optional[bytes]:
        return self.symmetric.decrypt(
            self.keys.shared(context),
            ciphertext,
            _bytes(additional_data),
        )

    def sign(self, plaintext: Text, context: Optional[str] = None) -> MessageSignature:
        return self.symmetric.sign(self.keys.shared(context), _bytes(plaintext))

    def verify(
        self,
        plaintext: Text,
        signature: MessageSignature,
        context: Optional[str] = None,
    ) -> bool:
        return self.symmetric.verify(self.keys.shared(context), signature, _bytes(plaintext))

    # Asymmetric

    def encrypt_with_public_key(
        self,
        public_key: EncryptionPublicKey,
        plaintext: Text,
        additional_data: Text = b"",
    ) -> EncryptedMessageBox:
        return self.asymmetric.encrypt(
            self.keys.encryption(),
            public_key,
            _bytes(plaintext),
            _bytes(additional_data),
        )

    def decrypt_with_secret_key(
        self,
        public_key: EncryptionPublicKey,
        ciphertext: BoxInput,
        additional_data: Text = b"",
    ) -> Optional[bytes]:
        """
        Decrypt a box from the holder of ``public_key``, authenticating
        them as the sender.
        """
        return self.asymmetric.decrypt(
            self.keys.encryption(),
            public_key,
            ciphertext,
            _bytes(additional_data),
        )

    def sign_with_secret_key(self, plaintext: Text) -> MessageSignature:
        """Create a 512-bit Ed25519 signature anyone with our public key can verify."""
        return self.asymmetric.sign(self.keys.signature(), _bytes(plaintext))

    def verify_with_public_key(
        self,
        public_key: SignaturePublicKey,
        signature: MessageSignature,
        plaintext: Text,
    ) -> bool:
        return self.asymmetric.verify(public_key, signature, _bytes(plaintext))

    def seal(
        self,
        public_key: EncryptionPublicKey,
        plaintext: Text,
        additional_data: Text = b"",
    ) -> SealedMessageBox:
        return self.asymmetric.seal(public_key, _bytes(plaintext), _bytes(additional_data))

    def unseal(self, ciphertext: SealedInput, additional_data: Text = b"") -> Optional[bytes]:
        return self.asymmetric.unseal(self.keys.encryption(), ciphertext, _bytes(additional_data))

    # Multi-recipient

    def encrypt_for_multiple_public_keys(
        self,
        public_keys: Iterable[EncryptionPublicKey],
        plaintext: Text,
        additional_data: Text = b"",
    ) -> MultipleRecipientMessageBox:
        """Encrypt once for every key in ``public_keys`` and for ourselves."""
        return encrypt_for_recipients(
            self.keys.encryption(),
            public_keys,
            _bytes(plaintext),
            _bytes(additional_data),
            asymmetric_algorithm=self.config.crypto.asymmetric,
            symmetric_algorithm=self.config.crypto.symmetric,
        )

    def decrypt_from_multiple(
        self,
        envelope: MultipleRecipientMessageBox,
        additional_data: Text = b"",
    ) -> Optional[bytes]:
        return decrypt_for_recipient(self.keys.encryption(), envelope, _bytes(additional_data))
