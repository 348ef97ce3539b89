"""
Natrium Cryptographic Module

Provides the message-encryption core:
- Symmetric AEAD (AEGIS-256, XChaCha20-BLAKE2b, XChaCha20-Poly1305,
  AES-256-GCM, legacy XSalsa20-Poly1305)
- X25519 key exchange with directional session keys
- Asymmetric authenticated and anonymous (sealed) encryption
- Multi-recipient envelope encryption
- Ed25519 signatures and keyed BLAKE2b MACs

Decryption never raises for a forged or mis-keyed message; it returns None.
"""

from .algorithms import (
    AsymmetricAlgorithm,
    SymmetricAlgorithm,
    parse_asymmetric,
    parse_symmetric,
)

from .asymmetric import Asymmetric

from .binary import (
    Ciphertext,
    MessageSignature,
    Nonce,
)

from .encoding import Encoding

from .envelope import (
    decrypt_for_recipient,
    encrypt_for_recipients,
)

from .errors import (
    AlgorithmUnavailable,
    CryptoError,
    CryptoLogicError,
    EncodingError,
    InvalidKeyLength,
    MalformedMessage,
    SerializationProhibited,
    UnsupportedOperation,
)

from .key_exchange import KeyExchange

from .keys import (
    EncryptionKeyPair,
    EncryptionPublicKey,
    EncryptionSecretKey,
    SharedKey,
    SignatureKeyPair,
    SignaturePublicKey,
    SignatureSecretKey,
)

from .messages import (
    EncryptedMessage,
    EncryptedMessageBox,
    MultipleRecipientMessageBox,
    SealedMessageBox,
)

from .symmetric import Symmetric

__all__ = [
    # Algorithms
    'AsymmetricAlgorithm',
    'SymmetricAlgorithm',
    'parse_asymmetric',
    'parse_symmetric',
    # Services
    'Asymmetric',
    'Symmetric',
    'KeyExchange',
    # Values
    'Ciphertext',
    'MessageSignature',
    'Nonce',
    'Encoding',
    # Keys
    'EncryptionKeyPair',
    'EncryptionPublicKey',
    'EncryptionSecretKey',
    'SharedKey',
    'SignatureKeyPair',
    'SignaturePublicKey',
    'SignatureSecretKey',
    # Messages
    'EncryptedMessage',
    'EncryptedMessageBox',
    'MultipleRecipientMessageBox',
    'SealedMessageBox',
    # Envelope
    'encrypt_for_recipients',
    'decrypt_for_recipient',
    # Errors
    'AlgorithmUnavailable',
    'CryptoError',
    'CryptoLogicError',
    'EncodingError',
    'InvalidKeyLength',
    'MalformedMessage',
    'SerializationProhibited',
    'UnsupportedOperation',
]
