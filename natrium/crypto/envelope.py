"""
Natrium Multi-Recipient Envelope Encryption

Encrypts one message for many recipients without re-encrypting the body:

Protocol:
1. Generate a fresh 256-bit content key
2. Encrypt the plaintext once with the content key (symmetric)
3. Add the sender's own public key to the recipient list
4. Wrap the raw content key for each recipient (asymmetric, authenticated)
5. Package sender key, wrapped keys and the body

Recipients find their wrapped key by public key, unwrap it with their
key pair and the sender's public key, then decrypt the body once.

SECURITY NOTES:
- The content key is wiped as soon as the last recipient key is wrapped
- Every wrapped key is authenticated to the sender
- A missing entry and a failed decryption are indistinguishable (None)
"""

import logging
from typing import Iterable, List, Optional

from .algorithms import AsymmetricAlgorithm, SymmetricAlgorithm
from .asymmetric import get_algorithm as get_asymmetric
from .keys import EncryptionKeyPair, EncryptionPublicKey, SharedKey
from .messages import MultipleRecipientMessageBox
from .symmetric import get_algorithm as get_symmetric


logger = logging.getLogger(__name__)


def _with_sender(
    public_keys: Iterable[EncryptionPublicKey],
    sender_public_key: EncryptionPublicKey,
) -> List[EncryptionPublicKey]:
    recipients: List[EncryptionPublicKey] = []
    for public_key in public_keys:
        if public_key not in recipients:
            recipients.append(public_key)
    if sender_public_key not in recipients:
        recipients.append(sender_public_key)
    return recipients


def encrypt_for_recipients(
    key_pair: EncryptionKeyPair,
    public_keys: Iterable[EncryptionPublicKey],
    plaintext: bytes,
    aad: bytes = b"",
    asymmetric_algorithm: AsymmetricAlgorithm = AsymmetricAlgorithm.X25519_AEGIS256,
    symmetric_algorithm: SymmetricAlgorithm = SymmetricAlgorithm.AEGIS256,
) -> MultipleRecipientMessageBox:
    """
    Encrypt ``plaintext`` once for every key in ``public_keys`` plus the sender.

    Args:
        key_pair: Sender's encryption key pair
        public_keys: Recipient public keys (duplicates are ignored)
        plaintext: Data to encrypt
        aad: Additional authenticated data bound to the body
        asymmetric_algorithm: Algorithm used to wrap the content key
        symmetric_algorithm: Algorithm used to encrypt the body

    Returns:
        MultipleRecipientMessageBox: The envelope

    Raises:
        CryptoLogicError: On AAD with a non-AEAD body algorithm
    """
    asymmetric = get_asymmetric(asymmetric_algorithm)
    recipients = _with_sender(public_keys, key_pair.public_key)

    with SharedKey.generate() as content_key:
        message = get_symmetric(symmetric_algorithm).encrypt(content_key, plaintext, aad)
        encapsulated_keys = [
            asymmetric.encrypt(key_pair, public_key, bytes(content_key))
            for public_key in recipients
        ]

    logger.debug(
        "Encrypted %d-byte message for %d recipients (%s / %s)",
        len(plaintext), len(recipients), asymmetric_algorithm.value, symmetric_algorithm.value,
    )

    return MultipleRecipientMessageBox(
        algorithm=asymmetric_algorithm,
        sender_public_key=key_pair.public_key,
        encapsulated_keys=encapsulated_keys,
        message=message,
    )


def decrypt_for_recipient(
    key_pair: EncryptionKeyPair,
    envelope: MultipleRecipientMessageBox,
    aad: bytes = b"",
) -> Optional[bytes]:
    """
    Decrypt an envelope as one of its recipients.

    Returns:
        bytes: The plaintext, or None if ``key_pair`` is not a recipient or
        any layer fails to authenticate
    """
    box = envelope.find(key_pair.public_key)
    if box is None:
        logger.debug("No wrapped key for this recipient")
        return None

    wrapped = get_asymmetric(envelope.algorithm).decrypt(
        key_pair, envelope.sender_public_key, box
    )
    if wrapped is None or len(wrapped) != SharedKey.LENGTH:
        return None

    with SharedKey(wrapped) as content_key:
        return get_symmetric(envelope.message.algorithm).decrypt(content_key, envelope.message, aad)
