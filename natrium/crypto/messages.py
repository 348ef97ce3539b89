"""
Natrium Message Formats

Wire formats:

    EncryptedMessage (symmetric):
        nonce || ciphertext_with_tag

    EncryptedMessageBox (asymmetric, authenticated):
        sender_public_key (32) || nonce || ciphertext_with_tag

    SealedMessageBox (asymmetric, anonymous):
        ephemeral_public_key (32) || ciphertext_with_tag

    MultipleRecipientMessageBox (JSON):
        {"v": 1, "alg": ..., "pub": sender,
         "k": [{"pub": recipient, "box": nonce || wrapped_key}, ...],
         "m": {"alg": ..., "n": nonce, "c": ciphertext}}

The algorithm identifier travels out of band for the binary formats.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from .algorithms import AsymmetricAlgorithm, SymmetricAlgorithm, parse_asymmetric, parse_symmetric
from .binary import Ciphertext, Nonce
from .encoding import DEFAULT_ENCODING, decode, encode
from .errors import CryptoLogicError, MalformedMessage
from .keys import EncryptionPublicKey
from .primitives import X25519_KEY_SIZE


MULTIPLE_RECIPIENT_VERSION = 1


@dataclass(frozen=True)
class EncryptedMessage:
    """Result of a symmetric encryption."""

    algorithm: SymmetricAlgorithm
    ciphertext: Ciphertext
    nonce: Nonce

    def __bytes__(self) -> bytes:
        return bytes(self.nonce) + bytes(self.ciphertext)

    def to_bytes(self) -> bytes:
        """Serialize as nonce || ciphertext."""
        return bytes(self)

    @classmethod
    def from_bytes(cls, algorithm: SymmetricAlgorithm, data: bytes) -> "EncryptedMessage":
        """
        Split nonce || ciphertext using the algorithm's nonce size.

        Raises:
            MalformedMessage: If data is shorter than nonce + tag
        """
        data = bytes(data)
        if len(data) < algorithm.min_ciphertext_size:
            raise MalformedMessage(f"Message too short for {algorithm.value}: {len(data)} bytes")
        nonce_size = algorithm.nonce_size
        return cls(algorithm, Ciphertext(data[nonce_size:]), Nonce(data[:nonce_size]))

    def to_dict(self) -> Dict[str, str]:
        return {
            "alg": self.algorithm.value,
            "n": self.nonce.export(),
            "c": self.ciphertext.export(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedMessage":
        try:
            return cls(
                parse_symmetric(data["alg"]),
                Ciphertext(decode(data["c"])),
                Nonce(decode(data["n"])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedMessage(f"Invalid encrypted message: {e}")


@dataclass(frozen=True)
class EncryptedMessageBox:
    """Authenticated encryption result between two identified parties."""

    algorithm: AsymmetricAlgorithm
    sender_public_key: EncryptionPublicKey
    recipient_public_key: EncryptionPublicKey
    ciphertext: Ciphertext
    nonce: Nonce

    def __bytes__(self) -> bytes:
        return bytes(self.nonce) + bytes(self.ciphertext)

    @property
    def message(self) -> EncryptedMessage:
        """The symmetric message inside the box."""
        return EncryptedMessage(self.algorithm.symmetric, self.ciphertext, self.nonce)

    def to_wire(self) -> bytes:
        """Serialize as sender_public_key || nonce || ciphertext."""
        return bytes(self.sender_public_key) + bytes(self)

    @classmethod
    def from_wire(
        cls,
        algorithm: AsymmetricAlgorithm,
        data: bytes,
        recipient_public_key: EncryptionPublicKey,
    ) -> "EncryptedMessageBox":
        """
        Parse sender_public_key || nonce || ciphertext.

        Raises:
            MalformedMessage: If data is too short
        """
        data = bytes(data)
        if len(data) < X25519_KEY_SIZE + algorithm.symmetric.min_ciphertext_size:
            raise MalformedMessage(f"Box too short for {algorithm.value}: {len(data)} bytes")
        message = EncryptedMessage.from_bytes(algorithm.symmetric, data[X25519_KEY_SIZE:])
        return cls(
            algorithm=algorithm,
            sender_public_key=EncryptionPublicKey(data[:X25519_KEY_SIZE]),
            recipient_public_key=recipient_public_key,
            ciphertext=message.ciphertext,
            nonce=message.nonce,
        )


@dataclass(frozen=True)
class SealedMessageBox:
    """Anonymous encryption result. The nonce is re-derived, never stored."""

    algorithm: AsymmetricAlgorithm
    ephemeral_public_key: EncryptionPublicKey
    recipient_public_key: EncryptionPublicKey
    ciphertext: Ciphertext

    def __bytes__(self) -> bytes:
        return bytes(self.ephemeral_public_key) + bytes(self.ciphertext)

    def to_bytes(self) -> bytes:
        """Serialize as ephemeral_public_key || ciphertext."""
        return bytes(self)

    @classmethod
    def from_bytes(
        cls,
        algorithm: AsymmetricAlgorithm,
        data: bytes,
        recipient_public_key: EncryptionPublicKey,
    ) -> "SealedMessageBox":
        data = bytes(data)
        if len(data) < X25519_KEY_SIZE + algorithm.symmetric.tag_size:
            raise MalformedMessage(f"Sealed box too short: {len(data)} bytes")
        return cls(
            algorithm=algorithm,
            ephemeral_public_key=EncryptionPublicKey(data[:X25519_KEY_SIZE]),
            recipient_public_key=recipient_public_key,
            ciphertext=Ciphertext(data[X25519_KEY_SIZE:]),
        )


@dataclass(frozen=True)
class MultipleRecipientMessageBox:
    """
    One symmetric message body plus one wrapped content key per recipient.

    Every wrapped key must come from the same sender with the same
    algorithm. Recipients self-select by public key; list order carries
    no meaning.
    """

    algorithm: AsymmetricAlgorithm
    sender_public_key: EncryptionPublicKey
    encapsulated_keys: Tuple[EncryptedMessageBox, ...]
    message: EncryptedMessage

    def __post_init__(self):
        object.__setattr__(self, "encapsulated_keys", tuple(self.encapsulated_keys))
        for box in self.encapsulated_keys:
            if box.algorithm is not self.algorithm:
                raise CryptoLogicError("All encapsulated keys must use the same algorithm")
            if box.sender_public_key != self.sender_public_key:
                raise CryptoLogicError("All encapsulated keys must share the same sender")

    @property
    def recipients(self) -> List[EncryptionPublicKey]:
        return [box.recipient_public_key for box in self.encapsulated_keys]

    def find(self, public_key: EncryptionPublicKey) -> Optional[EncryptedMessageBox]:
        """Return the wrapped key addressed to ``public_key``, if any."""
        for box in self.encapsulated_keys:
            if box.recipient_public_key == public_key:
                return box
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "v": MULTIPLE_RECIPIENT_VERSION,
            "alg": self.algorithm.value,
            "pub": self.sender_public_key.export(),
            "k": [
                {
                    "pub": box.recipient_public_key.export(),
                    "box": encode(bytes(box), DEFAULT_ENCODING),
                }
                for box in self.encapsulated_keys
            ],
            "m": self.message.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MultipleRecipientMessageBox":
        """
        Rebuild a box from :meth:`to_dict` output.

        Raises:
            MalformedMessage: On unknown version, algorithm or bad field
        """
        try:
            if data.get("v") != MULTIPLE_RECIPIENT_VERSION:
                raise MalformedMessage(f"Unsupported message version: {data.get('v')!r}")
            algorithm = parse_asymmetric(data["alg"])
            sender = EncryptionPublicKey(decode(data["pub"]))
            keys = []
            for entry in data["k"]:
                wrapped = EncryptedMessage.from_bytes(algorithm.symmetric, decode(entry["box"]))
                keys.append(EncryptedMessageBox(
                    algorithm=algorithm,
                    sender_public_key=sender,
                    recipient_public_key=EncryptionPublicKey(decode(entry["pub"])),
                    ciphertext=wrapped.ciphertext,
                    nonce=wrapped.nonce,
                ))
            message = EncryptedMessage.from_dict(data["m"])
        except MalformedMessage:
            raise
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise MalformedMessage(f"Invalid multiple recipient message: {e}")
        return cls(algorithm, sender, keys, message)

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "MultipleRecipientMessageBox":
        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedMessage(f"Invalid JSON: {e}")
        if not isinstance(data, dict):
            raise MalformedMessage("Expected a JSON object")
        return cls.from_dict(data)
