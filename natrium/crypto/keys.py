"""
Natrium Key Types

Key Types:
- SharedKey: 256-bit symmetric key (session keys, content keys, app key)
- EncryptionKeyPair: X25519 key pair for key exchange
- SignatureKeyPair: Ed25519 key pair for detached signatures

Key pairs serialize as ``secret || public``, the libsodium layout. The
public half is always recomputed from the secret half, never trusted
from input.

SECURITY NOTES:
- Secret keys and key pairs refuse pickling, copying and str()
- export() is the only way to get secret material out as text
- Private keys are never logged
"""

from typing import Optional, Type, TypeVar, Union

import nacl.bindings
import nacl.exceptions

from .binary import BinaryValue, BytesLike, SensitiveBinaryValue
from .encoding import DEFAULT_ENCODING, Encoding, decode, encode
from .errors import CryptoLogicError, EncodingError, InvalidKeyLength, SerializationProhibited
from .primitives import (
    ED25519_SECRET_KEY_SIZE,
    KEY_SIZE,
    X25519_KEY_SIZE,
    random_bytes,
)


KP = TypeVar("KP", bound="_KeyPair")

SEED_SIZE = 32  # bytes


class SharedKey(SensitiveBinaryValue):
    """256-bit symmetric key."""

    LENGTH = KEY_SIZE
    __slots__ = ()

    @classmethod
    def generate(cls) -> "SharedKey":
        return cls(random_bytes(cls.LENGTH))


class EncryptionPublicKey(BinaryValue):
    """X25519 public key."""
    LENGTH = X25519_KEY_SIZE
    __slots__ = ()


class EncryptionSecretKey(SensitiveBinaryValue):
    """X25519 secret key."""

    LENGTH = X25519_KEY_SIZE
    __slots__ = ()

    def public_key(self) -> EncryptionPublicKey:
        return EncryptionPublicKey(nacl.bindings.crypto_scalarmult_base(bytes(self)))


class SignaturePublicKey(BinaryValue):
    """Ed25519 public key."""
    LENGTH = X25519_KEY_SIZE
    __slots__ = ()


class SignatureSecretKey(SensitiveBinaryValue):
    """Ed25519 secret key in libsodium form (seed || public key)."""

    LENGTH = ED25519_SECRET_KEY_SIZE
    __slots__ = ()

    @property
    def seed(self) -> bytes:
        return bytes(self)[:SEED_SIZE]

    def public_key(self) -> SignaturePublicKey:
        public, _ = nacl.bindings.crypto_sign_seed_keypair(self.seed)
        return SignaturePublicKey(public)


class _KeyPair:
    """
    Secret and public key held together.

    Wiping the pair wipes the secret half. The public half is derived
    from the secret half on construction.
    """

    SECRET_TYPE: Type[SensitiveBinaryValue]
    PUBLIC_TYPE: Type[BinaryValue]

    __slots__ = ("_secret", "_public")

    def __init__(self, secret_key: BytesLike):
        if not isinstance(secret_key, self.SECRET_TYPE):
            secret_key = self.SECRET_TYPE(secret_key)
        self._secret = secret_key
        self._public = secret_key.public_key()

    @property
    def secret_key(self):
        return self._secret

    @property
    def public_key(self):
        return self._public

    @classmethod
    def from_bytes(cls: Type[KP], data: BytesLike) -> KP:
        """
        Load a key pair from its ``secret || public`` form.

        Raises:
            InvalidKeyLength: If data has the wrong size
            CryptoLogicError: If the public half does not match the secret half
        """
        data = bytes(data)
        secret_size = cls.SECRET_TYPE.LENGTH
        if len(data) != secret_size + cls.PUBLIC_TYPE.LENGTH:
            raise InvalidKeyLength(
                f"{cls.__name__} must be {secret_size + cls.PUBLIC_TYPE.LENGTH} bytes"
            )
        pair = cls(data[:secret_size])
        if pair.public_key != cls.PUBLIC_TYPE(data[secret_size:]):
            pair.wipe()
            raise CryptoLogicError(f"{cls.__name__} public key does not match secret key")
        return pair

    def __bytes__(self) -> bytes:
        return bytes(self._secret) + bytes(self._public)

    def __len__(self) -> int:
        return self.SECRET_TYPE.LENGTH + self.PUBLIC_TYPE.LENGTH

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._secret == other._secret

    __hash__ = None

    def export(self, encoding: Encoding = DEFAULT_ENCODING, prefix: bool = False) -> str:
        """Encode ``secret || public`` as text. Handle the output as a secret."""
        return encode(bytes(self), encoding, prefix)

    @classmethod
    def import_(cls: Type[KP], text: str, encoding: Optional[Encoding] = None) -> KP:
        return cls.from_bytes(decode(text, encoding))

    @classmethod
    def try_import(cls: Type[KP], text: Optional[str], encoding: Optional[Encoding] = None) -> Optional[KP]:
        if not text:
            return None
        try:
            return cls.import_(text, encoding)
        except (EncodingError, CryptoLogicError):
            return None

    def wipe(self) -> None:
        self._secret.wipe()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __str__(self) -> str:
        raise SerializationProhibited(f"{type(self).__name__} cannot be converted to str")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} public={self._public.export()!r}>"

    def __reduce_ex__(self, protocol):
        raise SerializationProhibited(f"{type(self).__name__} cannot be pickled")

    def __copy__(self):
        raise SerializationProhibited(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise SerializationProhibited(f"{type(self).__name__} cannot be copied")


class EncryptionKeyPair(_KeyPair):
    """
    X25519 key pair for key exchange and asymmetric encryption.

    64 bytes serialized: secret (32) || public (32).
    """

    SECRET_TYPE = EncryptionSecretKey
    PUBLIC_TYPE = EncryptionPublicKey
    __slots__ = ()

    @classmethod
    def generate(cls) -> "EncryptionKeyPair":
        """Generate a fresh key pair from the CSPRNG."""
        _, secret = nacl.bindings.crypto_kx_keypair()
        return cls(secret)

    @classmethod
    def from_seed(cls, seed: BytesLike) -> "EncryptionKeyPair":
        """
        Derive a key pair deterministically from a 32-byte seed.

        Matches libsodium's crypto_kx_seed_keypair.
        """
        seed = bytes(seed)
        if len(seed) != SEED_SIZE:
            raise InvalidKeyLength(f"Seed must be {SEED_SIZE} bytes")
        _, secret = nacl.bindings.crypto_kx_seed_keypair(seed)
        return cls(secret)

    @classmethod
    def from_secret_key(
        cls,
        secret_key: Union[EncryptionSecretKey, SignatureSecretKey],
    ) -> "EncryptionKeyPair":
        """
        Build a key pair from an X25519 secret key, or convert an Ed25519
        signature secret key to its Curve25519 equivalent.
        """
        if isinstance(secret_key, SignatureSecretKey):
            try:
                converted = nacl.bindings.crypto_sign_ed25519_sk_to_curve25519(bytes(secret_key))
            except nacl.exceptions.CryptoError:
                raise CryptoLogicError("Ed25519 secret key cannot be converted to X25519")
            return cls(converted)
        if isinstance(secret_key, EncryptionSecretKey):
            return cls(bytes(secret_key))
        raise CryptoLogicError(f"Unsupported secret key type: {type(secret_key).__name__}")


class SignatureKeyPair(_KeyPair):
    """
    Ed25519 key pair for detached signatures.

    96 bytes serialized: secret (64, seed || public) || public (32).
    """

    SECRET_TYPE = SignatureSecretKey
    PUBLIC_TYPE = SignaturePublicKey
    __slots__ = ()

    @classmethod
    def generate(cls) -> "SignatureKeyPair":
        return cls.from_seed(random_bytes(SEED_SIZE))

    @classmethod
    def from_seed(cls, seed: BytesLike) -> "SignatureKeyPair":
        """Derive a key pair deterministically from a 32-byte seed."""
        seed = bytes(seed)
        if len(seed) != SEED_SIZE:
            raise InvalidKeyLength(f"Seed must be {SEED_SIZE} bytes")
        _, secret = nacl.bindings.crypto_sign_seed_keypair(seed)
        return cls(secret)

    def encryption_key_pair(self) -> EncryptionKeyPair:
        """The X25519 key pair birationally equivalent to this Ed25519 pair."""
        return EncryptionKeyPair.from_secret_key(self._secret)
