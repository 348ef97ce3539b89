"""
Natrium Binary Value Types

Immutable wrappers around the byte strings the crypto core passes around:
nonces, ciphertexts, signatures, and (in keys.py) keys.

Two families:
- BinaryValue: public, hashable, exportable, stringifies to base64url
- SensitiveBinaryValue: backed by a bytearray that is zeroed by wipe(),
  on leaving a ``with`` block, or (best-effort) on garbage collection.
  Refuses pickling, copying and str().

SECURITY NOTES:
- Equality on every value is a constant-time comparison
- repr() of sensitive values never includes key material
"""

from typing import Optional, Type, TypeVar, Union

from .encoding import Encoding, DEFAULT_ENCODING, decode, encode
from .errors import (
    CryptoLogicError,
    EncodingError,
    InvalidKeyLength,
    SerializationProhibited,
)
from .primitives import constant_time_compare, secure_zero


T = TypeVar("T", bound="BinaryValue")

BytesLike = Union[bytes, bytearray, memoryview, "BinaryValue"]


class BinaryValue:
    """
    A fixed or variable length byte string.

    Subclasses pin ``LENGTH`` to enforce a size at construction.
    """

    LENGTH: Optional[int] = None

    __slots__ = ("_data",)

    def __init__(self, data: BytesLike):
        data = bytes(data)
        if self.LENGTH is not None and len(data) != self.LENGTH:
            raise InvalidKeyLength(
                f"{type(self).__name__} must be {self.LENGTH} bytes, got {len(data)}"
            )
        self._data = data

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryValue) or type(other) is not type(self):
            return NotImplemented
        return constant_time_compare(bytes(self), bytes(other))

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._data))

    def __str__(self) -> str:
        return self.export()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.export(prefix=True)!r})"

    def export(self, encoding: Encoding = DEFAULT_ENCODING, prefix: bool = False) -> str:
        """Encode the value as text for transport or storage."""
        return encode(bytes(self), encoding, prefix)

    @classmethod
    def import_(cls: Type[T], text: str, encoding: Optional[Encoding] = None) -> T:
        """
        Decode a value previously produced by :meth:`export`.

        Raises:
            EncodingError: If the text cannot be decoded
            InvalidKeyLength: If the decoded value has the wrong size
        """
        return cls(decode(text, encoding))

    @classmethod
    def try_import(cls: Type[T], text: Optional[str], encoding: Optional[Encoding] = None) -> Optional[T]:
        """Like :meth:`import_`, but returns None for empty or malformed input."""
        if not text:
            return None
        try:
            return cls.import_(text, encoding)
        except (EncodingError, InvalidKeyLength):
            return None


class Nonce(BinaryValue):
    """Per-message uniqueness value. Length depends on the algorithm."""
    __slots__ = ()


class Ciphertext(BinaryValue):
    """Opaque encrypted bytes. Structure is defined by the containing message."""
    __slots__ = ()


class MessageSignature(BinaryValue):
    """Detached MAC or digital signature."""
    __slots__ = ()


class SensitiveBinaryValue(BinaryValue):
    """
    Secret byte string with explicit, deterministic zeroing.

    Usage:
        with SharedKey.generate() as key:
            ...
        # key material is zeroed here
    """

    __slots__ = ("_wiped",)

    def __init__(self, data: BytesLike):
        data = bytes(data)
        if self.LENGTH is not None and len(data) != self.LENGTH:
            raise InvalidKeyLength(
                f"{type(self).__name__} must be {self.LENGTH} bytes, got {len(data)}"
            )
        self._data = bytearray(data)
        self._wiped = False

    def __bytes__(self) -> bytes:
        if self._wiped:
            raise CryptoLogicError(f"{type(self).__name__} has been wiped")
        return bytes(self._data)

    def wipe(self) -> None:
        """Overwrite the backing buffer with zeros. Idempotent."""
        if not self._wiped:
            secure_zero(self._data)
            self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        # Best-effort only; callers should wipe() or use ``with``
        try:
            self.wipe()
        except AttributeError:
            pass

    __hash__ = None

    def __str__(self) -> str:
        raise SerializationProhibited(f"{type(self).__name__} cannot be converted to str")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [redacted]>"

    def __reduce_ex__(self, protocol):
        raise SerializationProhibited(f"{type(self).__name__} cannot be pickled")

    def __copy__(self):
        raise SerializationProhibited(f"{type(self).__name__} cannot be copied")

    def __deepcopy__(self, memo):
        raise SerializationProhibited(f"{type(self).__name__} cannot be copied")
