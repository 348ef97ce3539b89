"""
Natrium Crypto Exceptions

Authentication failures are NOT exceptions. Every decrypt, unseal and
verify path reports a forged, truncated or mis-keyed message by
returning None (or False), without saying why.

The classes below cover caller bugs and missing runtime support only.
"""


class CryptoError(Exception):
    """Base exception for the natrium crypto core."""
    pass


class CryptoLogicError(CryptoError):
    """Raised when a construction is used in a way it does not support."""
    pass


class InvalidKeyLength(CryptoLogicError, ValueError):
    """Raised when key or buffer material has the wrong size."""
    pass


class UnsupportedOperation(CryptoLogicError):
    """Raised when an algorithm refuses an operation outright."""
    pass


class AlgorithmUnavailable(CryptoError):
    """Raised when the running platform lacks a primitive."""
    pass


class SerializationProhibited(CryptoError, TypeError):
    """Raised when secret material is pickled, copied or stringified."""
    pass


class EncodingError(CryptoError, ValueError):
    """Raised when hex/base64 input cannot be decoded."""
    pass


class MalformedMessage(CryptoError, ValueError):
    """Raised when a serialized message box cannot be parsed."""
    pass
