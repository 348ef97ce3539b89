"""
Natrium - Pluggable Authenticated Encryption

Symmetric AEAD, X25519 authenticated and anonymous encryption, and
multi-recipient envelopes over libsodium-compatible wire formats.

This package contains:
- crypto/     : Algorithms, keys, message formats and envelopes
- keychain    : App key storage and per-purpose key derivation
- facade      : The Natrium entry point
- config      : TOML / environment configuration
- cli         : The ``natrium`` command-line tool
"""

__version__ = "0.1.0"

from .config import Config
from .facade import Natrium
from .keychain import KeyChain, KeyDerivation

__all__ = [
    'Config',
    'KeyChain',
    'KeyDerivation',
    'Natrium',
    '__version__',
]
