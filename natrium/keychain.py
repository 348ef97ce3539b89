"""
Natrium Key Management

Handles:
- Deriving purpose-specific keys from a single 256-bit app key
- App key storage on disk

Derived keys:
- shared(context): HKDF-BLAKE2b(app_key, info="natrium:shared:" || context)
- encryption():    X25519 key pair seeded from HKDF-BLAKE2b(app_key, "natrium:encryption")
- signature():     Ed25519 key pair seeded from HKDF-BLAKE2b(app_key, "natrium:signature")

One key per purpose, so compromise of one derived key does not expose
the others. Only one encryption and one signature key pair exist per app
key, since their public halves are shared with other parties.

SECURITY NOTES:
- Seeds are zeroed as soon as the key pair is built
- Key file permissions set to 0600, directory to 0700
- Private keys are never logged
"""

import logging
import os
import stat
from pathlib import Path
from typing import Dict, Optional

from .crypto.errors import InvalidKeyLength
from .crypto.keys import EncryptionKeyPair, SharedKey, SignatureKeyPair
from .crypto.primitives import KEY_SIZE, hkdf_blake2b, secure_zero


logger = logging.getLogger(__name__)

# Domain separation labels for HKDF
SHARED_KEY_INFO = b"natrium:shared"
ENCRYPTION_KEY_INFO = b"natrium:encryption"
SIGNATURE_KEY_INFO = b"natrium:signature"


def _info(label: bytes, context: Optional[str]) -> bytes:
    if context is None:
        return label
    return label + b":" + context.encode("utf-8")


class KeyDerivation:
    """Deterministic derivation of keys from a shared key."""

    @staticmethod
    def hkdf(key: SharedKey, length: int, info: bytes, salt: Optional[bytes] = None) -> bytes:
        """
        HKDF-BLAKE2b over the key bytes.

        Output for a shorter length is a prefix of the output for a longer one.
        """
        return hkdf_blake2b(bytes(key), length, info, salt)

    @classmethod
    def shared(cls, key: SharedKey, context: Optional[str] = None) -> SharedKey:
        return SharedKey(cls.hkdf(key, KEY_SIZE, _info(SHARED_KEY_INFO, context)))

    @classmethod
    def encryption(cls, key: SharedKey, context: Optional[str] = None) -> EncryptionKeyPair:
        seed = bytearray(cls.hkdf(key, KEY_SIZE, _info(ENCRYPTION_KEY_INFO, context)))
        try:
            return EncryptionKeyPair.from_seed(seed)
        finally:
            secure_zero(seed)

    @classmethod
    def signature(cls, key: SharedKey, context: Optional[str] = None) -> SignatureKeyPair:
        seed = bytearray(cls.hkdf(key, KEY_SIZE, _info(SIGNATURE_KEY_INFO, context)))
        try:
            return SignatureKeyPair.from_seed(seed)
        finally:
            secure_zero(seed)


class KeyChain:
    """
    Keys derived from the app key, created on first use and cached.

    Usage:
        keys = KeyChain(SharedKey.generate())
        keys.shared("sessions")   # per-context symmetric key
        keys.encryption()         # X25519 key pair
        keys.signature()          # Ed25519 key pair
        keys.clear()              # wipe everything derived
    """

    def __init__(
        self,
        app_key: SharedKey,
        encryption_key_pair: Optional[EncryptionKeyPair] = None,
        signature_key_pair: Optional[SignatureKeyPair] = None,
    ):
        self.app_key = app_key
        self._encryption = encryption_key_pair
        self._signature = signature_key_pair
        self._shared: Dict[str, SharedKey] = {}

    def shared(self, context: Optional[str] = None) -> SharedKey:
        """The app key itself, or a cached key derived for ``context``."""
        if context is None:
            return self.app_key
        if context not in self._shared:
            self._shared[context] = KeyDerivation.shared(self.app_key, context)
        return self._shared[context]

    def encryption(self) -> EncryptionKeyPair:
        if self._encryption is None:
            self._encryption = KeyDerivation.encryption(self.app_key)
        return self._encryption

    def signature(self) -> SignatureKeyPair:
        if self._signature is None:
            self._signature = KeyDerivation.signature(self.app_key)
        return self._signature

    def clear(self) -> None:
        """Wipe and forget every derived key. The app key is kept."""
        for key in self._shared.values():
            key.wipe()
        self._shared.clear()
        if self._encryption is not None:
            self._encryption.wipe()
            self._encryption = None
        if self._signature is not None:
            self._signature.wipe()
            self._signature = None

    def __len__(self) -> int:
        return len(self._shared)


def load_app_key(key_file: Path, create_if_missing: bool = True) -> SharedKey:
    """
    Load the app key from disk, creating it if necessary.

    Key file format: 32 raw bytes

    Args:
        key_file: Path to the key file
        create_if_missing: If True, generate a new key if not found

    Returns:
        SharedKey: Loaded or generated app key

    Raises:
        InvalidKeyLength: If the key file exists but has the wrong size
        FileNotFoundError: If key file missing and create_if_missing=False
    """
    key_file = Path(key_file)

    if key_file.exists():
        data = bytearray(key_file.read_bytes())
        try:
            if len(data) != KEY_SIZE:
                raise InvalidKeyLength(f"App key file must hold {KEY_SIZE} bytes: {key_file}")
            return SharedKey(data)
        finally:
            secure_zero(data)

    if not create_if_missing:
        raise FileNotFoundError(f"App key not found: {key_file}")

    app_key = SharedKey.generate()

    # Ensure directory exists with proper permissions
    key_file.parent.mkdir(parents=True, exist_ok=True)
    os.chmod(key_file.parent, stat.S_IRWXU)  # 0700

    # Create the file 0600 before any key bytes are written
    fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, stat.S_IRUSR | stat.S_IWUSR)
    with os.fdopen(fd, "wb") as f:
        f.write(bytes(app_key))

    logger.info("Generated new app key: %s", key_file)
    return app_key
