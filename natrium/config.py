"""
Natrium Configuration Management

Loads defaults from a TOML file, then applies NATRIUM_* environment
overrides. Example:

    log_level = "DEBUG"

    [crypto]
    symmetric = "xchacha20-blake2b"
    asymmetric = "x25519-xchacha20-blake2b"

    [keys]
    key_file = "~/.config/natrium/app.key"
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import toml

from .crypto.algorithms import (
    AsymmetricAlgorithm,
    SymmetricAlgorithm,
    parse_asymmetric,
    parse_symmetric,
)


# Default configuration path
DEFAULT_CONFIG_PATH = Path("~/.config/natrium/config.toml").expanduser()

# Default app key location
DEFAULT_KEY_FILE = Path("~/.config/natrium/app.key").expanduser()

ENV_PREFIX = "NATRIUM_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class CryptoConfig:
    """Default algorithms."""
    symmetric: SymmetricAlgorithm = SymmetricAlgorithm.AEGIS256
    asymmetric: AsymmetricAlgorithm = AsymmetricAlgorithm.X25519_AEGIS256


@dataclass
class KeysConfig:
    """App key storage."""
    key_file: Path = field(default_factory=lambda: DEFAULT_KEY_FILE)


@dataclass
class Config:
    """
    Complete natrium configuration.
    """
    crypto: CryptoConfig = field(default_factory=CryptoConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)

    config_path: Optional[Path] = None

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> 'Config':
        """
        Load configuration from file and environment.

        A missing file is not an error; defaults are used.

        Args:
            config_path: Path to config file (default: ~/.config/natrium/config.toml)
            environ: Environment mapping (default: os.environ)

        Returns:
            Loaded configuration

        Raises:
            ValueError: If the file is not valid TOML or names an unknown algorithm
        """
        path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        config = cls()
        config.config_path = path

        if path.exists():
            config._apply_dict(toml.load(path))

        config._apply_env(os.environ if environ is None else environ)
        config.validate()
        return config

    def _apply_dict(self, data: Dict[str, Any]) -> None:
        """Apply dictionary data to config."""
        if "log_level" in data:
            self.log_level = str(data["log_level"]).upper()

        if "crypto" in data:
            c = data["crypto"]
            if "symmetric" in c:
                self.crypto.symmetric = parse_symmetric(c["symmetric"])
            if "asymmetric" in c:
                self.crypto.asymmetric = parse_asymmetric(c["asymmetric"])

        if "keys" in data:
            k = data["keys"]
            if "key_file" in k:
                self.keys.key_file = Path(k["key_file"]).expanduser()

    def _apply_env(self, environ: Mapping[str, str]) -> None:
        """Apply NATRIUM_* environment overrides."""
        overrides = {}
        if ENV_PREFIX + "LOG_LEVEL" in environ:
            overrides["log_level"] = environ[ENV_PREFIX + "LOG_LEVEL"]
        crypto = {}
        if ENV_PREFIX + "SYMMETRIC_ALGORITHM" in environ:
            crypto["symmetric"] = environ[ENV_PREFIX + "SYMMETRIC_ALGORITHM"]
        if ENV_PREFIX + "ASYMMETRIC_ALGORITHM" in environ:
            crypto["asymmetric"] = environ[ENV_PREFIX + "ASYMMETRIC_ALGORITHM"]
        if crypto:
            overrides["crypto"] = crypto
        if ENV_PREFIX + "KEY_FILE" in environ:
            overrides["keys"] = {"key_file": environ[ENV_PREFIX + "KEY_FILE"]}
        self._apply_dict(overrides)

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")
