"""Tests for configuration loading."""

from pathlib import Path

import pytest

from natrium.config import DEFAULT_KEY_FILE, Config
from natrium.crypto.algorithms import (
    AsymmetricAlgorithm,
    SymmetricAlgorithm,
    parse_asymmetric,
    parse_symmetric,
)


def test_defaults(tmp_path):
    config = Config.load(tmp_path / "missing.toml", environ={})
    assert config.crypto.symmetric is SymmetricAlgorithm.AEGIS256
    assert config.crypto.asymmetric is AsymmetricAlgorithm.X25519_AEGIS256
    assert config.keys.key_file == DEFAULT_KEY_FILE
    assert config.log_level == "WARNING"
    assert config.config_path == tmp_path / "missing.toml"


def test_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        'log_level = "debug"\n'
        "\n"
        "[crypto]\n"
        'symmetric = "xchacha20-blake2b"\n'
        'asymmetric = "X25519_XSALSA20_POLY1305"\n'
        "\n"
        "[keys]\n"
        f'key_file = "{tmp_path / "app.key"}"\n'
    )
    config = Config.load(path, environ={})
    assert config.log_level == "DEBUG"
    assert config.crypto.symmetric is SymmetricAlgorithm.XCHACHA20_BLAKE2B
    assert config.crypto.asymmetric is AsymmetricAlgorithm.X25519_XSALSA20_POLY1305
    assert config.keys.key_file == tmp_path / "app.key"


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[crypto]\nsymmetric = "aes-256-gcm"\n')
    config = Config.load(path, environ={
        "NATRIUM_SYMMETRIC_ALGORITHM": "xchacha20-poly1305-ietf",
        "NATRIUM_ASYMMETRIC_ALGORITHM": "x25519-aes-256-gcm",
        "NATRIUM_KEY_FILE": "/tmp/natrium-test.key",
        "NATRIUM_LOG_LEVEL": "info",
    })
    assert config.crypto.symmetric is SymmetricAlgorithm.XCHACHA20_POLY1305
    assert config.crypto.asymmetric is AsymmetricAlgorithm.X25519_AES256_GCM
    assert config.keys.key_file == Path("/tmp/natrium-test.key")
    assert config.log_level == "INFO"


def test_invalid_log_level(tmp_path):
    with pytest.raises(ValueError, match="log level"):
        Config.load(tmp_path / "missing.toml", environ={"NATRIUM_LOG_LEVEL": "chatty"})


def test_unknown_algorithm(tmp_path):
    with pytest.raises(ValueError):
        Config.load(tmp_path / "missing.toml", environ={"NATRIUM_SYMMETRIC_ALGORITHM": "rot13"})


def test_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("this is = = not toml")
    with pytest.raises(ValueError):
        Config.load(path, environ={})


class TestAlgorithmNames:

    @pytest.mark.parametrize("name", ["aes-256-gcm", "AES256_GCM", "aes256-gcm", " AES-256-GCM "])
    def test_parse_symmetric(self, name):
        assert parse_symmetric(name) is SymmetricAlgorithm.AES256_GCM

    def test_parse_asymmetric(self):
        assert parse_asymmetric("x25519-aegis-256") is AsymmetricAlgorithm.X25519_AEGIS256
        assert parse_asymmetric(AsymmetricAlgorithm.X25519_AEGIS256) is AsymmetricAlgorithm.X25519_AEGIS256

    def test_asymmetric_symmetric_pairing(self):
        for algorithm in AsymmetricAlgorithm:
            assert algorithm.symmetric.value == algorithm.value[len("x25519-"):]

    def test_sizes(self):
        assert SymmetricAlgorithm.AEGIS256.min_ciphertext_size == 64
        assert SymmetricAlgorithm.XCHACHA20_BLAKE2B.min_ciphertext_size == 88
        assert SymmetricAlgorithm.XCHACHA20_POLY1305.min_ciphertext_size == 40
        assert SymmetricAlgorithm.AES256_GCM.min_ciphertext_size == 28
        assert SymmetricAlgorithm.XSALSA20_POLY1305.min_ciphertext_size == 40
