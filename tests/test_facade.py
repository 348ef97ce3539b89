"""Tests for KeyChain, KeyDerivation and the Natrium facade."""

import hashlib
import os
import stat

import pytest

from natrium import Config, KeyChain, KeyDerivation, Natrium
from natrium.config import CryptoConfig, KeysConfig
from natrium.crypto.algorithms import AsymmetricAlgorithm, SymmetricAlgorithm
from natrium.crypto.errors import InvalidKeyLength
from natrium.crypto.keys import SharedKey
from natrium.crypto.messages import MultipleRecipientMessageBox
from natrium.keychain import load_app_key


@pytest.fixture()
def config(tmp_path):
    return Config(
        crypto=CryptoConfig(
            symmetric=SymmetricAlgorithm.XCHACHA20_BLAKE2B,
            asymmetric=AsymmetricAlgorithm.X25519_XCHACHA20_BLAKE2B,
        ),
        keys=KeysConfig(key_file=tmp_path / "keys" / "app.key"),
    )


@pytest.fixture()
def natrium(config):
    return Natrium(KeyChain(SharedKey.generate()), config)


@pytest.fixture()
def peer(config):
    return Natrium(KeyChain(SharedKey.generate()), config)


class TestKeyDerivation:

    def test_shared_is_deterministic(self):
        app_key = SharedKey(b"\x11" * 32)
        assert KeyDerivation.shared(app_key, "a") == KeyDerivation.shared(app_key, "a")
        assert KeyDerivation.shared(app_key, "a") != KeyDerivation.shared(app_key, "b")
        assert KeyDerivation.shared(app_key) != KeyDerivation.shared(app_key, "a")

    def test_hkdf_prefix(self):
        app_key = SharedKey(b"\x11" * 32)
        assert KeyDerivation.hkdf(app_key, 64, b"x")[:16] == KeyDerivation.hkdf(app_key, 16, b"x")

    def test_shared_uses_blake2b_hkdf(self):
        app_key = SharedKey(bytes(range(32)))
        prk = hashlib.blake2b(bytes(app_key), key=bytes(32), digest_size=32).digest()
        expected = hashlib.blake2b(b"natrium:shared:notes\x01", key=prk, digest_size=32).digest()
        assert bytes(KeyDerivation.shared(app_key, "notes")) == expected

    def test_key_pairs_are_deterministic(self):
        app_key = SharedKey(b"\x22" * 32)
        assert KeyDerivation.encryption(app_key) == KeyDerivation.encryption(app_key)
        assert KeyDerivation.signature(app_key) == KeyDerivation.signature(app_key)
        assert KeyDerivation.encryption(app_key, "ctx") != KeyDerivation.encryption(app_key)


class TestKeyChain:

    def test_shared_cached(self):
        keys = KeyChain(SharedKey.generate())
        assert keys.shared() is keys.app_key
        assert keys.shared("ctx") is keys.shared("ctx")
        assert len(keys) == 1

    def test_key_pairs_cached(self):
        keys = KeyChain(SharedKey.generate())
        assert keys.encryption() is keys.encryption()
        assert keys.signature() is keys.signature()

    def test_clear(self):
        keys = KeyChain(SharedKey.generate())
        derived = keys.shared("ctx")
        pair = keys.encryption()
        public = pair.public_key
        keys.clear()
        assert derived.wiped
        assert pair.secret_key.wiped
        assert len(keys) == 0
        assert keys.encryption().public_key == public


class TestLoadAppKey:

    def test_create_then_load(self, tmp_path):
        key_file = tmp_path / "natrium" / "app.key"
        created = load_app_key(key_file)
        assert key_file.read_bytes() == bytes(created)
        assert load_app_key(key_file, create_if_missing=False) == created

    def test_permissions(self, tmp_path):
        key_file = tmp_path / "natrium" / "app.key"
        load_app_key(key_file)
        assert stat.S_IMODE(os.stat(key_file).st_mode) == 0o600
        assert stat.S_IMODE(os.stat(key_file.parent).st_mode) == 0o700

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_app_key(tmp_path / "absent.key", create_if_missing=False)

    def test_wrong_size(self, tmp_path):
        key_file = tmp_path / "short.key"
        key_file.write_bytes(b"\x00" * 16)
        with pytest.raises(InvalidKeyLength):
            load_app_key(key_file)


class TestNatrium:

    def test_hash(self, natrium):
        assert natrium.hash("abc") == hashlib.blake2b(b"abc", digest_size=32).digest()

    def test_hmac_depends_on_context(self, natrium):
        assert natrium.hmac("m") == natrium.hmac(b"m")
        assert natrium.hmac("m") != natrium.hmac("m", "ctx")
        assert natrium.hmac("m") != natrium.hash("m")

    def test_encrypt_decrypt(self, natrium):
        encrypted = natrium.encrypt("hello", "notes", "ad")
        assert encrypted.algorithm is SymmetricAlgorithm.XCHACHA20_BLAKE2B
        assert natrium.decrypt(encrypted, "notes", "ad") == b"hello"
        assert natrium.decrypt(bytes(encrypted), "notes", "ad") == b"hello"
        assert natrium.decrypt(encrypted, "other", "ad") is None
        assert natrium.decrypt(encrypted, "notes") is None

    def test_sign_verify(self, natrium):
        signature = natrium.sign("message", "ctx")
        assert natrium.verify("message", signature, "ctx")
        assert not natrium.verify("message", signature)

    def test_public_key_encryption(self, natrium, peer):
        box = natrium.encrypt_with_public_key(peer.keys.encryption().public_key, "hi peer", "ad")
        sender = natrium.keys.encryption().public_key
        assert peer.decrypt_with_secret_key(sender, box, "ad") == b"hi peer"
        assert peer.decrypt_with_secret_key(sender, box) is None

    def test_public_key_signatures(self, natrium):
        signature = natrium.sign_with_secret_key("signed")
        public = natrium.keys.signature().public_key
        assert natrium.verify_with_public_key(public, signature, "signed")
        assert not natrium.verify_with_public_key(public, signature, "forged")

    def test_seal_unseal(self, natrium, peer):
        sealed = natrium.seal(peer.keys.encryption().public_key, "anonymous")
        assert peer.unseal(sealed) == b"anonymous"
        assert natrium.unseal(sealed) is None

    def test_multiple_recipients(self, natrium, peer, config):
        third = Natrium(KeyChain(SharedKey.generate()), config)
        outsider = Natrium(KeyChain(SharedKey.generate()), config)
        envelope = natrium.encrypt_for_multiple_public_keys(
            [peer.keys.encryption().public_key, third.keys.encryption().public_key],
            "group message",
        )
        restored = MultipleRecipientMessageBox.from_json(envelope.to_json())
        for party in (natrium, peer, third):
            assert party.decrypt_from_multiple(restored) == b"group message"
        assert outsider.decrypt_from_multiple(restored) is None

    def test_from_config(self, config):
        with pytest.raises(FileNotFoundError):
            Natrium.from_config(config)
        created = Natrium.from_config(config, create_key=True)
        loaded = Natrium.from_config(config)
        assert loaded.keys.encryption().public_key == created.keys.encryption().public_key
