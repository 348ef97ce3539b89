"""Tests for key and key pair types."""

import pickle

import nacl.bindings
import pytest

from natrium.crypto.errors import CryptoLogicError, InvalidKeyLength, SerializationProhibited
from natrium.crypto.keys import (
    EncryptionKeyPair,
    EncryptionPublicKey,
    EncryptionSecretKey,
    SharedKey,
    SignatureKeyPair,
    SignatureSecretKey,
)


ALICE_SECRET = bytes.fromhex("77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a")
ALICE_PUBLIC = bytes.fromhex("8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a")


class TestSharedKey:

    def test_generate(self):
        a, b = SharedKey.generate(), SharedKey.generate()
        assert len(a) == 32
        assert a != b

    def test_wrong_length(self):
        with pytest.raises(InvalidKeyLength):
            SharedKey(b"\x00" * 16)


class TestEncryptionKeyPair:

    def test_public_derived_from_secret(self):
        pair = EncryptionKeyPair(ALICE_SECRET)
        assert bytes(pair.public_key) == ALICE_PUBLIC
        assert isinstance(pair.secret_key, EncryptionSecretKey)

    def test_serialization_layout(self):
        pair = EncryptionKeyPair(ALICE_SECRET)
        assert bytes(pair) == ALICE_SECRET + ALICE_PUBLIC
        assert len(pair) == 64

    def test_from_bytes(self):
        pair = EncryptionKeyPair.from_bytes(ALICE_SECRET + ALICE_PUBLIC)
        assert pair == EncryptionKeyPair(ALICE_SECRET)

    def test_from_bytes_mismatched_public(self):
        with pytest.raises(CryptoLogicError):
            EncryptionKeyPair.from_bytes(ALICE_SECRET + b"\x00" * 32)

    def test_from_bytes_wrong_length(self):
        with pytest.raises(InvalidKeyLength):
            EncryptionKeyPair.from_bytes(ALICE_SECRET)

    def test_import_export(self):
        pair = EncryptionKeyPair.generate()
        restored = EncryptionKeyPair.import_(pair.export())
        assert restored == pair
        assert restored.public_key == pair.public_key

    def test_try_import(self):
        assert EncryptionKeyPair.try_import(None) is None
        assert EncryptionKeyPair.try_import("AAAA") is None

    def test_from_seed_is_deterministic(self):
        seed = b"\x42" * 32
        a = EncryptionKeyPair.from_seed(seed)
        b = EncryptionKeyPair.from_seed(seed)
        public, secret = nacl.bindings.crypto_kx_seed_keypair(seed)
        assert a == b
        assert bytes(a.public_key) == public
        assert bytes(a.secret_key) == secret

    def test_from_seed_wrong_length(self):
        with pytest.raises(InvalidKeyLength):
            EncryptionKeyPair.from_seed(b"\x42" * 31)

    def test_from_secret_key(self):
        pair = EncryptionKeyPair.from_secret_key(EncryptionSecretKey(ALICE_SECRET))
        assert bytes(pair.public_key) == ALICE_PUBLIC

    def test_from_secret_key_converts_ed25519(self):
        signing = SignatureKeyPair.from_seed(b"\x01" * 32)
        converted = EncryptionKeyPair.from_secret_key(signing.secret_key)
        expected = nacl.bindings.crypto_sign_ed25519_pk_to_curve25519(bytes(signing.public_key))
        assert bytes(converted.public_key) == expected
        assert signing.encryption_key_pair() == converted

    def test_from_secret_key_rejects_other_types(self):
        with pytest.raises(CryptoLogicError):
            EncryptionKeyPair.from_secret_key(SharedKey.generate())

    def test_wipe(self):
        pair = EncryptionKeyPair.generate()
        public = pair.public_key
        with pair:
            pass
        assert pair.secret_key.wiped
        assert pair.public_key == public

    def test_refuses_serialization(self):
        pair = EncryptionKeyPair.generate()
        with pytest.raises(SerializationProhibited):
            str(pair)
        with pytest.raises(SerializationProhibited):
            pickle.dumps(pair)

    def test_repr_shows_public_only(self):
        pair = EncryptionKeyPair(ALICE_SECRET)
        text = repr(pair)
        assert EncryptionPublicKey(ALICE_PUBLIC).export() in text
        assert EncryptionSecretKey(ALICE_SECRET).export() not in text


class TestSignatureKeyPair:

    def test_from_seed(self):
        seed = b"\x05" * 32
        pair = SignatureKeyPair.from_seed(seed)
        public, secret = nacl.bindings.crypto_sign_seed_keypair(seed)
        assert bytes(pair.public_key) == public
        assert bytes(pair.secret_key) == secret
        assert pair.secret_key.seed == seed

    def test_serialization_layout(self):
        pair = SignatureKeyPair.generate()
        assert len(bytes(pair)) == 96
        assert SignatureKeyPair.from_bytes(bytes(pair)) == pair

    def test_secret_key_size(self):
        with pytest.raises(InvalidKeyLength):
            SignatureSecretKey(b"\x00" * 32)
