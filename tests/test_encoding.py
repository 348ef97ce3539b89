"""Tests for text encodings and binary value types."""

import copy
import pickle

import pytest

from natrium.crypto.binary import Ciphertext, MessageSignature, Nonce
from natrium.crypto.encoding import Encoding, decode, encode
from natrium.crypto.errors import (
    CryptoLogicError,
    EncodingError,
    InvalidKeyLength,
    SerializationProhibited,
)
from natrium.crypto.keys import EncryptionPublicKey, SharedKey


DATA = bytes([0xfb, 0xff, 0x00, 0x10, 0x7e])


class TestEncode:

    @pytest.mark.parametrize("encoding,expected", [
        (Encoding.HEX, "fbff00107e"),
        (Encoding.BASE64, "+/8AEH4="),
        (Encoding.BASE64_NO_PADDING, "+/8AEH4"),
        (Encoding.BASE64_URL, "-_8AEH4="),
        (Encoding.BASE64_URL_NO_PADDING, "-_8AEH4"),
    ])
    def test_encodings(self, encoding, expected):
        assert encode(DATA, encoding) == expected

    def test_prefix(self):
        assert encode(DATA, Encoding.HEX, prefix=True) == "hex:fbff00107e"
        assert encode(DATA, Encoding.BASE64, prefix=True) == "base64:+/8AEH4="
        assert encode(DATA, Encoding.BASE64_URL, prefix=True) == "base64url:-_8AEH4="


class TestDecode:

    @pytest.mark.parametrize("text", [
        "-_8AEH4=",
        "-_8AEH4",
        "+/8AEH4=",
        "+/8AEH4",
        "base64:+/8AEH4=",
        "base64url:-_8AEH4",
        "hex:fbff00107e",
        "  -_8AEH4=\n",
    ])
    def test_lenient(self, text):
        assert decode(text) == DATA

    def test_hex(self):
        assert decode("fbff00107e", Encoding.HEX) == DATA
        assert decode("0xFBFF00107E", Encoding.HEX) == DATA

    def test_prefix_wins(self):
        assert decode("hex:fbff00107e", Encoding.BASE64) == DATA

    @pytest.mark.parametrize("text,encoding", [
        ("zz", Encoding.HEX),
        ("abc", Encoding.HEX),
        ("a", None),
        ("ab$d", None),
    ])
    def test_invalid(self, text, encoding):
        with pytest.raises(EncodingError):
            decode(text, encoding)

    def test_empty(self):
        assert decode("") == b""


class TestBinaryValue:

    def test_str_is_base64url(self):
        assert str(Ciphertext(DATA)) == "-_8AEH4="

    def test_import_export(self):
        nonce = Nonce(b"\x01" * 24)
        assert Nonce.import_(nonce.export(Encoding.HEX, prefix=True)) == nonce

    def test_equality_is_typed(self):
        assert Nonce(b"ab") == Nonce(b"ab")
        assert Nonce(b"ab") != Nonce(b"ac")
        assert Nonce(b"ab") != Ciphertext(b"ab")

    def test_hashable(self):
        assert len({MessageSignature(b"x"), MessageSignature(b"x")}) == 1

    def test_fixed_length(self):
        with pytest.raises(InvalidKeyLength):
            EncryptionPublicKey(b"\x00" * 31)

    def test_try_import(self):
        assert EncryptionPublicKey.try_import(None) is None
        assert EncryptionPublicKey.try_import("") is None
        assert EncryptionPublicKey.try_import("not base64!") is None
        assert EncryptionPublicKey.try_import(encode(b"\x00" * 8)) is None
        key = EncryptionPublicKey(b"\x09" * 32)
        assert EncryptionPublicKey.try_import(key.export()) == key

    def test_repr_has_prefix(self):
        assert repr(Ciphertext(DATA)) == "Ciphertext('base64url:-_8AEH4=')"


class TestSensitiveBinaryValue:

    def test_wipe(self):
        key = SharedKey(b"\x07" * 32)
        key.wipe()
        assert key.wiped
        with pytest.raises(CryptoLogicError):
            bytes(key)
        key.wipe()

    def test_context_manager(self):
        with SharedKey.generate() as key:
            assert len(bytes(key)) == 32
        assert key.wiped

    def test_no_str(self):
        with pytest.raises(SerializationProhibited):
            str(SharedKey.generate())

    def test_no_pickle(self):
        with pytest.raises(SerializationProhibited):
            pickle.dumps(SharedKey.generate())

    @pytest.mark.parametrize("copier", [copy.copy, copy.deepcopy])
    def test_no_copy(self, copier):
        with pytest.raises(SerializationProhibited):
            copier(SharedKey.generate())

    def test_repr_redacted(self):
        key = SharedKey(b"\x41" * 32)
        assert repr(key) == "<SharedKey [redacted]>"

    def test_not_hashable(self):
        with pytest.raises(TypeError):
            hash(SharedKey.generate())

    def test_export_allowed(self):
        key = SharedKey(b"\x00" * 32)
        assert SharedKey.import_(key.export()) == key
