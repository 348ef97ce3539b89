"""Tests for X25519 key exchange."""

import hashlib

import nacl.bindings
import pytest

from natrium.crypto.errors import CryptoLogicError
from natrium.crypto.key_exchange import KeyExchange
from natrium.crypto.keys import EncryptionKeyPair, EncryptionPublicKey


ALICE_SECRET = bytes.fromhex("77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a")
ALICE_PUBLIC = bytes.fromhex("8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a")
BOB_SECRET = bytes.fromhex("5dab087e624a8a4b79e17f8b83800ee66f3bb1292618b6fd1c2f8b27ff88e0eb")
BOB_PUBLIC = bytes.fromhex("de9edb7d7b7dc1b4d35b61c2ece435373f8343c85b78674dadfc7e146f882b4f")
SHARED_POINT = bytes.fromhex("4a5d9d5ba4ce2de1728e3bf480350f25e07e21c947d19e3376f09b3c1e161742")


@pytest.fixture()
def alice_rfc():
    return EncryptionKeyPair(ALICE_SECRET)


@pytest.fixture()
def bob_rfc():
    return EncryptionKeyPair(BOB_SECRET)


def test_rfc7748_public_keys(alice_rfc, bob_rfc):
    assert bytes(alice_rfc.public_key) == ALICE_PUBLIC
    assert bytes(bob_rfc.public_key) == BOB_PUBLIC


def test_rfc7748_shared_point():
    assert nacl.bindings.crypto_scalarmult(ALICE_SECRET, BOB_PUBLIC) == SHARED_POINT
    assert nacl.bindings.crypto_scalarmult(BOB_SECRET, ALICE_PUBLIC) == SHARED_POINT


def test_session_keys_derivation(alice_rfc, bob_rfc):
    # Alice is the client, Bob the server
    digest = hashlib.blake2b(SHARED_POINT + ALICE_PUBLIC + BOB_PUBLIC).digest()
    client = KeyExchange.client(alice_rfc, bob_rfc.public_key)
    server = KeyExchange.server(bob_rfc, alice_rfc.public_key)

    assert bytes(client.rx) == digest[:32]
    assert bytes(client.tx) == digest[32:]
    assert bytes(server.tx) == digest[:32]
    assert bytes(server.rx) == digest[32:]


def test_directional_symmetry(alice, bob):
    a_to_b = KeyExchange.encryption(alice, bob.public_key)
    b_from_a = KeyExchange.decryption(bob, alice.public_key)
    b_to_a = KeyExchange.encryption(bob, alice.public_key)
    a_from_b = KeyExchange.decryption(alice, bob.public_key)

    assert a_to_b == b_from_a
    assert b_to_a == a_from_b
    assert a_to_b != b_to_a


def test_raw_point_never_used(alice_rfc, bob_rfc):
    key = KeyExchange.encryption(alice_rfc, bob_rfc.public_key)
    assert bytes(key) != SHARED_POINT


def test_low_order_point_rejected(alice):
    with pytest.raises(CryptoLogicError):
        KeyExchange.encryption(alice, EncryptionPublicKey(bytes(32)))
    with pytest.raises(CryptoLogicError):
        KeyExchange.decryption(alice, EncryptionPublicKey(bytes(32)))
