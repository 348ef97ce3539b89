"""
Natrium Key Exchange

X25519 Diffie-Hellman stretched into two directional session keys with
libsodium's crypto_kx:

    q       = X25519(secret, peer_public)
    rx||tx  = BLAKE2b-512(q || client_public || server_public)

The raw curve point q is never used as a key directly.

``encryption`` and ``decryption`` hide the client/server roles: for key
pairs A and B,

    encryption(A, B.public) == decryption(B, A.public)
    encryption(B, A.public) == decryption(A, B.public)
"""

from typing import NamedTuple

import nacl.bindings
import nacl.exceptions

from .errors import CryptoLogicError
from .keys import EncryptionKeyPair, EncryptionPublicKey, SharedKey


class SessionKeys(NamedTuple):
    """Directional session keys: receive (rx) and transmit (tx)."""
    rx: SharedKey
    tx: SharedKey


class KeyExchange:
    """Directional key agreement over X25519."""

    @staticmethod
    def client(key_pair: EncryptionKeyPair, server_public_key: EncryptionPublicKey) -> SessionKeys:
        """
        Session keys for the client side.

        Raises:
            CryptoLogicError: If the peer key is a low-order point
        """
        try:
            rx, tx = nacl.bindings.crypto_kx_client_session_keys(
                bytes(key_pair.public_key),
                bytes(key_pair.secret_key),
                bytes(server_public_key),
            )
        except nacl.exceptions.CryptoError:
            raise CryptoLogicError("Key exchange failed: invalid peer public key")
        return SessionKeys(SharedKey(rx), SharedKey(tx))

    @staticmethod
    def server(key_pair: EncryptionKeyPair, client_public_key: EncryptionPublicKey) -> SessionKeys:
        """
        Session keys for the server side.

        Raises:
            CryptoLogicError: If the peer key is a low-order point
        """
        try:
            rx, tx = nacl.bindings.crypto_kx_server_session_keys(
                bytes(key_pair.public_key),
                bytes(key_pair.secret_key),
                bytes(client_public_key),
            )
        except nacl.exceptions.CryptoError:
            raise CryptoLogicError("Key exchange failed: invalid peer public key")
        return SessionKeys(SharedKey(rx), SharedKey(tx))

    @classmethod
    def encryption(cls, key_pair: EncryptionKeyPair, public_key: EncryptionPublicKey) -> SharedKey:
        """Key for messages sent from ``key_pair`` to ``public_key``."""
        keys = cls.server(key_pair, public_key)
        keys.rx.wipe()
        return keys.tx

    @classmethod
    def decryption(cls, key_pair: EncryptionKeyPair, public_key: EncryptionPublicKey) -> SharedKey:
        """Key for messages sent from ``public_key`` to ``key_pair``."""
        keys = cls.client(key_pair, public_key)
        keys.tx.wipe()
        return keys.rx
