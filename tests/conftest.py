# tests/conftest.py
import pytest

from natrium.crypto import primitives
from natrium.crypto.algorithms import AsymmetricAlgorithm, SymmetricAlgorithm
from natrium.crypto.keys import EncryptionKeyPair, SharedKey, SignatureKeyPair


requires_aegis = pytest.mark.skipif(
    not primitives.aegis256_available(),
    reason="AEGIS-256 backend not available",
)


def algorithm_params(algorithms):
    params = []
    for algorithm in algorithms:
        symmetric = getattr(algorithm, "symmetric", algorithm)
        marks = [requires_aegis] if symmetric is SymmetricAlgorithm.AEGIS256 else []
        params.append(pytest.param(algorithm, id=algorithm.value, marks=marks))
    return params


SYMMETRIC_ALGORITHMS = algorithm_params(list(SymmetricAlgorithm))
ASYMMETRIC_ALGORITHMS = algorithm_params(list(AsymmetricAlgorithm))
AEAD_ALGORITHMS = algorithm_params(
    [a for a in SymmetricAlgorithm if a.supports_aad]
)
SEALABLE_ALGORITHMS = algorithm_params(
    [a for a in AsymmetricAlgorithm if a is not AsymmetricAlgorithm.X25519_AES256_GCM]
)


@pytest.fixture()
def shared_key() -> SharedKey:
    return SharedKey.generate()


@pytest.fixture()
def alice() -> EncryptionKeyPair:
    return EncryptionKeyPair.generate()


@pytest.fixture()
def bob() -> EncryptionKeyPair:
    return EncryptionKeyPair.generate()


@pytest.fixture()
def signer() -> SignatureKeyPair:
    return SignatureKeyPair.generate()
