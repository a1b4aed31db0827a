"""
Shared fixtures
"""
import pytest
from xrpl.constants import CryptoAlgorithm
from xrpl.wallet import Wallet

from core.identity import LaboKeyPair


@pytest.fixture
def labo() -> LaboKeyPair:
    """A fresh Laboratory key pair for each test"""
    return LaboKeyPair.generate()


@pytest.fixture
def other_labo() -> LaboKeyPair:
    return LaboKeyPair.generate()


@pytest.fixture
def pommes() -> dict:
    return {"p": "Pommes Bio", "w": "1500kg", "n": "LOT-12345"}


@pytest.fixture
def labo_wallet() -> Wallet:
    """XRPL secp256k1 wallet, the kind the Labo holds"""
    return Wallet.create(algorithm=CryptoAlgorithm.SECP256K1)


@pytest.fixture
def seller_address() -> str:
    return Wallet.create().classic_address
