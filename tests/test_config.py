"""
Tests for node settings
"""
import pytest
from pydantic import ValidationError

from core.encryption import CipherSuite
from node.config import DEFAULT_RPC_URL, Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.xrpl_rpc_url == DEFAULT_RPC_URL
    assert settings.issuer_address is None
    assert settings.cipher is CipherSuite.AES_GCM


def test_from_env():
    settings = Settings.from_env({
        "XRPL_RPC_URL": "http://localhost:5005",
        "ISSUER_ADDRESS": "rIssuer",
        "AUDITOR_API_KEY": "secret",
        "CERTICHAIN_CIPHER": "openssl-aes-256-cbc",
        "LOG_LEVEL": "DEBUG",
        "UNRELATED": "ignored",
    })

    assert settings.xrpl_rpc_url == "http://localhost:5005"
    assert settings.issuer_address == "rIssuer"
    assert settings.auditor_api_key == "secret"
    assert settings.cipher is CipherSuite.OPENSSL_CBC
    assert settings.log_level == "DEBUG"


def test_empty_values_fall_back_to_defaults():
    assert Settings.from_env({"XRPL_RPC_URL": ""}).xrpl_rpc_url == DEFAULT_RPC_URL


def test_unknown_cipher():
    with pytest.raises(ValidationError):
        Settings.from_env({"CERTICHAIN_CIPHER": "rot13"})
