"""
Tests for the private reference cipher
"""
import base64

import pytest

from core.encryption import CipherSuite, PayloadEncryptor
from core.errors import DecryptionFailure, InvalidKeyFormat


def test_gcm_round_trip():
    key = PayloadEncryptor.generate_key()
    ciphertext = PayloadEncryptor.encrypt_text("ipfs://examplehash", key)

    raw = base64.b64decode(ciphertext)
    # nonce || ciphertext || tag
    assert len(raw) == PayloadEncryptor.NONCE_SIZE + len("ipfs://examplehash") + PayloadEncryptor.TAG_SIZE
    assert PayloadEncryptor.decrypt_text(ciphertext, key) == "ipfs://examplehash"


def test_generated_keys_are_fresh():
    assert PayloadEncryptor.generate_key() != PayloadEncryptor.generate_key()
    assert len(PayloadEncryptor.generate_key()) == 32


def test_gcm_wrong_key_is_an_authentication_failure():
    ciphertext = PayloadEncryptor.encrypt_text("ipfs://examplehash", PayloadEncryptor.generate_key())

    with pytest.raises(DecryptionFailure) as exc_info:
        PayloadEncryptor.decrypt_text(ciphertext, PayloadEncryptor.generate_key())
    assert exc_info.value.reason == DecryptionFailure.AUTHENTICATION


def test_gcm_tampered_ciphertext_is_rejected():
    key = PayloadEncryptor.generate_key()
    raw = bytearray(PayloadEncryptor.encrypt(b"ipfs://examplehash", key))
    raw[PayloadEncryptor.NONCE_SIZE] ^= 0x01

    with pytest.raises(DecryptionFailure) as exc_info:
        PayloadEncryptor.decrypt(bytes(raw), key)
    assert exc_info.value.reason == DecryptionFailure.AUTHENTICATION


def test_gcm_rejects_short_keys():
    with pytest.raises(InvalidKeyFormat):
        PayloadEncryptor.encrypt(b"data", b"\x00" * 16)


@pytest.mark.parametrize("ciphertext", ["not base64 at all!", "", base64.b64encode(b"short").decode()])
def test_corrupted_input_is_distinct_from_bad_key(ciphertext):
    with pytest.raises(DecryptionFailure) as exc_info:
        PayloadEncryptor.decrypt_text(ciphertext, PayloadEncryptor.generate_key())
    assert exc_info.value.reason == DecryptionFailure.CORRUPTED


def test_openssl_round_trip_uses_salted_format():
    passphrase = PayloadEncryptor.generate_key().hex().encode()
    ciphertext = PayloadEncryptor.encrypt_text("ipfs://examplehash", passphrase, CipherSuite.OPENSSL_CBC)

    # base64 of b"Salted__", what CryptoJS emits
    assert ciphertext.startswith("U2FsdGVkX1")
    assert PayloadEncryptor.decrypt_text(ciphertext, passphrase) == "ipfs://examplehash"


def test_openssl_salt_makes_output_non_deterministic():
    passphrase = b"correct horse battery staple"
    first = PayloadEncryptor.encrypt_openssl(b"same input", passphrase)
    second = PayloadEncryptor.encrypt_openssl(b"same input", passphrase)
    assert first != second


def test_openssl_truncated_body_is_corrupted():
    raw = PayloadEncryptor.encrypt_openssl(b"ipfs://examplehash", b"pass")
    with pytest.raises(DecryptionFailure):
        PayloadEncryptor.decrypt_openssl(raw[:-3], b"pass")


def test_evp_bytes_to_key_lengths():
    key, iv = PayloadEncryptor._evp_bytes_to_key(b"pass", b"12345678")
    assert len(key) == 32
    assert len(iv) == 16
