"""
Private Reference Encryption
"""
import base64
import binascii
import hashlib
import os
from enum import Enum

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from core.errors import DecryptionFailure, InvalidKeyFormat


class CipherSuite(str, Enum):
    """Symmetric schemes understood by the codec"""
    AES_GCM = "aes-256-gcm"
    # OpenSSL "Salted__" format, as produced by CryptoJS.AES.encrypt with a passphrase
    OPENSSL_CBC = "openssl-aes-256-cbc"


class PayloadEncryptor:
    """Handles encryption and decryption of the private reference string."""

    KEY_SIZE = 32
    TAG_SIZE = 16
    NONCE_SIZE = 12

    OPENSSL_MAGIC = b"Salted__"
    OPENSSL_SALT_SIZE = 8
    OPENSSL_IV_SIZE = 16
    BLOCK_SIZE = 16

    @staticmethod
    def generate_key() -> bytes:
        """Fresh single-use 256-bit key."""
        return os.urandom(PayloadEncryptor.KEY_SIZE)

    @staticmethod
    def encrypt(data: bytes, key: bytes) -> bytes:
        """
        Encrypts data using AES-256-GCM.
        Returns a byte string in the format: nonce || ciphertext || tag
        """
        PayloadEncryptor._check_key(key)
        aesgcm = AESGCM(key)
        nonce = os.urandom(PayloadEncryptor.NONCE_SIZE)
        # The tag is appended to the ciphertext by AESGCM
        return nonce + aesgcm.encrypt(nonce, data, None)

    @staticmethod
    def decrypt(encrypted_data: bytes, key: bytes) -> bytes:
        """
        Decrypts data encrypted with AES-256-GCM.
        Expects a byte string in the format: nonce || ciphertext || tag
        """
        PayloadEncryptor._check_key(key)
        if len(encrypted_data) < PayloadEncryptor.NONCE_SIZE + PayloadEncryptor.TAG_SIZE:
            raise DecryptionFailure("Invalid encrypted data format.")

        nonce = encrypted_data[:PayloadEncryptor.NONCE_SIZE]
        ciphertext_with_tag = encrypted_data[PayloadEncryptor.NONCE_SIZE:]

        try:
            return AESGCM(key).decrypt(nonce, ciphertext_with_tag, None)
        except InvalidTag:
            raise DecryptionFailure(
                "Decryption failed. The data may be corrupt or the key incorrect.",
                reason=DecryptionFailure.AUTHENTICATION,
            )

    @staticmethod
    def encrypt_openssl(data: bytes, passphrase: bytes) -> bytes:
        """
        AES-256-CBC with an EVP_BytesToKey(MD5) derived key and IV.
        Returns: b"Salted__" || salt || ciphertext
        """
        salt = os.urandom(PayloadEncryptor.OPENSSL_SALT_SIZE)
        key, iv = PayloadEncryptor._evp_bytes_to_key(passphrase, salt)

        padder = padding.PKCS7(PayloadEncryptor.BLOCK_SIZE * 8).padder()
        padded = padder.update(data) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return PayloadEncryptor.OPENSSL_MAGIC + salt + ciphertext

    @staticmethod
    def decrypt_openssl(encrypted_data: bytes, passphrase: bytes) -> bytes:
        """Inverse of encrypt_openssl. No integrity check beyond the padding."""
        header = len(PayloadEncryptor.OPENSSL_MAGIC) + PayloadEncryptor.OPENSSL_SALT_SIZE
        body = encrypted_data[header:]
        if (
            not encrypted_data.startswith(PayloadEncryptor.OPENSSL_MAGIC)
            or not body
            or len(body) % PayloadEncryptor.BLOCK_SIZE
        ):
            raise DecryptionFailure("Invalid OpenSSL encrypted data format.")

        salt = encrypted_data[len(PayloadEncryptor.OPENSSL_MAGIC):header]
        key, iv = PayloadEncryptor._evp_bytes_to_key(passphrase, salt)

        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        unpadder = padding.PKCS7(PayloadEncryptor.BLOCK_SIZE * 8).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionFailure("Bad padding. The data may be corrupt or the key incorrect.")

    @staticmethod
    def encrypt_text(plaintext: str, key: bytes, suite: CipherSuite = CipherSuite.AES_GCM) -> str:
        """Encrypts a UTF-8 string and returns a self-contained base64 string."""
        data = plaintext.encode("utf-8")
        if suite == CipherSuite.OPENSSL_CBC:
            raw = PayloadEncryptor.encrypt_openssl(data, key)
        else:
            raw = PayloadEncryptor.encrypt(data, key)
        return base64.b64encode(raw).decode("ascii")

    @staticmethod
    def decrypt_text(ciphertext: str, key: bytes) -> str:
        """
        Decrypts the output of encrypt_text. The suite is detected from the
        ciphertext itself; for the OpenSSL suite `key` is the passphrase.
        """
        try:
            raw = base64.b64decode(ciphertext, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            raise DecryptionFailure(f"Ciphertext is not valid base64: {e}")

        if raw.startswith(PayloadEncryptor.OPENSSL_MAGIC):
            data = PayloadEncryptor.decrypt_openssl(raw, key)
        else:
            data = PayloadEncryptor.decrypt(raw, key)

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailure("Decrypted data is not valid UTF-8.")

    @staticmethod
    def _check_key(key: bytes):
        if not isinstance(key, (bytes, bytearray)) or len(key) != PayloadEncryptor.KEY_SIZE:
            raise InvalidKeyFormat(f"AES-256 key must be {PayloadEncryptor.KEY_SIZE} bytes.")

    @staticmethod
    def _evp_bytes_to_key(passphrase: bytes, salt: bytes):
        """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
        wanted = PayloadEncryptor.KEY_SIZE + PayloadEncryptor.OPENSSL_IV_SIZE
        derived = b""
        block = b""
        while len(derived) < wanted:
            block = hashlib.md5(block + passphrase + salt).digest()
            derived += block
        return derived[:PayloadEncryptor.KEY_SIZE], derived[PayloadEncryptor.KEY_SIZE:wanted]
