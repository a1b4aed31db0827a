"""
Seal (ECIES Envelope) over secp256k1

A seal wraps a small payload (the single-use document key) for one
recipient public key. Layout, identical to eciesjs / eciespy defaults:

    ephemeral_public_key (65, uncompressed) || nonce (16) || tag (16) || ciphertext

The AES-256-GCM key is HKDF-SHA256(ephemeral_public_key || shared_point),
both points uncompressed, no salt and no info.
"""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from ecdsa import SECP256k1, VerifyingKey

from core.errors import DecryptionFailure, InvalidKeyFormat
from core.identity import CURVE, KeyInput, UNCOMPRESSED_KEY_SIZE, load_private_key, load_public_key


class Envelope:
    """Seals and opens byte payloads for a secp256k1 recipient."""

    EPHEMERAL_KEY_SIZE = UNCOMPRESSED_KEY_SIZE
    NONCE_SIZE = 16
    TAG_SIZE = 16
    KEY_SIZE = 32
    OVERHEAD = EPHEMERAL_KEY_SIZE + NONCE_SIZE + TAG_SIZE

    @staticmethod
    def seal(payload: bytes, recipient_public_key: KeyInput) -> bytes:
        """Encrypts payload so that only the holder of the matching private key can read it."""
        recipient = load_public_key(recipient_public_key)
        recipient_bytes = recipient.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        )

        ephemeral = ec.generate_private_key(CURVE)
        ephemeral_bytes = ephemeral.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint
        )

        shared_point = Envelope._shared_point(
            recipient_bytes,
            ephemeral.private_numbers().private_value
        )
        key = Envelope._derive_key(ephemeral_bytes, shared_point)

        nonce = os.urandom(Envelope.NONCE_SIZE)
        ciphertext_with_tag = AESGCM(key).encrypt(nonce, bytes(payload), None)
        ciphertext = ciphertext_with_tag[:-Envelope.TAG_SIZE]
        tag = ciphertext_with_tag[-Envelope.TAG_SIZE:]

        return ephemeral_bytes + nonce + tag + ciphertext

    @staticmethod
    def open(sealed: bytes, recipient_private_key: bytes) -> bytes:
        """
        Recovers the payload. The private key must already be the canonical
        32-byte scalar; InvalidKeyFormat is raised otherwise.
        """
        private_key = load_private_key(recipient_private_key)

        if len(sealed) < Envelope.OVERHEAD:
            raise DecryptionFailure("Sealed data is too short.")

        ephemeral_bytes = bytes(sealed[:Envelope.EPHEMERAL_KEY_SIZE])
        nonce_end = Envelope.EPHEMERAL_KEY_SIZE + Envelope.NONCE_SIZE
        nonce = bytes(sealed[Envelope.EPHEMERAL_KEY_SIZE:nonce_end])
        tag = bytes(sealed[nonce_end:Envelope.OVERHEAD])
        ciphertext = bytes(sealed[Envelope.OVERHEAD:])

        try:
            load_public_key(ephemeral_bytes)
        except InvalidKeyFormat:
            raise DecryptionFailure("Sealed data carries an invalid ephemeral key.")

        shared_point = Envelope._shared_point(
            ephemeral_bytes,
            private_key.private_numbers().private_value
        )
        key = Envelope._derive_key(ephemeral_bytes, shared_point)

        try:
            return AESGCM(key).decrypt(nonce, ciphertext + tag, None)
        except InvalidTag:
            raise DecryptionFailure(
                "Seal could not be opened. Wrong key or tampered data.",
                reason=DecryptionFailure.AUTHENTICATION,
            )

    @staticmethod
    def _shared_point(public_key: bytes, scalar: int) -> bytes:
        # cryptography's ECDH only returns the x coordinate; the KDF input needs the full point
        point = VerifyingKey.from_string(public_key, curve=SECP256k1).pubkey.point * scalar
        return VerifyingKey.from_public_point(point, curve=SECP256k1).to_string("uncompressed")

    @staticmethod
    def _derive_key(ephemeral_public_key: bytes, shared_point: bytes) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=Envelope.KEY_SIZE,
            salt=None,
            info=None,
        )
        return hkdf.derive(ephemeral_public_key + shared_point)
