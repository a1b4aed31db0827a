"""
Semi-Private NFT Document Codec

A document is hex(UTF-8 JSON) of the public record plus one reserved field,
`i_secret`, holding the encrypted private reference (an image link). The
single-use key for that field travels separately in a seal that only the
Laboratory can open. Anyone can read the public fields.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from core.encryption import CipherSuite, PayloadEncryptor
from core.errors import DecodingError, DecryptionFailure, EncodingError, InvalidKeyFormat
from core.identity import KeyInput, normalize_private_key, parse_public_key
from core.seal import Envelope

logger = logging.getLogger(__name__)

RESERVED_FIELD = "i_secret"

HexOrBytes = Union[str, bytes, bytearray]


class SealedDocument(BaseModel):
    """Encoder output, ready for a NFTokenMint URI and memo"""
    document: str
    seal: Optional[str] = None


class DecodedDocument(BaseModel):
    """
    Decoder output. `decryption_attempted` is False when no seal/key pair
    was supplied or the document has no encrypted field.
    """
    public_record: Dict[str, Any]
    private_reference: Optional[str] = None
    decryption_attempted: bool = False
    decryption_succeeded: bool = False


def _hex_to_bytes(value: HexOrBytes) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        # hex text handed over as bytes
        value = bytes(value).decode("ascii")
    return bytes.fromhex(value.strip())


def encrypt_for_nft(
    public_record: Mapping,
    private_reference: str,
    recipient_public_key: KeyInput,
    cipher: CipherSuite = CipherSuite.AES_GCM
) -> SealedDocument:
    """
    Builds the document (public fields in clear, private reference encrypted)
    and the seal holding the document key for the recipient.
    """
    if not isinstance(private_reference, str) or not private_reference:
        raise EncodingError("Private reference must be a non-empty string.")
    if not isinstance(public_record, Mapping):
        raise EncodingError("Public record must be a mapping.")
    if RESERVED_FIELD in public_record:
        raise EncodingError(f"Public record must not use the reserved key '{RESERVED_FIELD}'.")

    try:
        recipient = parse_public_key(recipient_public_key)
    except InvalidKeyFormat as e:
        raise EncodingError(f"Invalid recipient public key: {e}") from e

    key = PayloadEncryptor.generate_key()
    if cipher == CipherSuite.OPENSSL_CBC:
        # CryptoJS readers expect the hex text of the key as passphrase
        key = key.hex().encode("ascii")

    payload = dict(public_record)
    payload[RESERVED_FIELD] = PayloadEncryptor.encrypt_text(private_reference, key, cipher)

    try:
        document = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        # ValueError covers circular references and NaN/Infinity
        raise EncodingError(f"Public record is not JSON serializable: {e}") from e

    seal = Envelope.seal(key, recipient)

    return SealedDocument(document=document.hex(), seal=seal.hex())


def read_public_record(document: HexOrBytes) -> Dict[str, Any]:
    """Hex-decodes and parses a document. No key material involved."""
    try:
        raw = _hex_to_bytes(document)
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodingError(f"Document is not valid hex: {e}") from e

    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodingError(f"Document is not valid UTF-8 JSON: {e}") from e

    if not isinstance(record, dict):
        raise DecodingError("Document does not contain a JSON object.")
    return record


def open_private_reference(ciphertext: str, seal: HexOrBytes, private_key: KeyInput) -> str:
    """
    Opens the seal and decrypts the reserved field. Raises InvalidKeyFormat
    or DecryptionFailure; decrypt_nft is the forgiving wrapper.
    """
    key = Envelope.open(_seal_bytes(seal), normalize_private_key(private_key))
    if not isinstance(ciphertext, str):
        raise DecryptionFailure("Encrypted field is not a string.")
    return PayloadEncryptor.decrypt_text(ciphertext, key)


def _seal_bytes(seal: HexOrBytes) -> bytes:
    try:
        return _hex_to_bytes(seal)
    except (ValueError, TypeError, AttributeError) as e:
        raise DecryptionFailure(f"Seal is not valid hex: {e}") from e


def decrypt_nft(
    document: HexOrBytes,
    seal: Optional[HexOrBytes] = None,
    private_key: Optional[KeyInput] = None
) -> DecodedDocument:
    """
    Reads a document. The public record is always returned; the private
    reference only when a seal and the matching private key are given.
    A structurally broken document raises DecodingError, a failed
    decryption does not.
    """
    public_record = read_public_record(document)
    result = DecodedDocument(public_record=public_record)

    if (seal is None) != (private_key is None):
        logger.debug("Seal and private key must be supplied together; skipping decryption.")
        return result
    if not seal or RESERVED_FIELD not in public_record:
        return result

    result.decryption_attempted = True
    try:
        result.private_reference = open_private_reference(
            public_record[RESERVED_FIELD], seal, private_key
        )
        result.decryption_succeeded = True
    except (InvalidKeyFormat, DecryptionFailure) as e:
        logger.warning("Private reference could not be decrypted: %s", e)

    return result
