"""
Laboratory Key Pair Management
"""
from dataclasses import dataclass
from typing import Union
import hashlib

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives import serialization

from core.errors import InvalidKeyFormat

KeyInput = Union[bytes, bytearray, str]

CURVE = ec.SECP256K1()
# Order of the secp256k1 base point
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

PRIVATE_KEY_SIZE = 32
COMPRESSED_KEY_SIZE = 33
UNCOMPRESSED_KEY_SIZE = 65


def _to_bytes(key: KeyInput, what: str) -> bytes:
    """Accept raw bytes or a hex string (optionally 0x-prefixed)."""
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    if isinstance(key, str):
        text = key.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise InvalidKeyFormat(f"{what} is not valid hex.")
    raise InvalidKeyFormat(f"{what} must be bytes or a hex string, got {type(key).__name__}.")


def normalize_private_key(key: KeyInput) -> bytes:
    """
    Returns the canonical 32-byte secp256k1 scalar.

    XRPL wallets derived from a seed expose the private key as 33 bytes with
    a leading zero byte (66 hex characters starting with "00"); that byte is
    stripped. Already-canonical keys pass through unchanged.
    """
    raw = _to_bytes(key, "Private key")
    if len(raw) == PRIVATE_KEY_SIZE + 1 and raw[0] == 0:
        raw = raw[1:]
    if len(raw) != PRIVATE_KEY_SIZE:
        raise InvalidKeyFormat(
            f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(raw)}."
        )
    return raw


def load_private_key(key: bytes) -> ec.EllipticCurvePrivateKey:
    """Loads an exact 32-byte scalar. Does not normalize."""
    if not isinstance(key, (bytes, bytearray)) or len(key) != PRIVATE_KEY_SIZE:
        raise InvalidKeyFormat(f"Private key must be exactly {PRIVATE_KEY_SIZE} bytes.")
    value = int.from_bytes(key, "big")
    if not 0 < value < CURVE_ORDER:
        raise InvalidKeyFormat("Private key is out of range for secp256k1.")
    return ec.derive_private_key(value, CURVE)


def load_public_key(key: KeyInput) -> ec.EllipticCurvePublicKey:
    """Loads a compressed or uncompressed SEC1 point and checks it is on the curve."""
    raw = _to_bytes(key, "Public key")
    if len(raw) not in (COMPRESSED_KEY_SIZE, UNCOMPRESSED_KEY_SIZE):
        raise InvalidKeyFormat(
            f"Public key must be {COMPRESSED_KEY_SIZE} or {UNCOMPRESSED_KEY_SIZE} bytes, got {len(raw)}."
        )
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, raw)
    except ValueError:
        raise InvalidKeyFormat("Public key is not a valid secp256k1 point.")


def parse_public_key(key: KeyInput) -> bytes:
    """Validates a public key and returns its compressed encoding."""
    return load_public_key(key).public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint
    )


@dataclass(frozen=True)
class LaboKeyPair:
    """
    secp256k1 key pair of the privileged reader (the Laboratory).
    The public half goes to sellers; the private half never leaves the Labo.
    """
    private_key: bytes
    public_key: bytes

    @classmethod
    def generate(cls) -> 'LaboKeyPair':
        """Generate a new key pair"""
        private_key = ec.generate_private_key(CURVE)
        return cls._from_key_object(private_key)

    @classmethod
    def from_private_key(cls, key: KeyInput) -> 'LaboKeyPair':
        """Rebuild the pair from a private key, XRPL prefixed form accepted"""
        return cls._from_key_object(load_private_key(normalize_private_key(key)))

    @classmethod
    def from_xrpl_seed(cls, seed: str) -> 'LaboKeyPair':
        """Derive the pair the same way an XRPL secp256k1 wallet does"""
        from xrpl.constants import CryptoAlgorithm, XRPLException
        from xrpl.wallet import Wallet

        try:
            wallet = Wallet.from_seed(seed, algorithm=CryptoAlgorithm.SECP256K1)
        except (XRPLException, ValueError) as e:
            raise InvalidKeyFormat(f"Invalid XRPL seed: {e}") from e
        return cls.from_private_key(wallet.private_key)

    @classmethod
    def _from_key_object(cls, private_key: ec.EllipticCurvePrivateKey) -> 'LaboKeyPair':
        private_bytes = private_key.private_numbers().private_value.to_bytes(PRIVATE_KEY_SIZE, "big")
        public_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint
        )
        return cls(private_key=private_bytes, public_key=public_bytes)

    @property
    def public_key_hex(self) -> str:
        """Upper-case hex, the way XRPL tooling prints keys"""
        return self.public_key.hex().upper()

    @property
    def private_key_hex(self) -> str:
        return self.private_key.hex().upper()

    @property
    def fingerprint(self) -> str:
        """Short public identifier of the key pair"""
        first_hash = hashlib.sha256(self.public_key).digest()
        return f"labo:{hashlib.sha256(first_hash).hexdigest()[:16]}"

    def __str__(self) -> str:
        return self.fingerprint
