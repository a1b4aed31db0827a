"""
Role Credentials (Buyer / Seller / Labo / Transporter)
"""
from enum import Enum
from typing import Any, Dict, Optional
import time

from xrpl.core.addresscodec import is_valid_classic_address
from xrpl.utils import str_to_hex

# Seconds between the Unix epoch and the Ripple epoch (2000-01-01)
RIPPLE_EPOCH_OFFSET = 946684800
DEFAULT_VALIDITY_SECONDS = 365 * 24 * 60 * 60


class CredentialRole(str, Enum):
    """Marketplace roles and their on-ledger credential types"""
    BUYER = "CERTICHAIN_BUYER"
    SELLER = "CERTICHAIN_SELLER"
    LABO = "CERTICHAIN_LABO"
    TRANSPORTER = "CERTICHAIN_TRANSPORTER"

    @classmethod
    def parse(cls, name: str) -> 'CredentialRole':
        """Accepts the role name in any case ("labo", "LABO")."""
        try:
            return cls[name.upper()]
        except KeyError:
            valid = ", ".join(role.name for role in cls)
            raise ValueError(f"Invalid credential type: {name}. Valid types: {valid}")


def credential_type_hex(role: CredentialRole) -> str:
    return str_to_hex(role.value).upper()


def ripple_expiration(validity_seconds: int = DEFAULT_VALIDITY_SECONDS, now: Optional[float] = None) -> int:
    """Expiration in Ripple-epoch seconds, `validity_seconds` from now"""
    if now is None:
        now = time.time()
    return int(now) - RIPPLE_EPOCH_OFFSET + validity_seconds


def _check_address(address: str, what: str):
    if not is_valid_classic_address(address):
        raise ValueError(f"Invalid {what} address: {address}")


def build_credential_create(
    issuer: str,
    subject: str,
    role: CredentialRole,
    validity_seconds: Optional[int] = None,
    uri: Optional[str] = None,
    now: Optional[float] = None
) -> Dict[str, Any]:
    """Unsigned CredentialCreate, to be signed by the issuer wallet"""
    _check_address(issuer, "issuer")
    _check_address(subject, "subject")

    tx: Dict[str, Any] = {
        "TransactionType": "CredentialCreate",
        "Account": issuer,
        "Subject": subject,
        "CredentialType": credential_type_hex(role),
        "Expiration": ripple_expiration(
            DEFAULT_VALIDITY_SECONDS if validity_seconds is None else validity_seconds,
            now
        ),
    }
    if uri:
        tx["URI"] = str_to_hex(uri).upper()
    return tx


def build_credential_delete(issuer: str, subject: str, role: CredentialRole) -> Dict[str, Any]:
    """Unsigned CredentialDelete (revocation by the issuer)"""
    _check_address(issuer, "issuer")
    _check_address(subject, "subject")
    return {
        "TransactionType": "CredentialDelete",
        "Account": issuer,
        "Subject": subject,
        "CredentialType": credential_type_hex(role),
    }
