"""
API Routes for the CertiChain Node
"""
from typing import Any, Dict, Optional
import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from core.document import RESERVED_FIELD, encrypt_for_nft, read_public_record
from core.errors import DecodingError, EncodingError
from core.transaction import (
    MintTransactionError,
    ProductLot,
    build_mint_transaction,
    extract_sealed_document,
)
from ledger.client import LedgerError, LedgerSession, get_ledger
from ledger.credentials import CredentialRole, build_credential_create, build_credential_delete
from node.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class SemiPrivateMintRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    seller_address: Optional[str] = Field(default=None, alias="sellerAddress")
    public_data: Optional[ProductLot] = Field(default=None, alias="publicData")
    ipfs_image_link: Optional[str] = Field(default=None, alias="ipfsImageLink")
    labo_public_key: Optional[str] = Field(default=None, alias="laboPublicKey")


class ReadDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri_hex: str = Field(..., alias="uriHex", description="NFT URI as stored on the ledger")


class CredentialPrepareRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject_address: str = Field(..., alias="subjectAddress")
    credential_type: str = Field(..., alias="credentialType")
    expiration_days: Optional[int] = Field(default=None, alias="expirationDays", gt=0)
    uri: Optional[str] = None


class CredentialRevokeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject_address: Optional[str] = Field(default=None, alias="subjectAddress")
    credential_type: Optional[str] = Field(default=None, alias="credentialType")


def _require_field(value: Any, name: str):
    if not value:
        raise HTTPException(status_code=400, detail=f"{name} is required")


def _issuer(settings: Settings) -> str:
    if not settings.issuer_address:
        raise HTTPException(status_code=503, detail="Credential issuer is not configured.")
    return settings.issuer_address


def require_auditor(
    x_api_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings)
):
    """Only audit companies holding the API key may prepare credentials."""
    expected = settings.auditor_api_key
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Unauthorized - invalid or missing API key")


@router.post("/mint/semi-private-wallet")
def prepare_semi_private_mint(
    request: SemiPrivateMintRequest,
    settings: Settings = Depends(get_settings)
) -> Dict[str, Any]:
    """
    Encrypts the lot's image link for the laboratory and returns an unsigned
    NFTokenMint for the seller's wallet to sign.
    """
    _require_field(request.seller_address, "sellerAddress")
    _require_field(request.public_data, "publicData")
    _require_field(request.ipfs_image_link, "ipfsImageLink")
    _require_field(request.labo_public_key, "laboPublicKey")

    public_record = request.public_data.to_public_record()

    try:
        sealed = encrypt_for_nft(
            public_record,
            request.ipfs_image_link,
            request.labo_public_key,
            cipher=settings.cipher
        )
        transaction = build_mint_transaction(request.seller_address, sealed)
    except (EncodingError, MintTransactionError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info("Prepared mint for %s, lot %s", request.seller_address, public_record["n"])

    return {
        "success": True,
        "transaction": transaction,
        "uriHex": sealed.document,
        "sealHex": sealed.seal,
    }


@router.post("/nft/read")
async def read_document(request: ReadDocumentRequest) -> Dict[str, Any]:
    """
    Public view of a document. Private keys are never sent to the node;
    the laboratory decrypts locally.
    """
    try:
        record = read_public_record(request.uri_hex)
    except DecodingError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"publicData": record, "hasPrivateReference": RESERVED_FIELD in record}


@router.get("/nft/{tx_hash}")
def get_minted_document(
    tx_hash: str,
    ledger: LedgerSession = Depends(get_ledger)
) -> Dict[str, Any]:
    """
    Retrieves a mint from the ledger and returns its public data together
    with the raw document and seal for local decryption.
    """
    try:
        tx_response = ledger.fetch_transaction(tx_hash)
    except LedgerError as e:
        status = 404 if e.code in ("txnNotFound", "notFound") else 502
        raise HTTPException(status_code=status, detail=str(e))

    try:
        sealed = extract_sealed_document(tx_response)
        record = read_public_record(sealed.document)
    except (MintTransactionError, DecodingError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"publicData": record, "uriHex": sealed.document, "sealHex": sealed.seal}


@router.post("/credentials/prepare", status_code=201, dependencies=[Depends(require_auditor)])
def prepare_credential(
    request: CredentialPrepareRequest,
    settings: Settings = Depends(get_settings),
    ledger: LedgerSession = Depends(get_ledger)
) -> Dict[str, Any]:
    """
    Returns an unsigned CredentialCreate for the issuer wallet, after an
    audit company validated the user.
    """
    issuer = _issuer(settings)
    try:
        role = CredentialRole.parse(request.credential_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        exists = ledger.credential_exists(request.subject_address, issuer, role)
    except LedgerError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if exists:
        raise HTTPException(status_code=409, detail="This credential already exists for this user.")

    validity = request.expiration_days * 24 * 60 * 60 if request.expiration_days else None
    try:
        transaction = build_credential_create(
            issuer,
            request.subject_address,
            role,
            validity_seconds=validity,
            uri=request.uri
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Prepared %s credential for %s", role.value, request.subject_address)
    return {"success": True, "transaction": transaction}


@router.delete("/credentials/revoke", dependencies=[Depends(require_auditor)])
def revoke_credential(
    request: CredentialRevokeRequest,
    settings: Settings = Depends(get_settings),
    ledger: LedgerSession = Depends(get_ledger)
) -> Dict[str, Any]:
    """Returns an unsigned CredentialDelete for a credential the issuer granted."""
    _require_field(request.subject_address, "subjectAddress")
    _require_field(request.credential_type, "credentialType")
    issuer = _issuer(settings)
    try:
        role = CredentialRole.parse(request.credential_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        exists = ledger.credential_exists(request.subject_address, issuer, role)
    except LedgerError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if not exists:
        raise HTTPException(status_code=404, detail="This credential does not exist.")

    try:
        transaction = build_credential_delete(issuer, request.subject_address, role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Prepared revocation of %s for %s", role.value, request.subject_address)
    return {"success": True, "transaction": transaction}


@router.get("/credentials/types")
def list_credential_types() -> Dict[str, Any]:
    return {
        "success": True,
        "types": [role.name for role in CredentialRole],
        "mapping": {role.name: role.value for role in CredentialRole},
    }


@router.get("/credentials/{subject}/{role}")
def get_credential_status(
    subject: str,
    role: str,
    settings: Settings = Depends(get_settings),
    ledger: LedgerSession = Depends(get_ledger)
) -> Dict[str, Any]:
    """Whether `subject` holds a validated credential for `role`."""
    issuer = _issuer(settings)
    try:
        credential_role = CredentialRole.parse(role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        exists = ledger.credential_exists(subject, issuer, credential_role)
    except LedgerError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return {"subject": subject, "credentialType": credential_role.value, "exists": exists}
