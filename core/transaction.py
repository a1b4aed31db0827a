"""
NFTokenMint (Product Lot) Transaction Schema
"""
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Union
import datetime
import time

from pydantic import BaseModel, ConfigDict, Field
from xrpl.models.exceptions import XRPLModelException
from xrpl.models.transactions import Memo, NFTokenMint, NFTokenMintFlag
from xrpl.utils import str_to_hex

from core.document import SealedDocument

SEAL_MEMO_TYPE = "SEAL_IMG_LABO"
SEAL_MEMO_TYPE_HEX = str_to_hex(SEAL_MEMO_TYPE)
SEAL_MEMO_FORMAT_HEX = str_to_hex("hex")

# The ledger caps NFToken URIs at 256 bytes
MAX_URI_HEX_LENGTH = 512


class MintTransactionError(ValueError):
    """A mint transaction cannot be built, or a ledger transaction is not a usable mint."""


class ProductLot(BaseModel):
    """Public description of a product lot, as sent by the seller form"""
    model_config = ConfigDict(populate_by_name=True)

    product_type: Optional[str] = Field(default=None, alias="productType")
    weight: Union[str, int, float]
    date: Optional[str] = None
    labo: Optional[str] = None
    lot_number: Optional[str] = Field(default=None, alias="lotNumber")
    price: Union[str, int, float, None] = None

    def to_public_record(self) -> Dict[str, str]:
        """Compact record stored in clear on the ledger (short keys keep the URI small)"""
        weight = str(self.weight)
        if not weight.endswith("kg"):
            weight = f"{weight}kg"
        return {
            "p": self.product_type or "Unknown",
            "w": weight,
            "d": self.date or datetime.date.today().isoformat(),
            "l": self.labo or "Unknown",
            "n": self.lot_number or f"LOT-{int(time.time() * 1000)}",
            "pr": str(self.price) if self.price not in (None, "") else "0",
        }


def build_mint_transaction(account: str, sealed: SealedDocument, taxon: int = 0) -> Dict[str, Any]:
    """
    Unsigned, transferable NFTokenMint for a wallet to autofill and sign.
    The document goes in the URI, the seal in a SEAL_IMG_LABO memo.
    """
    if len(sealed.document) > MAX_URI_HEX_LENGTH:
        raise MintTransactionError(
            f"Document is {len(sealed.document) // 2} bytes; "
            f"the ledger accepts at most {MAX_URI_HEX_LENGTH // 2}."
        )

    memos = None
    if sealed.seal:
        memos = [
            Memo(
                memo_type=SEAL_MEMO_TYPE_HEX,
                memo_data=sealed.seal,
                memo_format=SEAL_MEMO_FORMAT_HEX
            )
        ]

    try:
        mint = NFTokenMint(
            account=account,
            nftoken_taxon=taxon,
            flags=int(NFTokenMintFlag.TF_TRANSFERABLE),
            uri=sealed.document,
            memos=memos
        )
    except XRPLModelException as e:
        raise MintTransactionError(f"Invalid NFTokenMint: {e}") from e

    return mint.to_xrpl()


def extract_sealed_document(tx_response: Mapping[str, Any]) -> SealedDocument:
    """
    Pulls the document and seal back out of a `tx` request result.
    Accepts the API v2 shape (`tx_json`), the older `transaction` key,
    a flat transaction, or a full response wrapped in `result`.
    """
    result = tx_response.get("result", tx_response)
    tx = result.get("tx_json") or result.get("transaction") or result

    if tx.get("TransactionType") != "NFTokenMint":
        raise MintTransactionError(
            f"Transaction is not an NFTokenMint (got {tx.get('TransactionType')!r})."
        )

    uri = tx.get("URI")
    if not uri:
        raise MintTransactionError("Mint transaction has no URI.")

    return SealedDocument(document=uri, seal=find_seal_memo(tx.get("Memos") or []))


def find_seal_memo(memos) -> Optional[str]:
    """MemoData of the seal memo, matching the memo type case-insensitively."""
    for entry in memos:
        memo = entry.get("Memo", entry)
        if (memo.get("MemoType") or "").upper() == SEAL_MEMO_TYPE_HEX.upper():
            return memo.get("MemoData")
    return None
