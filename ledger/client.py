"""
XRPL Ledger Session for CertiChain
"""
from typing import Any, Callable, Dict, Optional
import logging

from xrpl.clients import JsonRpcClient
from xrpl.models.requests import GenericRequest, Tx

from ledger.credentials import CredentialRole, credential_type_hex

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """A ledger request failed. `code` carries the rippled error token when there is one."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class LedgerSession:
    """
    Caller-owned connection to a rippled JSON-RPC endpoint.
    Open it explicitly (or use it as a context manager) and close it when done.
    """

    def __init__(self, url: str, client_factory: Callable[[str], Any] = JsonRpcClient):
        self.url = url
        self._client_factory = client_factory
        self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> 'LedgerSession':
        if self._client is None:
            self._client = self._client_factory(self.url)
            logger.info("Ledger session opened: %s", self.url)
        return self

    def close(self):
        if self._client is not None:
            self._client = None
            logger.info("Ledger session closed: %s", self.url)

    def __enter__(self) -> 'LedgerSession':
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _request(self, request) -> Dict[str, Any]:
        if self._client is None:
            raise LedgerError("Ledger session is not open.")
        response = self._client.request(request)
        if not response.is_successful():
            code = response.result.get("error")
            raise LedgerError(
                response.result.get("error_message") or f"Ledger request failed: {code}",
                code=code
            )
        return response.result

    # ==================== TRANSACTIONS ====================

    def fetch_transaction(self, tx_hash: str) -> Dict[str, Any]:
        """Result of a `tx` request for a validated or pending transaction"""
        result = self._request(Tx(transaction=tx_hash))
        logger.debug("Fetched transaction %s", tx_hash)
        return result

    # ==================== CREDENTIALS ====================

    def credential_exists(self, subject: str, issuer: str, role: CredentialRole) -> bool:
        """Whether a validated Credential entry exists for (subject, issuer, role)"""
        request = GenericRequest(
            method="ledger_entry",
            credential={
                "subject": subject,
                "issuer": issuer,
                "credential_type": credential_type_hex(role),
            },
            ledger_index="validated"
        )
        try:
            self._request(request)
        except LedgerError as e:
            if e.code == "entryNotFound":
                return False
            raise
        return True


def get_ledger():
    """Dependency for getting an open ledger session."""
    from node.config import get_settings

    session = LedgerSession(get_settings().xrpl_rpc_url)
    session.open()
    try:
        yield session
    finally:
        session.close()
