"""
Tests for the ledger session
"""
import pytest
from xrpl.models.requests import Tx

from ledger.client import LedgerError, LedgerSession
from ledger.credentials import CredentialRole


class FakeResponse:
    def __init__(self, result, ok=True):
        self.result = result
        self._ok = ok

    def is_successful(self):
        return self._ok


class FakeClient:
    """Records requests and replays queued responses"""

    def __init__(self, url):
        self.url = url
        self.requests = []
        self.responses = []

    def request(self, request):
        self.requests.append(request)
        return self.responses.pop(0)


@pytest.fixture
def clients():
    return []


@pytest.fixture
def session(clients):
    def factory(url):
        client = FakeClient(url)
        clients.append(client)
        return client

    return LedgerSession("http://ledger.test", client_factory=factory)


def test_session_lifecycle(session, clients):
    assert not session.is_open
    with session as opened:
        assert opened is session
        assert session.is_open
        assert clients[0].url == "http://ledger.test"
    assert not session.is_open


def test_open_is_idempotent(session, clients):
    session.open()
    session.open()
    assert len(clients) == 1
    session.close()
    session.close()


def test_requests_need_an_open_session(session):
    with pytest.raises(LedgerError):
        session.fetch_transaction("ABC")


def test_fetch_transaction(session, clients):
    with session:
        clients[0].responses.append(FakeResponse({"tx_json": {"TransactionType": "NFTokenMint"}}))
        result = session.fetch_transaction("ABC")

    assert result["tx_json"]["TransactionType"] == "NFTokenMint"
    request = clients[0].requests[0]
    assert isinstance(request, Tx)
    assert request.transaction == "ABC"


def test_fetch_missing_transaction(session, clients):
    with session:
        clients[0].responses.append(FakeResponse({"error": "txnNotFound"}, ok=False))
        with pytest.raises(LedgerError) as exc_info:
            session.fetch_transaction("ABC")
    assert exc_info.value.code == "txnNotFound"


@pytest.mark.parametrize("response, expected", [
    (FakeResponse({"node": {"LedgerEntryType": "Credential"}}), True),
    (FakeResponse({"error": "entryNotFound"}, ok=False), False),
])
def test_credential_exists(session, clients, response, expected):
    with session:
        clients[0].responses.append(response)
        assert session.credential_exists("rSubject", "rIssuer", CredentialRole.LABO) is expected


def test_credential_lookup_errors_propagate(session, clients):
    with session:
        clients[0].responses.append(FakeResponse({"error": "invalidParams"}, ok=False))
        with pytest.raises(LedgerError):
            session.credential_exists("rSubject", "rIssuer", CredentialRole.LABO)
