from __future__ import annotations

import base64
from typing import Any

import pytest
import requests

from ticket_gate.config import GateConfig
from ticket_gate.credentials import GateCredentials
from ticket_gate.errors import FetchError, MalformedResponseError
from ticket_gate.fetcher import StatusFetcher
from ticket_gate.models import ForeignRepo, Jira, LocalRepo, Ticket

CREDENTIALS = GateCredentials(github_token="gh-token", jira_token="jira-token")


class FakeResponse:
    def __init__(self, status_code: int, payload: Any, reason: str = "OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response: Any):
        self._response = response
        self.calls: list[dict] = []

    def request(self, method: str, url: str, headers=None, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, "headers": headers, "timeout": timeout})
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _expected_auth(token: str) -> str:
    return "Basic " + base64.b64encode(token.encode()).decode()


def test_github_ticket_uses_github_token_and_state() -> None:
    session = FakeSession(FakeResponse(200, {"number": 42, "state": "open"}))
    ticket = Ticket(LocalRepo(), "42", "https://api.github.com/repos/o/r/issues/42")

    status = StatusFetcher(GateConfig(), session=session).fetch(ticket, CREDENTIALS)

    assert status == "open"
    assert ticket.status == "open"
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == ticket.uri
    assert call["headers"]["Authorization"] == _expected_auth("gh-token")
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 20.0


def test_foreign_ticket_uses_github_token() -> None:
    session = FakeSession(FakeResponse(200, {"state": "closed"}))
    ticket = Ticket(ForeignRepo("db-beaver", "core"), "57", "https://api.github.com/repos/db-beaver/core/issues/57")

    assert StatusFetcher(session=session).fetch(ticket, CREDENTIALS) == "closed"
    assert session.calls[0]["headers"]["Authorization"] == _expected_auth("gh-token")


def test_jira_ticket_uses_jira_token_and_status_name() -> None:
    payload = {"key": "CB-1000", "fields": {"summary": "s", "status": {"name": "Done", "id": "10001"}}}
    session = FakeSession(FakeResponse(200, payload))
    ticket = Ticket(Jira(), "CB-1000", "https://dbeaver.atlassian.net/rest/api/2/issue/CB-1000")

    assert StatusFetcher(session=session).fetch(ticket, CREDENTIALS) == "Done"
    assert session.calls[0]["headers"]["Authorization"] == _expected_auth("jira-token")


def test_timeout_comes_from_config() -> None:
    session = FakeSession(FakeResponse(200, {"state": "open"}))
    ticket = Ticket(LocalRepo(), "1", "https://api.github.com/repos/o/r/issues/1")

    StatusFetcher(GateConfig(timeout_seconds=3), session=session).fetch(ticket, CREDENTIALS)
    assert session.calls[0]["timeout"] == 3


def test_non_success_status_raises_fetch_error() -> None:
    session = FakeSession(FakeResponse(404, {"message": "Not Found"}, reason="Not Found"))
    ticket = Ticket(LocalRepo(), "9", "https://api.github.com/repos/o/r/issues/9")

    with pytest.raises(FetchError) as excinfo:
        StatusFetcher(session=session).fetch(ticket, CREDENTIALS)

    assert excinfo.value.uri == ticket.uri
    assert excinfo.value.http_status == 404
    assert excinfo.value.status_text == "Not Found"
    assert "404 Not Found" in str(excinfo.value)
    assert ticket.status is None
    assert len(session.calls) == 1


def test_transport_error_raises_fetch_error_without_retry() -> None:
    session = FakeSession(requests.ConnectionError("connection refused"))
    ticket = Ticket(Jira(), "CB-1", "https://dbeaver.atlassian.net/rest/api/2/issue/CB-1")

    with pytest.raises(FetchError) as excinfo:
        StatusFetcher(session=session).fetch(ticket, CREDENTIALS)

    assert excinfo.value.http_status is None
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    ("board", "payload", "field"),
    [
        (LocalRepo(), {"number": 1}, "state"),
        (LocalRepo(), {"state": None}, "state"),
        (Jira(), {"fields": {}}, "fields.status.name"),
        (Jira(), {"fields": {"status": {"id": "3"}}}, "fields.status.name"),
        (Jira(), [], "fields.status.name"),
    ],
)
def test_missing_status_field_raises_malformed_response(board, payload, field) -> None:
    session = FakeSession(FakeResponse(200, payload))
    ticket = Ticket(board, "1", "https://tracker/1")

    with pytest.raises(MalformedResponseError) as excinfo:
        StatusFetcher(session=session).fetch(ticket, CREDENTIALS)

    assert excinfo.value.field == field
    assert ticket.status is None


def test_non_json_body_raises_malformed_response() -> None:
    session = FakeSession(FakeResponse(200, ValueError("Expecting value")))
    ticket = Ticket(LocalRepo(), "1", "https://api.github.com/repos/o/r/issues/1")

    with pytest.raises(MalformedResponseError):
        StatusFetcher(session=session).fetch(ticket, CREDENTIALS)
