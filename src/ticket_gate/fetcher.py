"""Single authenticated read of a ticket's status from its tracker."""

from __future__ import annotations

import base64
from typing import Any, Optional

import requests
from pydantic import ValidationError

from ticket_gate.config import GateConfig
from ticket_gate.credentials import GateCredentials
from ticket_gate.errors import FetchError, MalformedResponseError
from ticket_gate.logging import get_logger
from ticket_gate.models import Board, ForeignRepo, Jira, LocalRepo, Ticket, board_label
from ticket_gate.schema import GitHubIssue, JiraIssue

logger = get_logger("ticket_gate.fetcher")


def _basic_authorization(token: str) -> str:
    # The trackers expect the whole token base64-encoded, not a user:pass pair.
    return "Basic " + base64.b64encode(token.encode("utf-8")).decode("ascii")


def _token_for(board: Board, credentials: GateCredentials) -> str:
    if isinstance(board, (LocalRepo, ForeignRepo)):
        return credentials.github_token
    if isinstance(board, Jira):
        return credentials.jira_token
    raise TypeError(f"Unsupported board: {board!r}")


def _status_from_payload(board: Board, uri: str, payload: Any) -> str:
    try:
        if isinstance(board, (LocalRepo, ForeignRepo)):
            return GitHubIssue.model_validate(payload).state
        if isinstance(board, Jira):
            return JiraIssue.model_validate(payload).fields.status.name
    except ValidationError as exc:
        field = "fields.status.name" if isinstance(board, Jira) else "state"
        raise MalformedResponseError(uri, field, f"{exc.error_count()} validation error(s)") from exc
    raise TypeError(f"Unsupported board: {board!r}")


class StatusFetcher:
    def __init__(
        self,
        config: Optional[GateConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config or GateConfig()
        self._session = session or requests.Session()

    def fetch(self, ticket: Ticket, credentials: GateCredentials) -> str:
        """Read the ticket from its tracker, record its status and return it.

        Raises :class:`FetchError` on transport failures and non-2xx answers,
        :class:`MalformedResponseError` when the body lacks the status field.
        """
        headers = {
            "Authorization": _basic_authorization(_token_for(ticket.board, credentials)),
            "Accept": "application/json",
        }
        try:
            response = self._session.request(
                "GET",
                ticket.uri,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise FetchError(ticket.uri, None, str(exc)) from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "ticket_fetch_failed",
                extra={"extra": {"uri": ticket.uri, "http_status": response.status_code}},
            )
            raise FetchError(ticket.uri, response.status_code, response.reason or "")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(ticket.uri, "body", "response is not JSON") from exc

        status = _status_from_payload(ticket.board, ticket.uri, payload)
        ticket.record_status(status)
        logger.info(
            "ticket_status_fetched",
            extra={
                "board": board_label(ticket.board),
                "ticket_id": ticket.id,
                "extra": {"status": status},
            },
        )
        return status
