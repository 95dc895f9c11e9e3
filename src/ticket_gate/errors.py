"""Error taxonomy for the ticket gate.

Every stage of the pipeline raises a subclass of ``TicketGateError``; the
pipeline turns any of them into a failing verdict and the entrypoint turns that
into a non-zero exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ticket_gate.models import Ticket


class TicketGateError(Exception):
    """Base exception for ticket gate failures."""


class ConfigurationError(TicketGateError):
    """Required configuration or credentials are missing or invalid."""


class NoReferenceFoundError(TicketGateError):
    """The commit message carries no recognised ticket reference."""


class UnresolvedReferenceError(TicketGateError):
    """A token accepted by the extractor matches no resolver rule."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Cannot resolve ticket reference: {token!r}")
        self.token = token


class FetchError(TicketGateError):
    """The tracker answered with a non-success status or was unreachable."""

    def __init__(self, uri: str, http_status: Optional[int], status_text: str) -> None:
        if http_status is None:
            message = f"An error has occured: {uri}: {status_text}"
        else:
            message = f"An error has occured: {uri}: {http_status} {status_text}"
        super().__init__(message)
        self.uri = uri
        self.http_status = http_status
        self.status_text = status_text


class MalformedResponseError(TicketGateError):
    """The tracker response lacks the status field for its board."""

    def __init__(self, uri: str, field: str, detail: str = "") -> None:
        message = f"Response from {uri} has no usable '{field}' field"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.uri = uri
        self.field = field


class PolicyViolationError(TicketGateError):
    """The referenced ticket is in a rejected status."""

    def __init__(self, message: str, ticket: "Ticket") -> None:
        super().__init__(message)
        self.ticket = ticket


class TicketStateError(TicketGateError):
    """A ticket's status was read before being fetched, or fetched twice."""
