"""Domain types shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ticket_gate.errors import TicketGateError, TicketStateError


@dataclass(frozen=True)
class LocalRepo:
    """Issue in the repository the pull request belongs to."""


@dataclass(frozen=True)
class ForeignRepo:
    """Issue in another GitHub repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Jira:
    """Issue in the configured Jira instance."""


Board = Union[LocalRepo, ForeignRepo, Jira]


def board_label(board: Board, current_repo: Optional[str] = None) -> str:
    if isinstance(board, LocalRepo):
        return current_repo or "local"
    if isinstance(board, ForeignRepo):
        return board.full_name
    if isinstance(board, Jira):
        return "jira"
    raise TypeError(f"Unsupported board: {board!r}")


@dataclass(frozen=True)
class Token:
    """Raw ticket reference captured from a commit message."""

    text: str

    @property
    def is_merge(self) -> bool:
        return self.text.lower() == "merge"


class Ticket:
    """Resolved ticket reference.

    ``board``, ``id`` and ``uri`` are fixed at construction. ``status`` is
    ``None`` until :meth:`record_status` is called, which may happen once.
    """

    __slots__ = ("_board", "_id", "_uri", "_status")

    def __init__(self, board: Board, id: str, uri: str) -> None:
        self._board = board
        self._id = id
        self._uri = uri
        self._status: Optional[str] = None

    @property
    def board(self) -> Board:
        return self._board

    @property
    def id(self) -> str:
        return self._id

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def status(self) -> Optional[str]:
        return self._status

    def record_status(self, status: str) -> None:
        if self._status is not None:
            raise TicketStateError(f"Status of ticket {self._id} was already recorded as {self._status!r}")
        self._status = status

    def __repr__(self) -> str:
        return f"Ticket(board={self._board!r}, id={self._id!r}, uri={self._uri!r}, status={self._status!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ticket):
            return NotImplemented
        return (self._board, self._id, self._uri, self._status) == (
            other._board,
            other._id,
            other._uri,
            other._status,
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class Verdict:
    passed: bool
    reason: str
    ticket: Optional[Ticket] = field(default=None, compare=False)
    error: Optional[TicketGateError] = field(default=None, compare=False)
    skipped: bool = False

    @classmethod
    def allow(cls, reason: str, ticket: Optional[Ticket] = None, *, skipped: bool = False) -> "Verdict":
        return cls(passed=True, reason=reason, ticket=ticket, skipped=skipped)

    @classmethod
    def reject(
        cls,
        reason: str,
        ticket: Optional[Ticket] = None,
        error: Optional[TicketGateError] = None,
    ) -> "Verdict":
        return cls(passed=False, reason=reason, ticket=ticket, error=error)
