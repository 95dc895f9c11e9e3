"""Pass/fail decision over a fetched ticket status."""

from __future__ import annotations

from typing import Optional

from ticket_gate.config import GateConfig
from ticket_gate.errors import PolicyViolationError, TicketStateError
from ticket_gate.models import Ticket, Verdict, board_label


class PolicyGate:
    def __init__(self, config: Optional[GateConfig] = None, current_repo: Optional[str] = None) -> None:
        self._config = config or GateConfig()
        self._current_repo = current_repo
        if self._config.case_insensitive_statuses:
            self._rejected = frozenset(status.casefold() for status in self._config.rejected_statuses)
        else:
            self._rejected = self._config.rejected_statuses

    def is_rejected(self, status: str) -> bool:
        # Case-sensitive unless configured otherwise: "Done" is not "done".
        if self._config.case_insensitive_statuses:
            return status.casefold() in self._rejected
        return status in self._rejected

    def evaluate(self, ticket: Ticket) -> Verdict:
        if ticket.status is None:
            raise TicketStateError(f"Ticket {ticket.id} has no fetched status")

        label = board_label(ticket.board, self._current_repo)
        if self.is_rejected(ticket.status):
            reason = f"Ticket {label} {ticket.id} has status: {ticket.status}."
            return Verdict.reject(reason, ticket=ticket, error=PolicyViolationError(reason, ticket))

        return Verdict.allow(f"Ticket {label} {ticket.id} has status: {ticket.status}. All fine", ticket=ticket)
