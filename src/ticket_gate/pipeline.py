"""Commit message -> token -> ticket -> status -> verdict."""

from __future__ import annotations

from typing import Optional

import requests

from ticket_gate.config import GateConfig
from ticket_gate.credentials import GateCredentials
from ticket_gate.errors import NoReferenceFoundError, TicketGateError
from ticket_gate.extractor import ReferenceExtractor
from ticket_gate.fetcher import StatusFetcher
from ticket_gate.logging import get_logger
from ticket_gate.models import Ticket, Verdict, board_label
from ticket_gate.policy import PolicyGate
from ticket_gate.resolver import TicketResolver

logger = get_logger("ticket_gate.pipeline")


class TicketGatePipeline:
    """Evaluate one commit message against the ticket policy.

    Every stage receives the same immutable :class:`GateConfig`, so the
    extractor and resolver always agree on the accepted reference forms.
    Errors raised by any stage become a rejecting :class:`Verdict`; the run
    never exits the process itself.
    """

    def __init__(
        self,
        config: GateConfig,
        credentials: GateCredentials,
        current_repo: str,
        session: Optional[requests.Session] = None,
        fetcher: Optional[StatusFetcher] = None,
    ) -> None:
        self.config = config
        self._credentials = credentials
        self._current_repo = current_repo
        self.extractor = ReferenceExtractor(config)
        self.resolver = TicketResolver(config)
        self.fetcher = fetcher or StatusFetcher(config, session=session)
        self.policy = PolicyGate(config, current_repo=current_repo)

    def run(self, message: str) -> Verdict:
        if not message or not message.strip():
            return Verdict.reject("Empty commit message.", error=NoReferenceFoundError("Empty commit message."))

        token = self.extractor.extract(message)
        if token is None:
            logger.info("ticket_reference_missing")
            error = NoReferenceFoundError("Commit message validation failed.")
            return Verdict.reject(str(error), error=error)

        if token.is_merge:
            logger.info("merge_commit_skipped")
            return Verdict.allow("Merge commit, ticket check skipped.", skipped=True)

        ticket: Optional[Ticket] = None
        try:
            ticket = self.resolver.resolve(token, self._current_repo)
            logger.info(
                "ticket_resolved",
                extra={
                    "board": board_label(ticket.board, self._current_repo),
                    "ticket_id": ticket.id,
                    "extra": {"uri": ticket.uri},
                },
            )
            self.fetcher.fetch(ticket, self._credentials)
            return self.policy.evaluate(ticket)
        except TicketGateError as exc:
            return Verdict.reject(str(exc), ticket=ticket, error=exc)
