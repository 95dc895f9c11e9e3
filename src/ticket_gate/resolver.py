"""Classify an extracted token into a board and build its lookup URI."""

from __future__ import annotations

import re
from typing import Optional

from ticket_gate.config import GateConfig
from ticket_gate.errors import UnresolvedReferenceError
from ticket_gate.extractor import FOREIGN_ISSUE_PATTERN, LOCAL_ISSUE_PATTERN, jira_issue_pattern
from ticket_gate.models import Board, ForeignRepo, Jira, LocalRepo, Ticket, Token


class TicketResolver:
    def __init__(self, config: Optional[GateConfig] = None) -> None:
        self._config = config or GateConfig()
        self._local = re.compile(LOCAL_ISSUE_PATTERN, re.IGNORECASE)
        self._jira = re.compile(jira_issue_pattern(self._config.jira_project_keys), re.IGNORECASE)
        self._foreign = re.compile(FOREIGN_ISSUE_PATTERN, re.IGNORECASE)

    def resolve(self, token: Token, current_repo: str) -> Ticket:
        text = token.text

        match = self._local.fullmatch(text)
        if match:
            board: Board = LocalRepo()
            ticket_id = match.group("local_id")
            return Ticket(board, ticket_id, self.issue_uri(board, ticket_id, current_repo))

        match = self._jira.fullmatch(text)
        if match:
            board = Jira()
            ticket_id = match.group("jira_id")
            return Ticket(board, ticket_id, self.issue_uri(board, ticket_id, current_repo))

        match = self._foreign.fullmatch(text)
        if match:
            board = ForeignRepo(owner=match.group("owner"), name=match.group("repo"))
            ticket_id = match.group("foreign_id")
            return Ticket(board, ticket_id, self.issue_uri(board, ticket_id, current_repo))

        raise UnresolvedReferenceError(text)

    def issue_uri(self, board: Board, ticket_id: str, current_repo: str) -> str:
        if isinstance(board, LocalRepo):
            return f"{self._config.github_api_base}/repos/{current_repo}/issues/{ticket_id}"
        if isinstance(board, ForeignRepo):
            return f"{self._config.github_api_base}/repos/{board.full_name}/issues/{ticket_id}"
        if isinstance(board, Jira):
            return f"{self._config.jira_issue_api}/{ticket_id}"
        raise TypeError(f"Unsupported board: {board!r}")
