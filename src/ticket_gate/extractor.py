"""Pattern-based extraction of a ticket reference from a commit message."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from ticket_gate.config import GateConfig
from ticket_gate.models import Token

LOCAL_ISSUE_PATTERN = r"#(?P<local_id>\d+)"
FOREIGN_ISSUE_PATTERN = r"(?P<owner>\w+(?:-\w+)*)/(?P<repo>\w+(?:-\w+)?)#(?P<foreign_id>\d+)"
MERGE_PATTERN = r"Merge\b"


def jira_issue_pattern(project_keys: Iterable[str]) -> str:
    keys = "|".join(re.escape(key) for key in project_keys)
    return rf"(?P<jira_id>(?:{keys})-\d+)"


def build_reference_pattern(project_keys: Iterable[str]) -> re.Pattern[str]:
    """Combine all reference forms into one pattern, in priority order."""
    alternatives = [
        LOCAL_ISSUE_PATTERN,
        jira_issue_pattern(project_keys),
        FOREIGN_ISSUE_PATTERN,
        MERGE_PATTERN,
    ]
    return re.compile("|".join(f"(?:{alt})" for alt in alternatives), re.IGNORECASE)


class ReferenceExtractor:
    def __init__(self, config: Optional[GateConfig] = None) -> None:
        self._config = config or GateConfig()
        self._pattern = build_reference_pattern(self._config.jira_project_keys)

    def extract(self, message: str) -> Optional[Token]:
        """Return the reference at the start of ``message``, or ``None``."""
        match = self._pattern.match(message or "")
        if match is None:
            return None
        return Token(match.group(0))
