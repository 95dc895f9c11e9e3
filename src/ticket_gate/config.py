"""Immutable settings for the pipeline stages, read from the environment."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ticket_gate.constants import (
    DEFAULT_GITHUB_API_BASE,
    DEFAULT_JIRA_BASE_URL,
    DEFAULT_JIRA_PROJECT_KEYS,
    DEFAULT_REJECTED_STATUSES,
    DEFAULT_TIMEOUT_SECONDS,
)
from ticket_gate.errors import ConfigurationError


def _as_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "t", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "f", "no", "n", "off", ""}:
            return False
    return default


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class GateConfig:
    github_api_base: str = DEFAULT_GITHUB_API_BASE
    jira_base_url: str = DEFAULT_JIRA_BASE_URL
    jira_project_keys: tuple[str, ...] = DEFAULT_JIRA_PROJECT_KEYS
    rejected_statuses: frozenset[str] = DEFAULT_REJECTED_STATUSES
    case_insensitive_statuses: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.jira_project_keys:
            raise ConfigurationError("At least one Jira project key is required")
        for key in self.jira_project_keys:
            if not key.isalnum():
                raise ConfigurationError(f"Invalid Jira project key: {key!r}")
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ConfigurationError("Ticket fetch timeout must be a positive finite number")
        object.__setattr__(self, "github_api_base", self.github_api_base.rstrip("/"))
        object.__setattr__(self, "jira_base_url", self.jira_base_url.rstrip("/"))
        object.__setattr__(self, "jira_project_keys", tuple(key.upper() for key in self.jira_project_keys))
        object.__setattr__(self, "rejected_statuses", frozenset(self.rejected_statuses))

    @property
    def jira_issue_api(self) -> str:
        return f"{self.jira_base_url}/rest/api/2/issue"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GateConfig":
        env = os.environ if environ is None else environ
        raw_timeout = env.get("TICKET_FETCH_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid TICKET_FETCH_TIMEOUT_SECONDS: {raw_timeout!r}") from exc

        return cls(
            github_api_base=env.get("GITHUB_API_BASE") or DEFAULT_GITHUB_API_BASE,
            jira_base_url=env.get("JIRA_BASE_URL") or DEFAULT_JIRA_BASE_URL,
            jira_project_keys=_split_csv(env.get("JIRA_PROJECT_KEYS", ",".join(DEFAULT_JIRA_PROJECT_KEYS))),
            rejected_statuses=frozenset(
                _split_csv(env.get("REJECTED_TICKET_STATUSES", ",".join(sorted(DEFAULT_REJECTED_STATUSES))))
            ),
            case_insensitive_statuses=_as_bool(env.get("TICKET_STATUS_CASE_INSENSITIVE"), default=False),
            timeout_seconds=timeout,
        )
