"""Defaults and user-facing text shared across the gate."""

from __future__ import annotations

DEFAULT_GITHUB_API_BASE = "https://api.github.com"
DEFAULT_JIRA_BASE_URL = "https://dbeaver.atlassian.net"
DEFAULT_JIRA_PROJECT_KEYS = ("CB",)
DEFAULT_REJECTED_STATUSES = frozenset({"closed", "done"})
DEFAULT_TIMEOUT_SECONDS = 20.0

COMMIT_MESSAGE_HELP_TEMPLATE = """\
Each commit message must begin with GitHub or Jira ticket reference. Like:
*  #<issue_number>
*  org/repo#<issue_number>
{jira_formats}

For how to rename your commit message, follow this GitHub Doc:
https://docs.github.com/en/pull-requests/committing-changes-to-your-project/creating-and-editing-commits/changing-a-commit-message
"""
