"""Pull request gate: fail when the last commit references a closed ticket.

Runs in three modes:
- GitHub Actions (default): reads the workflow event payload, lists the pull
  request commits and checks the message of the last one.
- ``--message TEXT``: checks the given message.
- ``--message-file PATH``: checks the message stored in a file, which makes the
  gate usable as a git ``commit-msg`` hook.

Exit code 0 means the check passed, 1 that it failed and 2 that the gate could
not run because of missing configuration.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, TextIO

import requests
from botocore.client import BaseClient

from ticket_gate.config import GateConfig
from ticket_gate.constants import COMMIT_MESSAGE_HELP_TEMPLATE
from ticket_gate.credentials import GateCredentials, load_credentials
from ticket_gate.errors import ConfigurationError
from ticket_gate.github_client import GitHubClient
from ticket_gate.logging import ContextAdapter, get_logger
from ticket_gate.models import Verdict
from ticket_gate.pipeline import TicketGatePipeline

logger = get_logger("ticket_gate")

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 2


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def commit_message_help(config: GateConfig) -> str:
    jira_formats = "\n".join(f"*  {key}-Number (Jira)" for key in config.jira_project_keys)
    return COMMIT_MESSAGE_HELP_TEMPLATE.format(jira_formats=jira_formats)


def exit_code_for(verdict: Verdict) -> int:
    return EXIT_PASSED if verdict.passed else EXIT_FAILED


def pull_request_from_event(event: Mapping[str, Any]) -> PullRequestRef:
    """Extract owner, repository and number from a ``pull_request`` event."""
    repository = event.get("repository") or {}
    owner = (event.get("organization") or {}).get("login") or (repository.get("owner") or {}).get("login")
    repo = repository.get("name")
    number = event.get("number") or (event.get("pull_request") or {}).get("number")

    if not owner or not repo or not number:
        raise ConfigurationError("Workflow event is not a pull request event")
    return PullRequestRef(owner=str(owner), repo=str(repo), number=int(number))


def load_event(path: str) -> dict[str, Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read workflow event from {path}") from exc


def fetch_last_commit_message(
    pull_request: PullRequestRef,
    credentials: GateCredentials,
    config: GateConfig,
    session: Optional[requests.Session] = None,
) -> str:
    token = credentials.repo_token or credentials.github_token
    gh = GitHubClient(token_provider=lambda: token, api_base=config.github_api_base, session=session)
    return gh.get_last_commit_message(pull_request.owner, pull_request.repo, pull_request.number)


def report(
    verdict: Verdict,
    config: GateConfig,
    stream: Optional[TextIO] = None,
    log: Optional[ContextAdapter] = None,
) -> None:
    """Print the verdict; failures get the accepted formats and an error annotation."""
    out = stream or sys.stderr
    log = log or logger
    if verdict.passed:
        log.info("ticket_gate_passed", extra={"extra": {"reason": verdict.reason, "skipped": verdict.skipped}})
        return

    log.error(
        "ticket_gate_failed",
        extra={
            "extra": {
                "reason": verdict.reason,
                "error_type": type(verdict.error).__name__ if verdict.error else None,
            }
        },
    )
    print(commit_message_help(config), file=out)
    print(f"::error::{verdict.reason}", file=out)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ticket-gate",
        description="Fail when a commit message references a closed GitHub or Jira ticket.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--message", help="Commit message to check instead of the pull request's last commit")
    source.add_argument("--message-file", help="File holding the commit message to check")
    parser.add_argument("--repo", help="Current repository as OWNER/NAME (defaults to GITHUB_REPOSITORY)")
    return parser.parse_args(argv)


def _current_repo(args: argparse.Namespace, env: Mapping[str, str], event: Optional[Mapping[str, Any]]) -> str:
    repo = args.repo or env.get("GITHUB_REPOSITORY")
    if not repo and event:
        repo = (event.get("repository") or {}).get("full_name")
    if not repo or "/" not in repo:
        raise ConfigurationError("Current repository is unknown; set GITHUB_REPOSITORY or pass --repo OWNER/NAME")
    return repo


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    session: Optional[requests.Session] = None,
    secrets_client: Optional[BaseClient] = None,
    stream: Optional[TextIO] = None,
) -> int:
    args = _parse_args(argv)
    env = os.environ if environ is None else environ
    out = stream or sys.stderr

    try:
        config = GateConfig.from_env(env)
    except ConfigurationError as exc:
        logger.error("ticket_gate_misconfigured", extra={"extra": {"error": str(exc)}})
        print(f"::error::{exc}", file=out)
        return EXIT_CONFIG_ERROR

    try:
        credentials = load_credentials(env, secrets_client=secrets_client)
        event: Optional[dict[str, Any]] = None
        pull_request: Optional[PullRequestRef] = None
        if args.message is None and args.message_file is None:
            event_path = env.get("GITHUB_EVENT_PATH")
            if not event_path:
                raise ConfigurationError("GITHUB_EVENT_PATH is not set; pass --message or --message-file")
            event = load_event(event_path)
            pull_request = pull_request_from_event(event)
        current_repo = _current_repo(args, env, event)
    except ConfigurationError as exc:
        logger.error("ticket_gate_misconfigured", extra={"extra": {"error": str(exc)}})
        print(f"::error::{exc}", file=out)
        return EXIT_CONFIG_ERROR

    run_logger = logger.bind(repo=current_repo, pr_number=pull_request.number if pull_request else None)

    if args.message is not None:
        message = args.message
    elif args.message_file is not None:
        try:
            message = Path(args.message_file).read_text(encoding="utf-8")
        except OSError as exc:
            print(f"::error::Cannot read commit message file: {exc}", file=out)
            return EXIT_CONFIG_ERROR
    else:
        try:
            message = fetch_last_commit_message(pull_request, credentials, config, session=session)
        except requests.RequestException as exc:
            run_logger.error("pull_request_commits_unavailable", extra={"extra": {"error": str(exc)}})
            verdict = Verdict.reject(f"Cannot list commits of {pull_request.full_name}#{pull_request.number}: {exc}")
            report(verdict, config, out, log=run_logger)
            return exit_code_for(verdict)

    run_logger.info("commit_message_checked", extra={"extra": {"commit_message": message}})

    pipeline = TicketGatePipeline(config, credentials, current_repo, session=session)
    verdict = pipeline.run(message)

    report(verdict, config, out, log=run_logger)
    return exit_code_for(verdict)


if __name__ == "__main__":
    raise SystemExit(main())
