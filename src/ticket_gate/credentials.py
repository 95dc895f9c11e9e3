"""Access tokens for GitHub and Jira.

Tokens come from the GitHub Action inputs (``INPUT_GITHUBACCESSTOKEN``,
``INPUT_JIRAACCESSTOKEN``, ``INPUT_CURREPOTOKEN``). When
``TICKET_GATE_CREDENTIALS_SECRET_ARN`` is set they are read from a JSON secret in
AWS Secrets Manager instead, with fields ``github_token``, ``jira_token`` and an
optional ``repo_token``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from ticket_gate.errors import ConfigurationError

SECRET_ARN_ENV = "TICKET_GATE_CREDENTIALS_SECRET_ARN"


@dataclass(frozen=True)
class GateCredentials:
    github_token: str = field(repr=False)
    jira_token: str = field(repr=False)
    repo_token: str = field(default="", repr=False)


def _action_input(env: Mapping[str, str], name: str) -> str:
    # The runner exposes `with:` inputs as INPUT_<NAME> with the name upper-cased.
    return (env.get(f"INPUT_{name.upper()}") or "").strip()


def _load_from_secret(secret_arn: str, secrets_client: Optional[BaseClient]) -> GateCredentials:
    try:
        client = secrets_client or boto3.client("secretsmanager")
        response = client.get_secret_value(SecretId=secret_arn)
    except (BotoCoreError, ClientError) as exc:
        raise ConfigurationError(f"Cannot read ticket gate credentials secret: {exc}") from exc

    secret = response.get("SecretString")
    if not secret:
        raise ConfigurationError("Ticket gate credentials secret missing SecretString")

    try:
        data = json.loads(secret)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Ticket gate credentials secret is not valid JSON") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Ticket gate credentials secret must be a JSON object")

    for key in ("github_token", "jira_token"):
        if key not in data or not str(data[key]).strip():
            raise ConfigurationError(f"Ticket gate credentials missing field: {key}")

    return GateCredentials(
        github_token=str(data["github_token"]).strip(),
        jira_token=str(data["jira_token"]).strip(),
        repo_token=str(data.get("repo_token") or "").strip(),
    )


def load_credentials(
    environ: Optional[Mapping[str, str]] = None,
    secrets_client: Optional[BaseClient] = None,
) -> GateCredentials:
    env = os.environ if environ is None else environ

    secret_arn = (env.get(SECRET_ARN_ENV) or "").strip()
    if secret_arn:
        return _load_from_secret(secret_arn, secrets_client)

    github_token = _action_input(env, "githubAccessToken")
    jira_token = _action_input(env, "jiraAccessToken")
    repo_token = _action_input(env, "curRepoToken")

    missing = [
        name
        for name, value in (("githubAccessToken", github_token), ("jiraAccessToken", jira_token))
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required inputs: {', '.join(missing)}")

    return GateCredentials(github_token=github_token, jira_token=jira_token, repo_token=repo_token)
