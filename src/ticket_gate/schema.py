"""Response shapes of the two trackers, reduced to the fields the gate reads."""

from pydantic import BaseModel, ConfigDict


class GitHubIssue(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    state: str


class JiraStatus(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    name: str


class JiraIssueFields(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    status: JiraStatus


class JiraIssue(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    fields: JiraIssueFields
