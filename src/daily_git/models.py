"""Typed records for repositories, branches and commits."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from daily_git.github_client import RepositoryHandle


class RepositoryPayload(BaseModel):
    """Repository entry as returned by the repository listing endpoints."""

    full_name: str

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Require an ``owner/name`` identifier."""
        owner, _, name = v.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository full_name: {v}")
        return v


class _CommitPerson(BaseModel):
    date: datetime


class _CommitDetail(BaseModel):
    message: str
    author: _CommitPerson


class CommitPayload(BaseModel):
    """Commit entry as returned by /repos/{owner}/{name}/commits."""

    sha: str
    commit: _CommitDetail
    html_url: str | None = None


class Commit(BaseModel):
    """A commit authored by the configured user."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str
    author_date: datetime
    html_url: str | None = None

    @classmethod
    def from_api(cls, data: object) -> Commit:
        """Build a commit from the REST payload.

        Raises:
            pydantic.ValidationError: If the payload lacks sha, message or author date
        """
        payload = CommitPayload.model_validate(data)
        return cls(
            sha=payload.sha,
            message=payload.commit.message,
            author_date=payload.commit.author.date,
            html_url=payload.html_url,
        )


class Branch(BaseModel):
    """A repository branch, carrying its commits once the report is assembled."""

    model_config = ConfigDict(frozen=True)

    name: str
    commits: tuple[Commit, ...] = ()

    def with_commits(self, commits: Iterable[Commit]) -> Branch:
        """Return a copy of this branch holding ``commits``."""
        return self.model_copy(update={"commits": tuple(commits)})


class RateLimit(BaseModel):
    """Remaining and maximum API calls for the current window."""

    model_config = ConfigDict(frozen=True)

    left: int
    max: int


@dataclass(frozen=True)
class RepositoryDescriptor:
    """Owner and name of a discovered repository plus the handle to query it."""

    owner: str
    name: str
    handle: RepositoryHandle

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_handle(cls, handle: RepositoryHandle) -> RepositoryDescriptor:
        return cls(owner=handle.owner, name=handle.name, handle=handle)


@dataclass(frozen=True)
class RepositoryReport:
    """One entry of the aggregated report: a repository and its branches."""

    repo_data: RepositoryDescriptor
    branches: tuple[Branch, ...] = ()

    @property
    def commit_count(self) -> int:
        return sum(len(branch.commits) for branch in self.branches)
