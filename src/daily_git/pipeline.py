"""Concurrent aggregation of a user's recent commits per repository and branch."""

import asyncio
import logging
from datetime import datetime

from daily_git.config import Credentials
from daily_git.dates import compute_window_start
from daily_git.github_client import GitHubClient
from daily_git.models import Branch, Commit, RepositoryDescriptor, RepositoryReport
from daily_git.repositories import RepositorySource

logger = logging.getLogger(__name__)


class DailyReportBuilder:
    """Build the repository -> branches -> commits tree for one report run.

    Every repository is processed concurrently, and within a repository every
    branch is. A failure while listing a repository's branches or fetching a
    branch's commits only empties that repository or branch.
    """

    def __init__(self, github_client: GitHubClient, username: str) -> None:
        """Initialize the report builder.

        Args:
            github_client: GitHub API client shared by all requests of the run
            username: GitHub login whose commits are reported
        """
        self.github_client = github_client
        self.username = username
        self.repository_source = RepositorySource(github_client, username)

    async def build(
        self, days_ago: int, now: datetime | None = None
    ) -> list[RepositoryReport]:
        """Collect the commits made since the window start.

        Args:
            days_ago: How many days back the window starts (weekend adjusted)
            now: Reference time for the window; defaults to the current time

        Returns:
            One entry per discovered repository, in discovery order, including
            repositories without branches and branches without commits
        """
        return await self.collect(compute_window_start(days_ago, now))

    async def collect(self, since: datetime) -> list[RepositoryReport]:
        """Collect the commits made since an already computed window start."""
        logger.info(f"Collecting commits by {self.username} since {since.isoformat()}")

        repositories = await self.repository_source.list_all_repositories()

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self._collect_repository(repo, since))
                for repo in repositories
            ]

        return [task.result() for task in tasks]

    async def list_branches(self, repo: RepositoryDescriptor) -> list[Branch]:
        """List the branches of a repository; errors propagate to the caller."""
        return await repo.handle.branches()

    async def fetch_commits(
        self, repo: RepositoryDescriptor, branch: Branch, since: datetime
    ) -> list[Commit]:
        """Fetch the user's commits on ``branch`` since ``since``, or [] on failure."""
        try:
            return await repo.handle.commits(self.username, branch.name, since)
        except Exception as e:
            logger.warning(
                f"Error occurred while loading commits for {repo.full_name} "
                f"({branch.name}): {e}"
            )
            return []

    async def _list_branches_or_empty(self, repo: RepositoryDescriptor) -> list[Branch]:
        try:
            return await self.list_branches(repo)
        except Exception as e:
            logger.warning(
                f"Error occurred while loading branches for {repo.full_name}: {e}"
            )
            return []

    async def _collect_repository(
        self, repo: RepositoryDescriptor, since: datetime
    ) -> RepositoryReport:
        branches = await self._list_branches_or_empty(repo)

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(self.fetch_commits(repo, branch, since))
                for branch in branches
            ]

        # Branch i receives the result of fetch i, whatever the completion order.
        annotated = tuple(
            branch.with_commits(task.result())
            for branch, task in zip(branches, tasks, strict=True)
        )
        logger.debug(
            f"{repo.full_name}: {len(annotated)} branches, "
            f"{sum(len(b.commits) for b in annotated)} commits"
        )
        return RepositoryReport(repo_data=repo, branches=annotated)


async def build_report(
    days_ago: int,
    credentials: Credentials,
    *,
    client: GitHubClient | None = None,
    now: datetime | None = None,
) -> list[RepositoryReport]:
    """Build the daily report for ``credentials.username``.

    A client is opened and closed here unless one is passed in.
    """
    if client is not None:
        return await DailyReportBuilder(client, credentials.username).build(days_ago, now)

    async with GitHubClient(token=credentials.token) as own_client:
        return await DailyReportBuilder(own_client, credentials.username).build(
            days_ago, now
        )
