"""Discovery of the organization and personal repositories of a user."""

import asyncio
import logging

from daily_git.github_client import GitHubClient, RepositoryHandle
from daily_git.models import RepositoryDescriptor

logger = logging.getLogger(__name__)


class RepositorySource:
    """List every repository the authenticated user can report on.

    Organization repositories come first, in organization order, followed by
    the user's personal repositories. Either listing may fail on its own; it
    then contributes no repositories and the other one is still used.
    Repositories reachable through both listings appear twice.
    """

    def __init__(self, github_client: GitHubClient, username: str) -> None:
        """Initialize the repository source.

        Args:
            github_client: GitHub API client for making requests
            username: Login of the authenticated user, used in log messages
        """
        self.github_client = github_client
        self.username = username

    async def list_all_repositories(self) -> list[RepositoryDescriptor]:
        """Return organization repositories followed by personal repositories."""
        organization_repos, personal_repos = await asyncio.gather(
            self.list_organization_repositories(),
            self.list_personal_repositories(),
        )
        return organization_repos + personal_repos

    async def list_organization_repositories(self) -> list[RepositoryDescriptor]:
        """Return the repositories of every organization of the user, or [] on failure."""
        try:
            organizations = await self.github_client.get_user_organizations()
            per_organization: list[list[RepositoryHandle]] = await asyncio.gather(
                *(
                    self.github_client.get_organization_repositories(organization)
                    for organization in organizations
                )
            )
            repos = [
                RepositoryDescriptor.from_handle(handle)
                for handles in per_organization
                for handle in handles
            ]
        except Exception as e:
            logger.warning(f"Error occurred while loading organization repos: {e}")
            repos = []

        if not repos:
            logger.info(f"{self.username} has no organization repositories.")
        else:
            logger.info(f"{len(repos)} organization repositories found.")
        return repos

    async def list_personal_repositories(self) -> list[RepositoryDescriptor]:
        """Return the authenticated user's own repositories, or [] on failure."""
        try:
            handles = await self.github_client.get_user_repositories()
            repos = [RepositoryDescriptor.from_handle(handle) for handle in handles]
        except Exception as e:
            logger.warning(f"Error occurred while loading repos: {e}")
            repos = []

        if not repos:
            logger.info(f"{self.username} has no repositories.")
        else:
            logger.info(f"{len(repos)} repositories found.")
        return repos
