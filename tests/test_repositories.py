"""Tests for repository discovery."""

import logging

import httpx
import pytest

from daily_git.repositories import RepositorySource
from tests.fixtures.github_responses import (
    FakeGitHubClient,
    http_error,
    org_payload,
    repo_payload,
)


def full_names(repos):
    return [repo.full_name for repo in repos]


class TestRepositorySource:
    """Test listing organization and personal repositories."""

    @pytest.mark.asyncio
    async def test_organization_repositories_come_first(self):
        """Test ordering: organizations in order, then personal repositories."""
        client = FakeGitHubClient(
            {
                "/user/orgs": [org_payload("acme"), org_payload("beta")],
                "/orgs/acme/repos": [repo_payload("acme/api"), repo_payload("acme/web")],
                "/orgs/beta/repos": [repo_payload("beta/tool")],
                "/user/repos": [repo_payload("me/dotfiles"), repo_payload("me/blog")],
            },
            # beta answers before acme; order must still follow /user/orgs
            delays={"/orgs/acme/repos": 0.02},
        )

        repos = await RepositorySource(client, "me").list_all_repositories()

        assert full_names(repos) == [
            "acme/api",
            "acme/web",
            "beta/tool",
            "me/dotfiles",
            "me/blog",
        ]
        assert repos[0].owner == "acme"
        assert repos[0].name == "api"
        assert repos[0].handle.client is client

    @pytest.mark.asyncio
    async def test_repositories_reachable_twice_are_kept(self):
        """Test that a repository listed by an organization and directly appears twice."""
        client = FakeGitHubClient(
            {
                "/user/orgs": [org_payload("acme")],
                "/orgs/acme/repos": [repo_payload("acme/api")],
                "/user/repos": [repo_payload("acme/api")],
            }
        )

        repos = await RepositorySource(client, "me").list_all_repositories()

        assert full_names(repos) == ["acme/api", "acme/api"]

    @pytest.mark.asyncio
    async def test_listing_is_idempotent(self):
        client = FakeGitHubClient(
            {
                "/user/orgs": [org_payload("acme")],
                "/orgs/acme/repos": [repo_payload("acme/api")],
                "/user/repos": [repo_payload("me/dotfiles")],
            }
        )
        source = RepositorySource(client, "me")

        first = await source.list_all_repositories()
        second = await source.list_all_repositories()

        assert full_names(first) == full_names(second)

    @pytest.mark.asyncio
    async def test_organization_failure_keeps_personal_repositories(self, caplog):
        """Test that a failing organization listing degrades to no org repositories."""
        client = FakeGitHubClient(
            {
                "/user/orgs": httpx.ConnectError("connection refused"),
                "/user/repos": [repo_payload("me/dotfiles")],
            }
        )

        with caplog.at_level(logging.WARNING):
            repos = await RepositorySource(client, "me").list_all_repositories()

        assert full_names(repos) == ["me/dotfiles"]
        assert "organization repos" in caplog.text
        assert "connection refused" in caplog.text

    @pytest.mark.asyncio
    async def test_one_organization_failing_empties_organization_side(self):
        client = FakeGitHubClient(
            {
                "/user/orgs": [org_payload("acme"), org_payload("locked")],
                "/orgs/acme/repos": [repo_payload("acme/api")],
                "/orgs/locked/repos": http_error(403, "/orgs/locked/repos"),
                "/user/repos": [repo_payload("me/dotfiles")],
            }
        )

        repos = await RepositorySource(client, "me").list_all_repositories()

        assert full_names(repos) == ["me/dotfiles"]

    @pytest.mark.asyncio
    async def test_personal_failure_keeps_organization_repositories(self, caplog):
        client = FakeGitHubClient(
            {
                "/user/orgs": [org_payload("acme")],
                "/orgs/acme/repos": [repo_payload("acme/api")],
                "/user/repos": http_error(401, "/user/repos"),
            }
        )

        with caplog.at_level(logging.WARNING):
            repos = await RepositorySource(client, "me").list_all_repositories()

        assert full_names(repos) == ["acme/api"]
        assert "Error occurred while loading repos" in caplog.text

    @pytest.mark.asyncio
    async def test_both_sources_failing_yields_nothing(self):
        client = FakeGitHubClient({})

        assert await RepositorySource(client, "me").list_all_repositories() == []

    @pytest.mark.asyncio
    async def test_counts_are_logged(self, caplog):
        """Test the informational discovery messages."""
        client = FakeGitHubClient(
            {
                "/user/orgs": [],
                "/user/repos": [repo_payload("me/a"), repo_payload("me/b")],
            }
        )

        with caplog.at_level(logging.INFO, logger="daily_git.repositories"):
            await RepositorySource(client, "octocat").list_all_repositories()

        assert "octocat has no organization repositories." in caplog.text
        assert "2 repositories found." in caplog.text
