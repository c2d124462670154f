"""Tests for console rendering of the report."""

import io
from datetime import UTC, datetime

import pytest
from rich.console import Console

from daily_git.github_client import GitHubClient
from daily_git.models import Branch, Commit, RateLimit, RepositoryDescriptor, RepositoryReport
from daily_git.renderer import ReportRenderer, format_commit_date
from tests.fixtures.github_responses import commit_payload


@pytest.fixture
def renderer():
    console = Console(file=io.StringIO(), width=200, color_system=None)
    return ReportRenderer(console)


def output(renderer):
    return renderer.console.file.getvalue()


def make_report(full_name, branches):
    handle = GitHubClient(token="test_token").repo(full_name)
    return RepositoryReport(
        repo_data=RepositoryDescriptor.from_handle(handle), branches=tuple(branches)
    )


def make_commit(sha, message, date="2024-01-12T09:30:00Z"):
    return Commit.from_api(commit_payload(sha, message, date))


class TestReportRenderer:
    """Test the printed digest."""

    def test_header_and_underline(self, renderer):
        report = make_report("acme/api", [Branch(name="main")])

        renderer.repository_header(report.repo_data, "main")

        lines = output(renderer).splitlines()
        assert lines[1] == "acme // api // main"
        assert lines[2] == "=" * len("acme // api // main")

    def test_commit_line(self, renderer):
        commit = make_commit("a1", "Add health endpoint")

        renderer.commit(commit)

        expected_date = format_commit_date(commit.author_date)
        assert output(renderer) == f"{expected_date} | Add health endpoint\n"

    def test_multiline_message_is_aligned(self, renderer):
        commit = make_commit("a1", "Subject\n\nBody line")

        renderer.commit(commit)

        lines = output(renderer).splitlines()
        indent = " " * len(format_commit_date(commit.author_date) + " | ")
        assert lines[0].endswith("| Subject")
        assert lines[1].strip() == ""
        assert lines[2] == f"{indent}Body line"

    def test_markup_in_messages_is_printed_verbatim(self, renderer):
        renderer.commit(make_commit("a1", "Handle [bold] in titles"))

        assert "Handle [bold] in titles" in output(renderer)

    def test_daily_skips_empty_branches_and_repositories(self, renderer):
        """Test that only branches holding commits are printed."""
        reports = [
            make_report(
                "acme/api",
                [
                    Branch(name="main").with_commits(
                        [make_commit("a1", "One"), make_commit("a2", "Two")]
                    ),
                    Branch(name="dev"),
                ],
            ),
            make_report("acme/empty", []),
            make_report(
                "me/dotfiles",
                [Branch(name="main").with_commits([make_commit("d1", "Three")])],
            ),
        ]

        printed = renderer.daily(reports)

        text = output(renderer)
        assert printed == 3
        assert "acme // api // main" in text
        assert "dev" not in text
        assert "acme/empty" not in text and "empty" not in text
        assert text.index("acme // api // main") < text.index("me // dotfiles // main")
        assert text.index("One") < text.index("Two") < text.index("Three")

    def test_daily_without_commits(self, renderer):
        printed = renderer.daily(
            [make_report("acme/api", [Branch(name="main")])],
            since=datetime(2024, 1, 12, tzinfo=UTC),
        )

        assert printed == 0
        assert "No commits found since 01/12/2024." in output(renderer)

    def test_rate_limit(self, renderer):
        renderer.rate_limit(RateLimit(left=4990, max=5000))

        assert "4990 requests left." in output(renderer)
        assert "(max: 5000)" in output(renderer)

    def test_error_line(self, renderer):
        renderer.error("Token is missing [see docs]")

        assert output(renderer) == "✖ Token is missing [see docs]\n"


def test_format_commit_date_uses_local_time():
    value = datetime(2024, 1, 12, 9, 30, tzinfo=UTC)

    assert format_commit_date(value) == value.astimezone().strftime("%m/%d/%Y %H:%M")
