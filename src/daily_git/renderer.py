"""Console rendering of the daily report."""

from datetime import datetime

from rich.console import Console
from rich.markup import escape

from daily_git.models import Commit, RateLimit, RepositoryDescriptor, RepositoryReport

INFO_SYMBOL = "[blue]ℹ[/blue]"
ERROR_SYMBOL = "[red]✖[/red]"

HEADER_SPACER = " // "
DATE_SPACER = " | "
DATE_FORMAT = "%m/%d/%Y %H:%M"


class ReportRenderer:
    """Print report entries, info and error lines to a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def info(self, message: str, leading_newline: bool = False) -> None:
        prefix = "\n" if leading_newline else ""
        self.console.print(f"{prefix}{INFO_SYMBOL} {message}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"{ERROR_SYMBOL} {escape(message)}", highlight=False)

    def repository_header(self, repo: RepositoryDescriptor, branch_name: str) -> None:
        """Print ``owner // name // branch`` followed by an ``=`` underline."""
        headline = (
            f"[cyan]{escape(repo.owner)}[/cyan]"
            f"[grey50]{HEADER_SPACER}[/grey50]"
            f"[cyan]{escape(repo.name)}[/cyan]"
            f"[grey50]{HEADER_SPACER}{escape(branch_name)}[/grey50]"
        )
        plain = HEADER_SPACER.join([repo.owner, repo.name, branch_name])

        self.console.print()
        self.console.print(headline, highlight=False)
        self.console.print(f"[grey50]{'=' * len(plain)}[/grey50]", highlight=False)

    def commit(self, commit: Commit) -> None:
        """Print one commit, aligning continuation lines with the message column."""
        date = format_commit_date(commit.author_date)
        indent = " " * len(date + DATE_SPACER)
        message = commit.message.rstrip("\n").replace("\n", "\n" + indent)

        self.console.print(
            f"[grey50]{date}{DATE_SPACER}[/grey50][cyan]{escape(message)}[/cyan]",
            highlight=False,
        )

    def daily(self, reports: list[RepositoryReport], since: datetime | None = None) -> int:
        """Print every branch holding commits; returns the number of commits printed."""
        printed = 0
        for report in reports:
            for branch in report.branches:
                if not branch.commits:
                    continue
                self.repository_header(report.repo_data, branch.name)
                for commit in branch.commits:
                    self.commit(commit)
                printed += len(branch.commits)

        if not printed:
            window = f" since {since.strftime('%m/%d/%Y')}" if since else ""
            self.info(f"No commits found{window}.", leading_newline=True)
        return printed

    def rate_limit(self, limit: RateLimit) -> None:
        self.info(
            f"{limit.left} requests left. [grey50] (max: {limit.max})[/grey50]",
            leading_newline=True,
        )


def format_commit_date(value: datetime) -> str:
    """Format a commit timestamp in local time."""
    return value.astimezone().strftime(DATE_FORMAT)
