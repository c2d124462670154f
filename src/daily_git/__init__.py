"""daily-git - summarize your own GitHub commits since the last working day.

Library API:

    from daily_git import Credentials, build_report

    reports = await build_report(1, Credentials(token="ghp_...", username="me"))
    for report in reports:
        for branch in report.branches:
            print(report.repo_data.full_name, branch.name, len(branch.commits))
"""

__version__ = "0.1.0"

from daily_git.config import Config, ConfigurationError, Credentials, load_credentials
from daily_git.dates import compute_window_start
from daily_git.github_client import GitHubClient, RateLimitError, RepositoryHandle
from daily_git.models import (
    Branch,
    Commit,
    RateLimit,
    RepositoryDescriptor,
    RepositoryReport,
)
from daily_git.pipeline import DailyReportBuilder, build_report
from daily_git.repositories import RepositorySource

__all__ = [
    # Core API
    "build_report",
    "DailyReportBuilder",
    "RepositorySource",
    "GitHubClient",
    "RepositoryHandle",
    "compute_window_start",
    # Records
    "Branch",
    "Commit",
    "RateLimit",
    "RepositoryDescriptor",
    "RepositoryReport",
    # Configuration
    "Config",
    "Credentials",
    "load_credentials",
    # Exceptions
    "ConfigurationError",
    "RateLimitError",
    # Metadata
    "__version__",
]
