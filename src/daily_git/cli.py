"""Command-line interface for daily-git."""

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from daily_git.config import Config, ConfigurationError, Credentials, load_credentials
from daily_git.dates import compute_window_start
from daily_git.github_client import GitHubClient
from daily_git.pipeline import DailyReportBuilder
from daily_git.renderer import ReportRenderer

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="daily-git",
    help="Summarize your own GitHub commits since the last working day",
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def _print_report(
    days: int, credentials: Credentials, renderer: ReportRenderer
) -> None:
    since = compute_window_start(days)

    async with GitHubClient(token=credentials.token) as client:
        builder = DailyReportBuilder(client, credentials.username)
        reports = await builder.collect(since)
        renderer.daily(reports, since=since)

        try:
            limit = await client.get_rate_limit()
        except Exception as e:
            logger.warning(f"Could not read the API rate limit: {e}")
            return
        renderer.rate_limit(limit)


@app.command()
def main(
    days: int = typer.Argument(
        1, min=0, help="How many days back to report (weekends are skipped)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show progress information"
    ),
) -> None:
    """Print the commits you made since DAYS working days ago."""
    _configure_logging(verbose)
    renderer = ReportRenderer(console)

    try:
        credentials = load_credentials(Config())
    except ConfigurationError as e:
        renderer.error(str(e))
        raise typer.Exit(1) from e

    try:
        asyncio.run(_print_report(days, credentials, renderer))
    except KeyboardInterrupt:
        renderer.error("Interrupted")
        raise typer.Exit(130) from None


if __name__ == "__main__":
    app()
