"""GitHub API client for fetching repositories, branches and commits."""

import asyncio
import logging
import random
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from daily_git.models import Branch, Commit, RateLimit, RepositoryPayload

logger = logging.getLogger(__name__)


class RateLimitError(Exception):
    """Raised when GitHub API rate limit is exceeded."""

    def __init__(self, message: str, remaining: int, reset_time: datetime) -> None:
        super().__init__(message)
        self.remaining = remaining
        self.reset_time = reset_time


class OrganizationPayload(BaseModel):
    """Organization entry as returned by /user/orgs."""

    login: str


class _RateCounters(BaseModel):
    limit: int
    remaining: int


class RateLimitPayload(BaseModel):
    """Body of /rate_limit; only the core ``rate`` counters are read."""

    rate: _RateCounters


class RepositoryHandle:
    """Reference to one repository bound to the client that queries it."""

    def __init__(self, client: "GitHubClient", owner: str, name: str) -> None:
        self.client = client
        self.owner = owner
        self.name = name

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    async def branches(self) -> list[Branch]:
        return await self.client.get_branches(self.owner, self.name)

    async def commits(
        self, author: str, branch: str, since: datetime
    ) -> list[Commit]:
        return await self.client.get_commits(
            self.owner, self.name, author=author, branch=branch, since=since
        )

    def __repr__(self) -> str:
        return f"RepositoryHandle({self.full_name!r})"


class GitHubClient:
    """Client for interacting with the GitHub API."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub Personal Access Token
            base_url: GitHub API base URL
            max_retries: Retries for network errors, 5xx and 429 responses
            transport: Optional httpx transport (used by tests)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        # Rate limiting tracking
        self.rate_limit_remaining: int | None = None
        self.rate_limit_limit: int | None = None
        self.rate_limit_reset: datetime | None = None

        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    def _update_rate_limit_info(self, response: httpx.Response) -> None:
        """Update rate limit information from GitHub API response headers."""
        if "x-ratelimit-remaining" in response.headers:
            self.rate_limit_remaining = int(response.headers["x-ratelimit-remaining"])
        if "x-ratelimit-limit" in response.headers:
            self.rate_limit_limit = int(response.headers["x-ratelimit-limit"])
        if "x-ratelimit-reset" in response.headers:
            reset_timestamp = int(response.headers["x-ratelimit-reset"])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp, tz=UTC)

    def _check_rate_limit(self) -> None:
        """Fail fast once the last observed response reported an empty quota."""
        if self.rate_limit_remaining is not None and self.rate_limit_remaining <= 0:
            if self.rate_limit_reset:
                raise RateLimitError(
                    f"GitHub API rate limit exceeded. Rate limit resets at {self.rate_limit_reset}",
                    remaining=self.rate_limit_remaining,
                    reset_time=self.rate_limit_reset,
                )
            raise RateLimitError(
                "GitHub API rate limit exceeded",
                remaining=self.rate_limit_remaining,
                reset_time=datetime.now(tz=UTC),
            )

    def _calculate_retry_delay(self, attempt: int, base_delay: float) -> float:
        """Calculate exponential backoff delay with jitter to prevent thundering herd."""
        # Exponential backoff: base_delay * 2^attempt, capped at 60 seconds
        exponential_delay = min(base_delay * (2**attempt), 60.0)

        jitter_range = exponential_delay * 0.1
        jitter = random.uniform(-jitter_range, jitter_range)

        final_delay: float = max(0.1, exponential_delay + jitter)

        logger.debug(
            f"Calculated retry delay: {final_delay:.2f}s (attempt {attempt}, base {base_delay}s)"
        )
        return final_delay

    def _should_retry(self, error: Exception) -> bool:
        """Determine if an error should trigger a retry."""
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            # Don't retry authentication/authorization errors
            if status in (401, 403):
                logger.info(f"Not retrying authentication error: {status}")
                return False
            if 400 <= status < 500 and status != 429:
                logger.info(f"Not retrying client error: {status}")
                return False
            logger.info(f"Will retry server error: {status}")
            return True

        if isinstance(error, httpx.NetworkError | httpx.TimeoutException):
            logger.info(f"Will retry network error: {type(error).__name__}")
            return True

        return False

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=30.0,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
                transport=self._transport,
            )
        return self._http_client

    async def _make_request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make HTTP request with retry logic."""
        base_delay = 1.0
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._get_http_client().request(method, url, **kwargs)
                self._update_rate_limit_info(response)
                response.raise_for_status()
                return response

            except Exception as error:
                last_exception = error

                if attempt == self.max_retries:
                    break

                if not self._should_retry(error):
                    logger.info(f"Not retrying error on attempt {attempt + 1}: {error}")
                    break

                delay = self._calculate_retry_delay(attempt, base_delay)
                logger.info(
                    f"Retrying in {delay:.2f} seconds (attempt {attempt + 1}/{self.max_retries})"
                )
                await asyncio.sleep(delay)

        logger.debug(f"Giving up on {method} {url}: {last_exception}")
        if last_exception:
            raise last_exception
        raise Exception("Request failed with no recorded exception")

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a single page from the API and decode its JSON body."""
        self._check_rate_limit()

        response = await self._make_request_with_retry(
            "GET",
            f"{self.base_url}{path}",
            headers=self.headers,
            params=params,
        )
        return response.json()

    def _parse_items(
        self, model: type[BaseModel], data: Any, source: str
    ) -> list[Any]:
        """Validate a JSON list item by item, skipping malformed entries."""
        if not isinstance(data, list):
            raise ValueError(f"Expected a list from {source}, got {type(data).__name__}")

        items = []
        for item in data:
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed entry from {source}: {e}")
                continue
        return items

    def repo(self, full_name: str) -> RepositoryHandle:
        """Create a handle for an ``owner/name`` repository identifier."""
        owner, _, name = full_name.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"Invalid repository name: {full_name!r}")
        return RepositoryHandle(self, owner, name)

    def _to_handles(self, data: Any, source: str) -> list[RepositoryHandle]:
        repositories: list[RepositoryPayload] = self._parse_items(
            RepositoryPayload, data, source
        )
        return [self.repo(repository.full_name) for repository in repositories]

    async def get_user_organizations(self) -> list[str]:
        """Fetch logins of the organizations the authenticated user belongs to."""
        data = await self._get_json("/user/orgs", params={"per_page": 100})
        organizations: list[OrganizationPayload] = self._parse_items(
            OrganizationPayload, data, "/user/orgs"
        )
        return [organization.login for organization in organizations]

    async def get_organization_repositories(
        self, organization: str
    ) -> list[RepositoryHandle]:
        """Fetch repositories of an organization.

        Raises:
            httpx.HTTPStatusError: If the API request fails
        """
        path = f"/orgs/{organization}/repos"
        data = await self._get_json(path, params={"per_page": 100})
        return self._to_handles(data, path)

    async def get_user_repositories(self) -> list[RepositoryHandle]:
        """Fetch repositories of the authenticated user.

        Raises:
            httpx.HTTPStatusError: If the API request fails
        """
        data = await self._get_json("/user/repos", params={"per_page": 100})
        return self._to_handles(data, "/user/repos")

    async def get_branches(self, owner: str, name: str) -> list[Branch]:
        """Fetch the branches of a repository."""
        path = f"/repos/{owner}/{name}/branches"
        data = await self._get_json(path, params={"per_page": 100})
        branches: list[Branch] = self._parse_items(Branch, data, path)
        return branches

    async def get_commits(
        self,
        owner: str,
        name: str,
        author: str,
        branch: str,
        since: datetime,
    ) -> list[Commit]:
        """Fetch commits on a branch authored by ``author`` since ``since``.

        Args:
            owner: Repository owner
            name: Repository name
            author: GitHub login the commits are filtered by
            branch: Branch name passed as the ``sha`` parameter
            since: Inclusive lower bound; naive values are taken as local time

        Returns:
            Commits as returned by a single API page
        """
        path = f"/repos/{owner}/{name}/commits"
        data = await self._get_json(
            path,
            params={
                "author": author,
                "sha": branch,
                "since": since.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "per_page": 100,
            },
        )
        if not isinstance(data, list):
            raise ValueError(f"Expected a list from {path}, got {type(data).__name__}")

        commits = []
        for item in data:
            try:
                commits.append(Commit.from_api(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed commit from {path}: {e}")
                continue
        return commits

    async def get_rate_limit(self) -> RateLimit:
        """Read the current core API quota.

        Raises:
            httpx.HTTPStatusError: If the API request fails
            pydantic.ValidationError: If the body lacks the rate counters
        """
        data = await self._get_json("/rate_limit")
        payload = RateLimitPayload.model_validate(data)
        return RateLimit(left=payload.rate.remaining, max=payload.rate.limit)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit with cleanup."""
        await self.close()
