"""
Forge API clients for forkswarm.

One client per forge, each knowing its fork endpoint and which field of
the response holds the fork's full name. Fork discovery is best-effort:
list_forks() never raises, any failure yields an empty list.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import requests

from ..domain.identity import RepositoryIdentity
from ..domain.platform import Platform

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_PAGE_SIZE = 100
GITHUB_API_URL = "https://api.github.com"


class ForgeResponseError(Exception):
    """The forge answered, but not with a usable fork list."""


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


class ForgeClient:
    """
    Base class for fork enumeration against a forge REST API.

    Subclasses set `field` and implement `forks_url()`; the request,
    status check and response mapping are shared.

    Example:
        client = get_forge_client(Platform.GITHUB, token="...")
        forks = client.list_forks(identity)
    """

    platform: Platform = Platform.GENERIC
    field: str = "full_name"
    page_param: str = "per_page"
    total_header: Optional[str] = None

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize ForgeClient.

        Args:
            token: Optional API credential
            timeout: HTTP request timeout in seconds
            page_size: Entries requested per call (only one page is fetched)
            session: requests.Session to use (creates new if None)
        """
        self.token = token
        self.timeout = timeout
        self.page_size = page_size
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'forkswarm',
        })

    def forks_url(self, identity: RepositoryIdentity) -> str:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        return {}

    def params(self) -> Dict[str, Any]:
        return {self.page_param: self.page_size}

    def on_response(self, response: requests.Response) -> None:
        """Hook for inspecting response headers."""

    def is_truncated(self, response: requests.Response, forks: List[str]) -> bool:
        """
        True when the forge has more forks than the page returned.

        Servers may cap the page below page_size (Gitea and Forgejo default
        to 50), so the Link header and total-count header are checked before
        falling back to comparing against a full page.
        """
        links = getattr(response, 'links', None)
        if isinstance(links, dict) and 'next' in links:
            return True

        if self.total_header:
            try:
                total = int(response.headers.get(self.total_header, -1))
            except (ValueError, TypeError):
                total = -1
            if total >= 0:
                return total > len(forks)

        return len(forks) >= self.page_size

    def list_forks(self, identity: RepositoryIdentity) -> List[str]:
        """
        List fork full names in API response order.

        Args:
            identity: Repository whose forks to enumerate

        Returns:
            Fork full names, or [] on any failure
        """
        if identity.is_unknown:
            logger.debug(f"Repository identity unknown, skipping {self.platform.value} fork lookup")
            return []

        url = self.forks_url(identity)
        try:
            response = self.session.get(
                url,
                params=self.params(),
                headers=self.headers(),
                timeout=self.timeout,
            )
            self.on_response(response)
            response.raise_for_status()
            forks = self._parse_forks(response.json())
        except requests.RequestException as e:
            logger.warning(f"{self.platform.value} API request failed for {url}: {e}")
            return []
        except ValueError as e:
            logger.warning(f"{self.platform.value} API returned invalid JSON for {url}: {e}")
            return []
        except ForgeResponseError as e:
            logger.warning(f"{self.platform.value} API returned an unexpected body for {url}: {e}")
            return []

        if self.is_truncated(response, forks):
            logger.warning(
                f"Fork list truncated at {len(forks)} entries; "
                f"forks beyond the first page are not counted"
            )

        return forks

    def _parse_forks(self, data: Any) -> List[str]:
        if not isinstance(data, list):
            raise ForgeResponseError(f"expected a list, got {type(data).__name__}")

        forks = []
        for entry in data:
            value = entry.get(self.field) if isinstance(entry, dict) else None
            if not isinstance(value, str) or not value:
                raise ForgeResponseError(f"fork entry missing '{self.field}'")
            forks.append(value)
        return forks


class GitHubForgeClient(ForgeClient):
    """GitHub REST API; unauthenticated calls work at a lower rate limit."""

    platform = Platform.GITHUB
    field = "full_name"

    def __init__(self, *args, api_url: str = GITHUB_API_URL, **kwargs):
        super().__init__(*args, **kwargs)
        self.api_url = api_url.rstrip('/')
        self.rate_limit: Optional[RateLimitStatus] = None

    def forks_url(self, identity: RepositoryIdentity) -> str:
        return f"{self.api_url}/repos/{identity.owner}/{identity.name}/forks"

    def headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/vnd.github.v3+json'}
        if self.token:
            headers['Authorization'] = f'token {self.token}'
        return headers

    def on_response(self, response: requests.Response) -> None:
        self._update_rate_limit_from_headers(response.headers)

    def _update_rate_limit_from_headers(self, headers) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining < 0 or limit < 0:
            return

        self.rate_limit = RateLimitStatus(
            remaining=remaining,
            limit=limit,
            reset_time=reset_time,
            used=used,
        )
        if self.rate_limit.is_low:
            hint = "" if self.token else " (set GITHUB_TOKEN for a higher limit)"
            logger.warning(
                f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                f"resets in {self.rate_limit.minutes_until_reset} minutes{hint}"
            )


class GitLabForgeClient(ForgeClient):
    """GitLab REST API v4; the project is addressed by its encoded path."""

    platform = Platform.GITLAB
    field = "path_with_namespace"
    total_header = "X-Total"

    def forks_url(self, identity: RepositoryIdentity) -> str:
        project_id = quote(identity.full_name, safe='')
        return f"https://{identity.host}/api/v4/projects/{project_id}/forks"


class GiteaForgeClient(ForgeClient):
    """Gitea and Forgejo REST API v1."""

    platform = Platform.GITEA
    field = "full_name"
    page_param = "limit"
    total_header = "X-Total-Count"

    def forks_url(self, identity: RepositoryIdentity) -> str:
        return f"https://{identity.host}/api/v1/repos/{identity.owner}/{identity.name}/forks"


class ForgejoForgeClient(GiteaForgeClient):
    platform = Platform.FORGEJO


class GenericForgeClient(ForgeClient):
    """Forge without a known API. Never touches the network."""

    platform = Platform.GENERIC

    def list_forks(self, identity: RepositoryIdentity) -> List[str]:
        logger.info("No fork API for this platform, topology is local only")
        return []


FORGE_CLIENTS: Dict[Platform, Type[ForgeClient]] = {
    Platform.GITHUB: GitHubForgeClient,
    Platform.GITLAB: GitLabForgeClient,
    Platform.GITEA: GiteaForgeClient,
    Platform.FORGEJO: ForgejoForgeClient,
}


def get_forge_client(
    platform: Platform,
    token: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    page_size: int = DEFAULT_PAGE_SIZE,
    session: Optional[requests.Session] = None,
    github_api_url: str = GITHUB_API_URL,
) -> ForgeClient:
    """
    Return the fork enumerator for a platform.

    Platforms without an entry in FORGE_CLIENTS (woodpecker, generic) get
    GenericForgeClient. The token is only sent to GitHub.
    """
    client_cls = FORGE_CLIENTS.get(platform, GenericForgeClient)

    if client_cls is GitHubForgeClient:
        return GitHubForgeClient(
            token=token,
            timeout=timeout,
            page_size=page_size,
            session=session,
            api_url=github_api_url,
        )

    return client_cls(timeout=timeout, page_size=page_size, session=session)
