"""GitHub release creation

Creates a release entry for a tag through the GitHub REST API.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from submoduler_child.errors import ReleaseError

logger = logging.getLogger(__name__)

GITHUB_REMOTE_PATTERN = re.compile(r"github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$")


def parse_github_repository(remote_url: str) -> str:
    """Extract "owner/repo" from a GitHub remote URL

    Accepts SSH (git@github.com:owner/repo.git) and HTTPS forms.

    Raises:
        ReleaseError: If the URL does not point at GitHub
    """
    match = GITHUB_REMOTE_PATTERN.search(remote_url.strip())
    if not match:
        raise ReleaseError(
            f"Could not detect GitHub repository from remote URL: {remote_url}"
        )
    return f"{match.group('owner')}/{match.group('repo')}"


@dataclass
class Release:
    """A created release"""

    tag: str
    name: str
    url: Optional[str] = None
    id: Optional[int] = None


class GitHubReleaseClient:
    """Minimal client for the GitHub releases endpoint"""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
    ):
        """Initialize the client

        Args:
            token: Access token with permission to create releases
            api_url: API base URL (GitHub Enterprise installs differ)
            timeout: Request timeout in seconds
        """
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def create_release(self, repository: str, tag: str, name: str, body: str = "") -> Release:
        """Create a release for an existing tag

        Args:
            repository: "owner/repo"
            tag: Tag name the release points at
            name: Release title
            body: Release notes

        Returns:
            The created release

        Raises:
            ReleaseError: On network failure or a non-success response
        """
        url = f"{self.api_url}/repos/{repository}/releases"
        payload: Dict[str, Any] = {"tag_name": tag, "name": name, "body": body}
        logger.debug("POST %s tag=%s", url, tag)

        try:
            response = requests.post(
                url, json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ReleaseError(f"Release request failed: {e}") from e

        if not response.ok:
            raise ReleaseError(
                f"GitHub API error {response.status_code}: {self._error_message(response)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ReleaseError(f"GitHub API returned an unreadable response: {e}") from e
        if not isinstance(data, dict):
            raise ReleaseError("GitHub API returned an unexpected response body")

        logger.info("Created release %s for %s", tag, repository)
        return Release(tag=tag, name=name, url=data.get("html_url"), id=data.get("id"))

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or response.reason or "unknown error"
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return response.reason or "unknown error"
