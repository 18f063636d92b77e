"""
GitHub Integration for readmegen.

Looks up a GitHub user or organization by handle and turns the result into
a descriptor patch that sets the logo to the account avatar.

Environment Variables:
    - GITHUB_TOKEN: Personal access token for higher rate limits (optional)

Note: Works without authentication but has lower rate limits (60 req/hour).
With a token, rate limit is 5000 req/hour.

A failed lookup is not an error for the caller: the patch only clears the
loading flag and the descriptor keeps its current logo.
"""

import json
import os
import re
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from readmegen import __version__
from readmegen.schema import DescriptorPatch

DEFAULT_API_BASE = "https://api.github.com"

_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")


def normalize_handle(handle: Optional[str]) -> Optional[str]:
    """
    Clean up a user-entered GitHub handle.

    Accepts ``octocat``, ``@octocat`` and ``https://github.com/octocat``.

    Returns:
        The bare handle, or None if it cannot be a GitHub login
    """
    if not handle:
        return None
    value = handle.strip()
    url_match = re.match(r"^(?:https?://)?github\.com/([^/?#]+)/?$", value)
    if url_match:
        value = url_match.group(1)
    value = value.lstrip("@")
    return value if _HANDLE_PATTERN.match(value) else None


class GitHubClient:
    """
    Client for GitHub API interactions.

    Uses urllib to avoid external dependencies. Supports optional
    authentication via GITHUB_TOKEN environment variable.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token (or uses GITHUB_TOKEN env var)
            api_base: API root, overridable for GitHub Enterprise
            timeout: Socket timeout in seconds
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def _make_request(self, url: str) -> Optional[dict[str, Any]]:
        """
        Make an authenticated request to the GitHub API.

        Args:
            url: API endpoint URL

        Returns:
            JSON response as dict, or None on error
        """
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"readmegen/{__version__}",
        }

        if self.token:
            headers["Authorization"] = f"token {self.token}"

        try:
            req = urllib.request.Request(url, headers=headers)
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return json.loads(response.read().decode())
        except urllib.error.HTTPError as e:
            if e.code == 403:
                print("GitHub API rate limit exceeded. Set GITHUB_TOKEN for higher limits.")
            elif e.code == 404:
                pass  # Unknown user, silent fail
            else:
                print(f"GitHub API error: {e.code} {e.reason}")
            return None
        except (urllib.error.URLError, OSError, ValueError) as e:
            print(f"GitHub request failed: {e}")
            return None

    def get_user(self, handle: str) -> Optional[dict[str, Any]]:
        """
        Get a user or organization profile.

        Args:
            handle: GitHub login

        Returns:
            Profile data dict, or None on error
        """
        url = f"{self.api_base}/users/{urllib.parse.quote(handle)}"
        result = self._make_request(url)
        return result if isinstance(result, dict) else None


class ProfileLookup:
    """
    Resolves an author handle to an avatar URI as a descriptor patch.

    Usage:
        store.begin_profile_lookup()
        store.apply(ProfileLookup().lookup(store.descriptor.author_handle))
    """

    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or GitHubClient()

    def lookup(self, handle: Optional[str]) -> DescriptorPatch:
        """
        Fetch the avatar for ``handle``.

        Returns:
            ``{}`` for an empty handle; ``{"logo_ref": ..., "is_loading": False}``
            on success; ``{"is_loading": False}`` on any failure
        """
        if not handle or not handle.strip():
            return {}

        login = normalize_handle(handle)
        if login is None:
            print(f"GitHub lookup skipped: {handle!r} is not a valid handle")
            return {"is_loading": False}

        profile = self.client.get_user(login)
        avatar = profile.get("avatar_url") if profile else None
        if not avatar:
            return {"is_loading": False}

        return {"logo_ref": str(avatar), "is_loading": False}


def get_profile_lookup(token: Optional[str] = None) -> ProfileLookup:
    """
    Get a configured profile lookup.

    Args:
        token: Optional GitHub token

    Returns:
        ProfileLookup instance
    """
    return ProfileLookup(GitHubClient(token))
