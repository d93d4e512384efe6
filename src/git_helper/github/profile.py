"""
GitHub profile lookup.

Fetches the logged-in user's profile with a single GraphQL query and,
when the profile has no public email, falls back to the primary address
from the REST email list.
"""

import logging
from typing import Optional

import httpx
import pydantic

from git_helper.github.exceptions import ProfileFetchError
from git_helper.github.models import ProfileSummary

logger = logging.getLogger(__name__)

USER_AGENT = "git-helper"

VIEWER_QUERY = """
query {
    viewer {
        login
        name
        email
        avatarUrl
        createdAt
        followers { totalCount }
        following { totalCount }
        repositories(ownerAffiliations: OWNER) { totalCount }
        organizations(first: 10) { nodes { login avatarUrl } }
        contributionsCollection { contributionCalendar { totalContributions } }
    }
}
"""


class ProfileResolver:
    """
    Resolve an access token to a ProfileSummary.

    Example:
        ```python
        resolver = ProfileResolver()
        profile = await resolver.fetch_profile(token)
        print(profile.display_name, profile.email)
        ```
    """

    def __init__(
        self,
        *,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            self._owns_client = True
        return self._client

    @staticmethod
    def _headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
        }

    async def fetch_profile(self, token: str) -> ProfileSummary:
        """
        Fetch the profile of the token's owner.

        Args:
            token: GitHub access token

        Returns:
            ProfileSummary; the email may be a placeholder if the fallback
            lookup fails

        Raises:
            ProfileFetchError: If the GraphQL query fails
        """
        client = await self._get_client()

        try:
            response = await client.post(
                f"{self.api_url}/graphql",
                json={"query": VIEWER_QUERY},
                headers=self._headers(token),
            )
        except httpx.HTTPError as e:
            raise ProfileFetchError(f"Profile request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            raise ProfileFetchError(
                f"Profile request failed: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )

        errors = data.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else first
            raise ProfileFetchError(
                str(message or "GraphQL error"),
                status_code=response.status_code,
            )

        if not response.is_success:
            raise ProfileFetchError(
                str(data.get("message") or f"Profile request failed with HTTP {response.status_code}"),
                status_code=response.status_code,
            )

        payload = data.get("data")
        viewer = payload.get("viewer") if isinstance(payload, dict) else None
        if not viewer or not isinstance(viewer, dict):
            raise ProfileFetchError("Profile response contained no viewer")
        viewer = dict(viewer)

        if not viewer.get("email"):
            viewer["email"] = await self._primary_email(client, token)

        try:
            return ProfileSummary.from_viewer(viewer)
        except pydantic.ValidationError as e:
            raise ProfileFetchError(f"Unexpected profile data: {e.error_count()} invalid field(s)")

    async def _primary_email(self, client: httpx.AsyncClient, token: str) -> Optional[str]:
        """Primary address from the REST email list; None on any failure."""
        try:
            response = await client.get(
                f"{self.api_url}/user/emails",
                headers=self._headers(token),
            )
            response.raise_for_status()
            emails = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch emails via REST: {e}")
            return None

        if not isinstance(emails, list):
            logger.warning("Unexpected email list response")
            return None

        for entry in emails:
            if isinstance(entry, dict) and entry.get("primary"):
                return entry.get("email")
        return None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
