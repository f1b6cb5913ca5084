"""
GitHub REST client used by the profile page.

Lists the five most recently created public repositories of a GitHub user.
Any failure (unknown user, rate limit, network error) is reported as
NotFound so the profile page can simply hide the repository section.
"""
import logging
from typing import Optional

import httpx

from devlink.config import Settings
from devlink.errors import NotFound

logger = logging.getLogger(__name__)


class GithubClient:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        self._http = httpx.AsyncClient(
            base_url=self._settings.github_api_url,
            timeout=self._settings.github_timeout,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": self._settings.service_name,
            },
            transport=self._transport,
        )

    async def stop(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    async def list_repos(self, username: str) -> list[dict]:
        if self._http is None:
            raise RuntimeError("GithubClient not started — call start() at startup")

        params = {"per_page": 5, "sort": "created:asc"}
        if self._settings.github_client_id and self._settings.github_client_secret:
            params["client_id"] = self._settings.github_client_id
            params["client_secret"] = self._settings.github_client_secret

        try:
            resp = await self._http.get(f"/users/{username}/repos", params=params)
            resp.raise_for_status()
            repos = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("GitHub lookup for %s failed: %s", username, exc)
            raise NotFound("No Github profile found")

        if not isinstance(repos, list):
            raise NotFound("No Github profile found")
        return repos
