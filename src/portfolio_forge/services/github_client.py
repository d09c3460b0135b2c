"""Asynchronous GitHub client used by the GitHub source.

Each ``fetch_*`` coroutine is independently fallible and raises
:class:`GitHubError` on failure. :meth:`GitHubClient.fetch_user_data` fans
the sub-fetches out concurrently and degrades failed ones to empty values
instead of failing as a whole.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import httpx

from portfolio_forge.config import Settings, get_settings

logger = logging.getLogger(__name__)

__all__ = ["GitHubClient", "GitHubError", "GitHubUserData"]

_PINNED_QUERY = """
query($username: String!) {
  user(login: $username) {
    pinnedItems(first: 6, types: [REPOSITORY]) {
      edges {
        node {
          ... on Repository {
            name
            description
            url
            homepageUrl
            primaryLanguage { name }
            languages(first: 10) { edges { node { name } } }
            stargazerCount
            forkCount
            createdAt
            updatedAt
            repositoryTopics(first: 10) { edges { node { topic { name } } } }
          }
        }
      }
    }
  }
}
"""

_CONTRIBUTIONS_QUERY = """
query($username: String!) {
  user(login: $username) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks { contributionDays { contributionCount date } }
      }
    }
  }
}
"""


class GitHubError(RuntimeError):
    """Raised when a single GitHub request fails."""


@dataclass
class GitHubUserData:
    """Aggregated, possibly partial, GitHub data for one user."""

    profile: dict[str, Any] | None = None
    repositories: list[dict[str, Any]] = field(default_factory=list)
    pinned_repositories: list[dict[str, Any]] = field(default_factory=list)
    languages: list[dict[str, Any]] = field(default_factory=list)
    contribution_calendar: dict[str, Any] | None = None
    profile_readme: str | None = None
    failures: list[str] = field(default_factory=list)

    @property
    def stats(self) -> dict[str, int]:
        return {
            "total_repos": len(self.repositories),
            "total_stars": sum(r.get("stargazers_count") or 0 for r in self.repositories),
            "total_forks": sum(r.get("forks_count") or 0 for r in self.repositories),
        }


def _repository_summary(repo: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": repo.get("name"),
        "full_name": repo.get("full_name"),
        "description": repo.get("description"),
        "html_url": repo.get("html_url"),
        "homepage": repo.get("homepage"),
        "language": repo.get("language"),
        "stargazers_count": repo.get("stargazers_count", 0),
        "forks_count": repo.get("forks_count", 0),
        "topics": repo.get("topics") or [],
        "fork": repo.get("fork", False),
        "archived": repo.get("archived", False),
        "created_at": repo.get("created_at"),
        "updated_at": repo.get("updated_at"),
        "pushed_at": repo.get("pushed_at"),
    }


class GitHubClient:
    """Thin async wrapper over the GitHub REST and GraphQL APIs.

    Use as an async context manager so all requests share one connection pool::

        async with GitHubClient(settings) as github:
            data = await github.fetch_user_data("octocat")

    Args:
        settings: Base URL, token and timeout.
        access_token: Per-user token overriding ``settings.github_token``.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._access_token = access_token
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GitHubClient:
        self._http = self._build_http_client()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            raise GitHubError("GitHubClient must be used inside `async with`")
        return self._http

    def _build_http_client(self) -> httpx.AsyncClient:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "portfolio-forge",
        }
        token = self._access_token or self.settings.github_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return httpx.AsyncClient(
            base_url=self.settings.github_api_url,
            headers=headers,
            timeout=self.settings.github_timeout_seconds,
            transport=self._transport,
        )

    async def _get_json(self, path: str, **params: Any) -> Any:
        try:
            resp = await self.http.get(path, params=params or None)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubError(f"GET {path} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GET {path} failed: {e}") from e
        return resp.json()

    async def _graphql(self, query: str, username: str) -> dict[str, Any]:
        if "Authorization" not in self.http.headers:
            raise GitHubError("GitHub GraphQL requires a token")
        try:
            resp = await self.http.post(
                "/graphql", json={"query": query, "variables": {"username": username}}
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GitHubError(f"GraphQL returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GraphQL request failed: {e}") from e
        payload = resp.json()
        if payload.get("errors"):
            raise GitHubError(payload["errors"][0].get("message", "GraphQL error"))
        user = (payload.get("data") or {}).get("user")
        if user is None:
            raise GitHubError(f"GitHub user {username!r} not found")
        return user

    async def fetch_profile(self, username: str) -> dict[str, Any]:
        data = await self._get_json(f"/users/{username}")
        return {
            "username": data.get("login"),
            "name": data.get("name"),
            "bio": data.get("bio"),
            "avatar_url": data.get("avatar_url"),
            "location": data.get("location"),
            "company": data.get("company"),
            "blog": data.get("blog"),
            "email": data.get("email"),
            "html_url": data.get("html_url"),
            "public_repos": data.get("public_repos"),
            "followers": data.get("followers"),
            "following": data.get("following"),
        }

    @property
    def _repository_page_size(self) -> int:
        # GitHub caps per_page at 100.
        return max(1, min(self.settings.github_top_repositories, 100))

    async def fetch_repositories(self, username: str, per_page: int = 10) -> list[dict[str, Any]]:
        """Return the user's own repositories, most recently updated first."""
        data = await self._get_json(
            f"/users/{username}/repos",
            sort="updated",
            direction="desc",
            per_page=per_page,
            type="owner",
        )
        return [_repository_summary(repo) for repo in data]

    async def fetch_pinned_repositories(self, username: str) -> list[dict[str, Any]]:
        user = await self._graphql(_PINNED_QUERY, username)
        edges = (user.get("pinnedItems") or {}).get("edges") or []
        pinned = []
        for edge in edges:
            node = edge.get("node") or {}
            pinned.append(
                {
                    "name": node.get("name"),
                    "description": node.get("description"),
                    "html_url": node.get("url"),
                    "homepage": node.get("homepageUrl"),
                    "primary_language": (node.get("primaryLanguage") or {}).get("name"),
                    "languages": [
                        e["node"]["name"]
                        for e in (node.get("languages") or {}).get("edges", [])
                    ],
                    "stargazers_count": node.get("stargazerCount", 0),
                    "forks_count": node.get("forkCount", 0),
                    "topics": [
                        e["node"]["topic"]["name"]
                        for e in (node.get("repositoryTopics") or {}).get("edges", [])
                    ],
                }
            )
        return pinned

    async def fetch_contribution_calendar(self, username: str) -> dict[str, Any]:
        user = await self._graphql(_CONTRIBUTIONS_QUERY, username)
        calendar = (user.get("contributionsCollection") or {}).get("contributionCalendar") or {}
        weeks = calendar.get("weeks") or []
        return {
            "total_contributions": calendar.get("totalContributions", 0),
            "active_days": sum(
                1
                for week in weeks
                for day in week.get("contributionDays", [])
                if day.get("contributionCount", 0) > 0
            ),
        }

    async def fetch_repository_languages(self, username: str, repo_name: str) -> dict[str, int]:
        return await self._get_json(f"/repos/{username}/{repo_name}/languages")

    async def fetch_profile_readme(self, username: str) -> str:
        data = await self._get_json(f"/repos/{username}/{username}/readme")
        content = data.get("content") or ""
        try:
            return base64.b64decode(content).decode("utf-8", errors="replace")
        except ValueError as e:
            raise GitHubError("Profile README is not valid base64") from e

    async def _aggregate_languages(
        self,
        username: str,
        repositories: list[dict[str, Any]],
        failures: list[str],
    ) -> list[dict[str, Any]]:
        top = repositories[: self.settings.github_top_repositories]
        names = [r["name"] for r in top if r.get("name")]
        results = await asyncio.gather(
            *(self.fetch_repository_languages(username, name) for name in names),
            return_exceptions=True,
        )
        totals: Counter[str] = Counter()
        for name, result in zip(names, results, strict=True):
            if isinstance(result, Exception):
                failures.append(f"languages:{name}")
                logger.warning("GitHub languages for %s/%s unavailable: %s", username, name, result)
                continue
            totals.update(result)
        return [
            {"name": lang, "bytes": count}
            for lang, count in totals.most_common(self.settings.github_top_languages)
        ]

    async def fetch_user_data(self, username: str) -> GitHubUserData:
        """Fetch everything for *username* concurrently, tolerating partial failure."""
        labels = ("profile", "repositories", "pinned", "contributions", "profile_readme")
        results = await asyncio.gather(
            self.fetch_profile(username),
            self.fetch_repositories(username, per_page=self._repository_page_size),
            self.fetch_pinned_repositories(username),
            self.fetch_contribution_calendar(username),
            self.fetch_profile_readme(username),
            return_exceptions=True,
        )
        values: dict[str, Any] = {}
        failures: list[str] = []
        for label, result in zip(labels, results, strict=True):
            if isinstance(result, Exception):
                failures.append(label)
                logger.warning("GitHub %s for %s unavailable: %s", label, username, result)
                values[label] = None
            else:
                values[label] = result

        repositories = values["repositories"] or []
        languages = await self._aggregate_languages(username, repositories, failures)

        return GitHubUserData(
            profile=values["profile"],
            repositories=repositories,
            pinned_repositories=values["pinned"] or [],
            languages=languages,
            contribution_calendar=values["contributions"],
            profile_readme=values["profile_readme"],
            failures=failures,
        )
