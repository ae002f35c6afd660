from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from autonomy_gate.core.config import settings
from autonomy_gate.features.profile_links import extract_github_username
from autonomy_gate.schemas.candidate import GitHubSummary

logger = logging.getLogger(__name__)

REPOS_PER_PAGE = 15
EVENTS_PER_PAGE = 20
MAX_SUMMARY_REPOS = 8
MAX_SUMMARY_LANGUAGES = 5
MAX_ACTIVITY_TYPES = 3


def _headers() -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "autonomy-gate",
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return headers


def _repo_line(repo: dict[str, Any]) -> str:
    name = str(repo.get("name") or "unknown")
    description = repo.get("description") or "No desc"
    stars = int(repo.get("stargazers_count") or 0)
    return f"{name}: {description} ({stars}*)"


def summarize_github_activity(repos: list[Any], events: list[Any]) -> GitHubSummary:
    repo_items = [repo for repo in repos if isinstance(repo, dict)]
    languages: list[str] = []
    for repo in repo_items:
        language = repo.get("language")
        if language and language not in languages:
            languages.append(str(language))

    activity_types = [str(event.get("type")) for event in events if isinstance(event, dict) and event.get("type")]
    return GitHubSummary(
        repos=[_repo_line(repo) for repo in repo_items[:MAX_SUMMARY_REPOS]],
        languages=languages[:MAX_SUMMARY_LANGUAGES],
        total_stars=sum(int(repo.get("stargazers_count") or 0) for repo in repo_items),
        recent_activity=f"Activity: {', '.join(activity_types[:MAX_ACTIVITY_TYPES])}.",
    )


async def _fetch_with(client: httpx.AsyncClient, username: str) -> GitHubSummary | None:
    base = settings.github_api_base
    repo_res, events_res = await asyncio.gather(
        client.get(f"{base}/users/{username}/repos", params={"sort": "updated", "per_page": REPOS_PER_PAGE}),
        client.get(f"{base}/users/{username}/events/public", params={"per_page": EVENTS_PER_PAGE}),
    )
    if repo_res.status_code >= 400:
        logger.info("github_repos_unavailable user=%s status=%s", username, repo_res.status_code)
        return None

    repos = repo_res.json()
    if not isinstance(repos, list):
        return None
    events: Any = []
    if events_res.status_code < 400:
        events = events_res.json()
    if not isinstance(events, list):
        events = []
    return summarize_github_activity(repos, events)


async def fetch_github_summary(
    url: str | None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout_s: float | None = None,
) -> GitHubSummary | None:
    """Summarize a user's public repos and events; None when unavailable."""
    username = extract_github_username(url)
    if not username:
        return None

    timeout = timeout_s if timeout_s is not None else settings.github_timeout_s
    try:
        if client is not None:
            return await asyncio.wait_for(_fetch_with(client, username), timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout, headers=_headers(), follow_redirects=True) as own_client:
            return await asyncio.wait_for(_fetch_with(own_client, username), timeout=timeout)
    except (httpx.HTTPError, asyncio.TimeoutError, ValueError) as exc:
        logger.warning("github_fetch_failed user=%s: %s", username, exc)
        return None
