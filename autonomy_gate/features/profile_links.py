from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

_GITHUB_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?github\.com/[a-zA-Z0-9\-._]+(?:/[a-zA-Z0-9\-._]+)?",
    re.IGNORECASE,
)
_LINKEDIN_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?linkedin\.com/in/[a-zA-Z0-9\-%_]+/?",
    re.IGNORECASE,
)
_GITHUB_USERNAME_PATTERN = re.compile(r"github\.com/([a-zA-Z0-9\-._]+)", re.IGNORECASE)
_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;"


@dataclass(frozen=True)
class DetectedProfiles:
    github: str | None = None
    linkedin: str | None = None


def _first_matching_link(pattern: re.Pattern[str], hyperlinks: Iterable[object]) -> str | None:
    for link in hyperlinks:
        if not isinstance(link, str):
            continue
        if pattern.search(link):
            return link
    return None


def _first_text_match(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text or "")
    return match.group(0) if match else None


def normalize_profile_url(url: str | None) -> str | None:
    """Prefix a scheme when missing and drop one trailing '.', ',' or ';'."""
    if not url:
        return None
    clean = url.strip()
    if not clean:
        return None
    if not _SCHEME_PATTERN.match(clean):
        clean = f"https://{clean}"
    if clean[-1] in _TRAILING_PUNCTUATION:
        clean = clean[:-1]
    return clean


def _detect(pattern: re.Pattern[str], text: str, hyperlinks: Iterable[object]) -> str | None:
    found = _first_matching_link(pattern, hyperlinks)
    if found is None:
        found = _first_text_match(pattern, text)
    return normalize_profile_url(found)


def detect_profiles(text: str, hyperlinks: Iterable[object] = ()) -> DetectedProfiles:
    """Find GitHub and LinkedIn profile URLs.

    Annotation hyperlinks win over URLs written in the body text; within each
    source the first match wins.
    """
    links = list(hyperlinks or ())
    return DetectedProfiles(
        github=_detect(_GITHUB_PATTERN, text, links),
        linkedin=_detect(_LINKEDIN_PATTERN, text, links),
    )


def extract_github_username(url: str | None) -> str | None:
    if not url:
        return None
    match = _GITHUB_USERNAME_PATTERN.search(url)
    return match.group(1) if match else None
