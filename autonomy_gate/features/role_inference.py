from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Mapping

DEFAULT_FALLBACK_ROLE = "General Autonomy Check"
TITLE_KEYWORD_WEIGHT = 5
MIN_ROLE_SCORE = 2


def _clean_keywords(keywords: Iterable[object]) -> tuple[str, ...]:
    seen: list[str] = []
    for keyword in keywords:
        value = str(keyword or "").strip().lower()
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


@dataclass(frozen=True)
class RoleCatalog:
    """Ordered role name -> keyword table; order decides ties."""

    roles: tuple[tuple[str, tuple[str, ...]], ...] = ()
    fallback_role: str = DEFAULT_FALLBACK_ROLE

    @classmethod
    def from_mapping(
        cls,
        roles: Mapping[str, Iterable[object]],
        *,
        fallback_role: str = DEFAULT_FALLBACK_ROLE,
    ) -> "RoleCatalog":
        entries = tuple((str(name), _clean_keywords(keywords)) for name, keywords in roles.items())
        return cls(roles=entries, fallback_role=fallback_role)

    @property
    def role_names(self) -> tuple[str, ...]:
        return tuple(name for name, _keywords in self.roles)

    def __len__(self) -> int:
        return len(self.roles)


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(keyword) + r"(?!\w)")


def _title_weight(lowered_title: str, keywords: tuple[str, ...]) -> int:
    if not lowered_title:
        return 0
    return sum(TITLE_KEYWORD_WEIGHT for keyword in keywords if keyword in lowered_title)


def _text_weight(lowered_text: str, keywords: tuple[str, ...]) -> int:
    if not lowered_text:
        return 0
    return sum(len(_keyword_pattern(keyword).findall(lowered_text)) for keyword in keywords)


def score_roles(title: str | None, text: str, catalog: RoleCatalog) -> dict[str, int]:
    lowered_title = (title or "").lower()
    lowered_text = (text or "").lower()
    scores: dict[str, int] = {}
    for role, keywords in catalog.roles:
        scores[role] = _title_weight(lowered_title, keywords) + _text_weight(lowered_text, keywords)
    return scores


def infer_target_role(title: str | None, text: str, catalog: RoleCatalog) -> str:
    """Pick the catalog role best supported by the title and resume text.

    Title keyword hits weigh 5, whole-word body hits weigh 1 each. A winning
    score below 2 is not enough evidence and yields the fallback role.
    """
    scores = score_roles(title, text, catalog)
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    if not ranked:
        return catalog.fallback_role

    winner, winner_score = ranked[0]
    if winner_score < MIN_ROLE_SCORE:
        return catalog.fallback_role
    return winner
