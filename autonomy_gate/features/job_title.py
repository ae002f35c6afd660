from __future__ import annotations

import re

SECTION_WINDOW_CHARS = 1500
MAX_CANDIDATE_LINES = 15
MIN_LINE_CHARS = 4
DATE_LINE_MAX_CHARS = 25

# Order is significant: the first header found anywhere in the text wins,
# even when a later header occurs earlier in the document.
SECTION_HEADER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("professional_experience", re.compile(r"professional experience", re.IGNORECASE)),
    ("work_experience", re.compile(r"work experience", re.IGNORECASE)),
    ("employment_history", re.compile(r"employment history", re.IGNORECASE)),
    ("career_history", re.compile(r"career history", re.IGNORECASE)),
    ("experience", re.compile(r"experience", re.IGNORECASE)),
    ("work_history", re.compile(r"work history", re.IGNORECASE)),
)

_TITLE_SUFFIXES = (
    "Engineer",
    "Manager",
    "Scientist",
    "Developer",
    "Analyst",
    "Designer",
    "Director",
    "Lead",
    "Specialist",
    "Architect",
)

# Tried per line in this order; the first pattern whose capture passes the
# length check wins for that line.
TITLE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("title_separator_company", re.compile(r"^([A-Z][a-zA-Z\s]{3,})\s*[-|@]\s*.+$")),
    ("title_at_company", re.compile(r"^([A-Z][a-zA-Z\s]{3,})\s+(?i:at)\s+.+$")),
    (
        "title_suffix_word",
        re.compile(
            r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s*(?:" + "|".join(_TITLE_SUFFIXES) + r"))\b"
        ),
    ),
    ("capitalized_phrase", re.compile(r"^([A-Z][a-zA-Z\s]{5,24})$")),
)

_YEAR_PATTERN = re.compile(r"\d{4}")
_HEADING_LINE_PATTERN = re.compile(
    r"^(?:professional experience|work experience|employment history|career history|experience|work history)\s*:?$",
    re.IGNORECASE,
)


def find_section_start(text: str) -> int:
    for _name, pattern in SECTION_HEADER_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.start()
    return 0


def candidate_lines(text: str) -> list[str]:
    start = find_section_start(text)
    window = text[start : start + SECTION_WINDOW_CHARS]
    lines = [line.strip() for line in window.splitlines()]
    return [line for line in lines if len(line) >= MIN_LINE_CHARS][:MAX_CANDIDATE_LINES]


def _is_rejected_line(line: str) -> bool:
    if _YEAR_PATTERN.search(line) and len(line) < DATE_LINE_MAX_CHARS:
        return True
    return bool(_HEADING_LINE_PATTERN.match(line))


def _title_from_line(line: str) -> str | None:
    for _name, pattern in TITLE_PATTERNS:
        match = pattern.search(line)
        if not match:
            continue
        title = match.group(1).strip()
        if 3 < len(title) < 50:
            return title
    return None


def extract_recent_job_title(text: str) -> str | None:
    """Best guess at the most recent job title near the top of the experience section."""
    if not text:
        return None
    for line in candidate_lines(text):
        if _is_rejected_line(line):
            continue
        title = _title_from_line(line)
        if title:
            return title
    return None
