from __future__ import annotations

import json
from typing import Any

from autonomy_gate.ai.types import ChatMessage
from autonomy_gate.core.config import settings
from autonomy_gate.core.config.autonomy import get_autonomy_value
from autonomy_gate.schemas.candidate import EvidenceBundle

TRUNCATION_MARKER = "... [TRUNCATED]"

SYSTEM_INSTRUCTION = (
    "You are the Autonomy Gate engine, a high-performance hiring validator. "
    "Your goal is to perform a rigorous, first-principles evaluation of a candidate's autonomy "
    "based ONLY on the provided evidence.\n\n"
    "SCORING RULES:\n"
    "- All numeric scores (execution_score, ownership, failure_recovery, complexity, decisions) "
    "MUST be a float between 0.0 and 1.0.\n"
    "- 0.0 means no evidence.\n"
    "- 1.0 means world-class autonomous execution.\n"
    "- DO NOT use 0-100 scale. Only 0.0-1.0.\n\n"
    "Autonomy is defined as:\n"
    "1. End-to-end ownership (shipping despite blockers).\n"
    "2. Failure recovery (resilience when systems break).\n"
    "3. Independent decision-making (navigating ambiguity).\n"
    "4. Management of complexity.\n\n"
    "Base your rationale on the SPECIFIC technical skills and projects found in the resume. "
    "Do not use generic placeholders. If technical signals are strong (e.g. Python, AI, ML, "
    "specific APIs), reflect that in the score."
)

_OUTPUT_SCHEMA = {
    "execution_score": "0.0-1.0",
    "verdict": "PASS | FAIL | CONDITIONAL",
    "fail_modes": ["reason1", "reason2"],
    "forced_decision": "boolean",
    "calibration_notes": "string",
    "rationale": "string",
    "signals": {
        "ownership": "0.0-1.0",
        "failure_recovery": "0.0-1.0",
        "complexity": "0.0-1.0",
        "decisions": "0.0-1.0",
    },
}


def truncate_resume(text: str, max_chars: int | None = None) -> str:
    limit = max_chars if max_chars is not None else settings.resume_prompt_max_chars
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def _benchmark_lines(benchmarks: Any) -> list[str]:
    lines: list[str] = []
    if not isinstance(benchmarks, list):
        return lines
    for item in benchmarks:
        if not isinstance(item, dict) or not item.get("repo"):
            continue
        signals = ", ".join(str(s) for s in item.get("signals") or [])
        lines.append(f"- {item['repo']}: expected {item.get('expected_score')} ({signals})")
    return lines


def build_system_prompt() -> str:
    lines = _benchmark_lines(get_autonomy_value("benchmarks", []))
    if not lines:
        return SYSTEM_INSTRUCTION
    return SYSTEM_INSTRUCTION + "\n\nCALIBRATION ANCHORS:\n" + "\n".join(lines)


def build_user_prompt(bundle: EvidenceBundle) -> str:
    github = bundle.github
    sections = [
        f"EVALUATE FOR: {bundle.role_context}",
        "",
        "DATA_INPUTS:",
        f"- RESUME_CORE: {truncate_resume(bundle.resume_text)}",
        f"- MOST_RECENT_TITLE: {bundle.inferred_title or 'NONE'}",
        f"- GITHUB_REPOS: {json.dumps(github.repos, ensure_ascii=False) if github else 'NONE'}",
        f"- GITHUB_LANGUAGES: {', '.join(github.languages) if github and github.languages else 'NONE'}",
        f"- GITHUB_TOTAL_STARS: {github.total_stars if github else 'NONE'}",
        f"- GITHUB_ACTIVITY: {github.recent_activity if github else 'NONE'}",
        f"- LINKEDIN_REF: {bundle.linkedin_url or 'NONE'}",
        "",
        "INSTRUCTION: Perform a rigorous, first-principles autonomy scan. "
        "Analyze for ownership, failure recovery, and technical complexity handled.",
        "",
        "CRITICAL:",
        "- All scores must be between 0.0 and 1.0.",
        "- Base the 'rationale' and 'calibration_notes' on the SPECIFIC projects and tools mentioned in the RESUME_CORE.",
        "- If the candidate describes building AI agents, RAG, or automation systems, "
        "ensure the 'complexity' and 'ownership' scores reflect this.",
        "",
        "Output absolute JSON verdict. No preamble. Match the following structure exactly:",
        json.dumps(_OUTPUT_SCHEMA, indent=2),
    ]
    return "\n".join(sections)


def build_evaluation_messages(bundle: EvidenceBundle) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=build_system_prompt()),
        ChatMessage(role="user", content=build_user_prompt(bundle)),
    ]
