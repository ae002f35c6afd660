from __future__ import annotations

from typing import Iterable

from autonomy_gate.core.config.autonomy import get_role_catalog
from autonomy_gate.features.job_title import extract_recent_job_title
from autonomy_gate.features.profile_links import detect_profiles, normalize_profile_url
from autonomy_gate.features.role_inference import RoleCatalog, infer_target_role
from autonomy_gate.schemas.candidate import CandidateSignals, EvidenceBundle, GitHubSummary


def analyze_candidate(
    text: str,
    hyperlinks: Iterable[object] = (),
    catalog: RoleCatalog | None = None,
) -> CandidateSignals:
    """Core signals for one document: profile links plus the inferred title and role."""
    text = text or ""
    profiles = detect_profiles(text, hyperlinks)
    title = extract_recent_job_title(text)
    role = infer_target_role(title, text, catalog if catalog is not None else get_role_catalog())
    return CandidateSignals(
        github=profiles.github,
        linkedin=profiles.linkedin,
        inferred_title=title,
        role_context=role,
    )


def _override(value: str | None) -> str | None:
    if value is None:
        return None
    clean = value.strip()
    return clean or None


def build_evidence_bundle(
    resume_text: str,
    signals: CandidateSignals,
    *,
    github: GitHubSummary | None = None,
    github_url: str | None = None,
    linkedin_url: str | None = None,
    role_context: str | None = None,
) -> EvidenceBundle:
    """Merge inferred signals with operator overrides.

    Inference only supplies defaults: a non-blank override always wins.
    """
    role_override = _override(role_context)
    return EvidenceBundle(
        resume_text=resume_text or "",
        github_url=normalize_profile_url(_override(github_url)) or signals.github,
        linkedin_url=normalize_profile_url(_override(linkedin_url)) or signals.linkedin,
        inferred_title=signals.inferred_title,
        inferred_role=signals.role_context,
        role_context=role_override or signals.role_context,
        role_overridden=role_override is not None and role_override != signals.role_context,
        github=github,
    )
