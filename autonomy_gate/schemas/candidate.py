from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Verdict(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    CONDITIONAL = "CONDITIONAL"


class GitHubSummary(BaseModel):
    repos: list[str] = Field(default_factory=list, max_length=8)
    languages: list[str] = Field(default_factory=list, max_length=5)
    total_stars: int = 0
    recent_activity: str = ""


class CandidateSignals(BaseModel):
    github: str | None = None
    linkedin: str | None = None
    inferred_title: str | None = None
    role_context: str


class EvidenceBundle(BaseModel):
    resume_text: str
    github_url: str | None = None
    linkedin_url: str | None = None
    inferred_title: str | None = None
    inferred_role: str
    role_context: str
    role_overridden: bool = False
    github: GitHubSummary | None = None


class AutonomySignals(BaseModel):
    ownership: float = Field(default=0.0, ge=0.0, le=1.0)
    failure_recovery: float = Field(default=0.0, ge=0.0, le=1.0)
    complexity: float = Field(default=0.0, ge=0.0, le=1.0)
    decisions: float = Field(default=0.0, ge=0.0, le=1.0)


class EvaluationResult(BaseModel):
    execution_score: float = Field(ge=0.0, le=1.0)
    verdict: Verdict
    fail_modes: list[str] = Field(default_factory=list)
    forced_decision: bool = False
    calibration_notes: str = ""
    rationale: str = ""
    signals: AutonomySignals = Field(default_factory=AutonomySignals)


class CandidateSignalsRequest(BaseModel):
    text: str = Field(default="", max_length=200000)
    hyperlinks: list[str] = Field(default_factory=list, max_length=500)


class ExtractDocumentResponse(BaseModel):
    doc_id: str
    source_type: str
    text: str
    hyperlinks: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    signals: CandidateSignals


class EvaluateCandidateRequest(BaseModel):
    resume_text: str = Field(min_length=30, max_length=200000)
    hyperlinks: list[str] = Field(default_factory=list, max_length=500)
    github_url: str | None = Field(default=None, max_length=500)
    linkedin_url: str | None = Field(default=None, max_length=500)
    role_context: str | None = Field(default=None, max_length=200)
    use_cache: bool = True


class EvidenceSummary(BaseModel):
    github_url: str | None = None
    linkedin_url: str | None = None
    inferred_title: str | None = None
    inferred_role: str
    role_context: str
    role_overridden: bool = False
    github: GitHubSummary | None = None


class EvaluateCandidateResponse(BaseModel):
    result: EvaluationResult
    evidence: EvidenceSummary
    cached: bool = False


class RoleCatalogEntry(BaseModel):
    name: str
    keywords: list[str] = Field(default_factory=list)


class RoleCatalogResponse(BaseModel):
    roles: list[RoleCatalogEntry] = Field(default_factory=list)
    fallback_role: str
