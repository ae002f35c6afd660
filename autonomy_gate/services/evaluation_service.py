from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from autonomy_gate.ai.types import AIClient
from autonomy_gate.core.config import settings
from autonomy_gate.core.verdict_cache import get_cached_verdict, store_verdict, verdict_cache_key
from autonomy_gate.features.role_inference import RoleCatalog
from autonomy_gate.integrations.github import fetch_github_summary
from autonomy_gate.schemas.candidate import (
    EvaluateCandidateRequest,
    EvaluationResult,
    EvidenceBundle,
    EvidenceSummary,
)
from autonomy_gate.services.evaluation_llm import (
    EvaluationLLMError,
    coerce_evaluation,
    fallback_evaluation,
    json_completion,
)
from autonomy_gate.services.evidence import analyze_candidate, build_evidence_bundle
from autonomy_gate.services.prompts import build_evaluation_messages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationOutcome:
    result: EvaluationResult
    bundle: EvidenceBundle
    cached: bool = False

    def evidence_summary(self) -> EvidenceSummary:
        return EvidenceSummary(**self.bundle.model_dump(exclude={"resume_text"}))


def _load_cached(cache_key: str) -> EvaluationResult | None:
    payload = get_cached_verdict(cache_key)
    if payload is None:
        return None
    try:
        return EvaluationResult.model_validate(payload)
    except ValidationError:
        logger.info("verdict_cache_entry_invalid key=%s", cache_key[:12])
        return None


async def evaluate_candidate(
    request: EvaluateCandidateRequest,
    *,
    catalog: RoleCatalog | None = None,
    ai_client: AIClient | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> EvaluationOutcome:
    """Build the evidence bundle for a request and ask the model for a verdict.

    Provider failures yield the fallback FAIL verdict, which is never cached.
    A missing configuration or unusable model output raises EvaluationLLMError.
    """
    signals = analyze_candidate(request.resume_text, request.hyperlinks, catalog)
    draft = build_evidence_bundle(
        request.resume_text,
        signals,
        github_url=request.github_url,
        linkedin_url=request.linkedin_url,
        role_context=request.role_context,
    )

    use_cache = settings.verdict_cache_enabled and request.use_cache
    cache_key = verdict_cache_key(
        github_url=draft.github_url,
        role_context=draft.role_context,
        resume_text=draft.resume_text,
    )
    if use_cache:
        cached = _load_cached(cache_key)
        if cached is not None:
            logger.info("verdict_cache_hit role=%s", draft.role_context)
            return EvaluationOutcome(result=cached, bundle=draft, cached=True)

    logger.info("evaluation_started role=%s github=%s", draft.role_context, bool(draft.github_url))
    github = await fetch_github_summary(draft.github_url, client=http_client)
    bundle = draft.model_copy(update={"github": github})

    try:
        payload = await json_completion(build_evaluation_messages(bundle), client=ai_client)
    except EvaluationLLMError as exc:
        if exc.code != "llm_exception":
            raise
        return EvaluationOutcome(result=fallback_evaluation(), bundle=bundle, cached=False)

    result = coerce_evaluation(payload)
    if use_cache:
        store_verdict(cache_key, role_context=bundle.role_context, result_payload=result.model_dump(mode="json"))
    logger.info("evaluation_finished role=%s verdict=%s", bundle.role_context, result.verdict.value)
    return EvaluationOutcome(result=result, bundle=bundle, cached=False)
