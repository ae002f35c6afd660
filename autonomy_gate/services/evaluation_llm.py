from __future__ import annotations

import json
import logging
import math
import time
from typing import Any, Sequence

from autonomy_gate.ai.factory import get_ai_client, llm_configured
from autonomy_gate.ai.types import AIClient, ChatMessage
from autonomy_gate.core.config.autonomy import get_autonomy_value
from autonomy_gate.schemas.candidate import AutonomySignals, EvaluationResult, Verdict

logger = logging.getLogger(__name__)

DEFAULT_PASS_THRESHOLD = 0.75
DEFAULT_CONDITIONAL_THRESHOLD = 0.45


class EvaluationLLMError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


async def json_completion(
    messages: Sequence[ChatMessage],
    *,
    client: AIClient | None = None,
    temperature: float = 0.1,
) -> dict[str, Any]:
    """Run one JSON-mode completion and return the decoded object.

    Raises EvaluationLLMError with code ``llm_disabled`` when no provider is
    configured, ``llm_invalid`` when the model returns something other than a
    JSON object, and ``llm_exception`` when the provider call itself fails.
    """
    if client is None:
        if not llm_configured():
            raise EvaluationLLMError(
                "LLM evaluation is not configured. Set AI_PROVIDER and its API key.",
                code="llm_disabled",
            )
        client = get_ai_client()

    started = time.perf_counter()
    model = getattr(client, "model", "unknown")
    try:
        content = await client.complete_json(messages, temperature=temperature)
    except Exception as exc:  # noqa: BLE001
        logger.warning("evaluation_llm_failed model=%s: %s", model, exc)
        raise EvaluationLLMError(f"LLM call failed: {exc}", code="llm_exception") from exc

    latency_ms = int((time.perf_counter() - started) * 1000)
    if not content or not content.strip():
        logger.warning("evaluation_llm_empty model=%s latency_ms=%s", model, latency_ms)
        raise EvaluationLLMError("AI engine returned an empty response. Please try again.", code="llm_invalid")

    try:
        parsed = json.loads(content)
    except ValueError as exc:
        logger.warning("evaluation_llm_invalid_json model=%s content_len=%s", model, len(content))
        raise EvaluationLLMError(
            "AI engine produced an invalid data format. Please try again.", code="llm_invalid"
        ) from exc

    if not isinstance(parsed, dict):
        raise EvaluationLLMError("AI engine produced an invalid data format. Please try again.", code="llm_invalid")

    logger.info("evaluation_llm_success model=%s latency_ms=%s", model, latency_ms)
    return parsed


def _unit_score(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    # Models occasionally answer on a 0-100 scale despite the instructions.
    if 1.0 < number <= 100.0:
        number = number / 100.0
    return max(0.0, min(1.0, number))


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def verdict_for_score(score: float) -> Verdict:
    pass_threshold = float(get_autonomy_value("verdict.pass_threshold", DEFAULT_PASS_THRESHOLD))
    conditional_threshold = float(
        get_autonomy_value("verdict.conditional_threshold", DEFAULT_CONDITIONAL_THRESHOLD)
    )
    if score >= pass_threshold:
        return Verdict.PASS
    if score >= conditional_threshold:
        return Verdict.CONDITIONAL
    return Verdict.FAIL


def coerce_evaluation(payload: dict[str, Any]) -> EvaluationResult:
    score = _unit_score(payload.get("execution_score"))

    raw_verdict = str(payload.get("verdict") or "").strip().upper()
    try:
        verdict = Verdict(raw_verdict)
    except ValueError:
        verdict = verdict_for_score(score)

    raw_signals = payload.get("signals")
    if not isinstance(raw_signals, dict):
        raw_signals = {}

    raw_fail_modes = payload.get("fail_modes")
    if isinstance(raw_fail_modes, str):
        raw_fail_modes = [raw_fail_modes]
    if not isinstance(raw_fail_modes, list):
        raw_fail_modes = []

    return EvaluationResult(
        execution_score=score,
        verdict=verdict,
        fail_modes=[str(mode).strip() for mode in raw_fail_modes if str(mode).strip()],
        forced_decision=_as_bool(payload.get("forced_decision", False)),
        calibration_notes=str(payload.get("calibration_notes") or ""),
        rationale=str(payload.get("rationale") or ""),
        signals=AutonomySignals(
            ownership=_unit_score(raw_signals.get("ownership")),
            failure_recovery=_unit_score(raw_signals.get("failure_recovery")),
            complexity=_unit_score(raw_signals.get("complexity")),
            decisions=_unit_score(raw_signals.get("decisions")),
        ),
    )


def fallback_evaluation() -> EvaluationResult:
    return EvaluationResult(
        execution_score=0.0,
        verdict=Verdict.FAIL,
        fail_modes=["ANALYSIS_FAILED", "SYSTEM_TIMEOUT"],
        forced_decision=True,
        calibration_notes="Engine failed to produce a deterministic verdict in time.",
        rationale="Critical failure in evaluation logic. Check inputs for corruption.",
        signals=AutonomySignals(),
    )
