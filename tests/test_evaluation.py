import json
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import httpx  # noqa: E402

from autonomy_gate.ai.types import ChatMessage  # noqa: E402
from autonomy_gate.core.verdict_cache import clear_verdict_cache  # noqa: E402
from autonomy_gate.schemas.candidate import EvaluateCandidateRequest, Verdict  # noqa: E402
from autonomy_gate.services.evaluation_llm import (  # noqa: E402
    EvaluationLLMError,
    coerce_evaluation,
    fallback_evaluation,
    json_completion,
    verdict_for_score,
)
from autonomy_gate.services.evaluation_service import evaluate_candidate  # noqa: E402

RESUME = (
    "Alex Rivera\n"
    "https://github.com/arivera\n"
    "Work Experience\n"
    "Backend Engineer - Streamline\n"
    "Owned the payments backend end to end; rebuilt the cloud deployment after an outage.\n"
)

MODEL_VERDICT = {
    "execution_score": 0.81,
    "verdict": "PASS",
    "fail_modes": [],
    "forced_decision": False,
    "calibration_notes": "Comparable to strong backend owners.",
    "rationale": "Owned payments backend end to end.",
    "signals": {"ownership": 0.9, "failure_recovery": 0.8, "complexity": 0.7, "decisions": 0.75},
}


class FakeAIClient:
    model = "fake-model"

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def complete_json(self, messages, *, temperature=0.1):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.content


def _github_client():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/repos"):
            return httpx.Response(
                200,
                json=[{"name": "ledger", "description": "payments", "stargazers_count": 12, "language": "Go"}],
            )
        return httpx.Response(200, json=[{"type": "PushEvent"}])

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class CoerceEvaluationTests(unittest.TestCase):
    def test_valid_payload_round_trips(self):
        result = coerce_evaluation(MODEL_VERDICT)
        self.assertEqual(result.verdict, Verdict.PASS)
        self.assertAlmostEqual(result.execution_score, 0.81)
        self.assertAlmostEqual(result.signals.ownership, 0.9)

    def test_percent_scale_is_rescaled_and_clamped(self):
        result = coerce_evaluation(
            {"execution_score": 62, "verdict": "conditional", "signals": {"ownership": 150, "complexity": -3}}
        )
        self.assertAlmostEqual(result.execution_score, 0.62)
        self.assertEqual(result.verdict, Verdict.CONDITIONAL)
        self.assertEqual(result.signals.ownership, 1.0)
        self.assertEqual(result.signals.complexity, 0.0)

    def test_unknown_verdict_is_derived_from_score(self):
        self.assertEqual(coerce_evaluation({"execution_score": 0.9, "verdict": "MAYBE"}).verdict, Verdict.PASS)
        self.assertEqual(coerce_evaluation({"execution_score": 0.5}).verdict, Verdict.CONDITIONAL)
        self.assertEqual(coerce_evaluation({"execution_score": "n/a"}).verdict, Verdict.FAIL)

    def test_thresholds(self):
        self.assertEqual(verdict_for_score(0.75), Verdict.PASS)
        self.assertEqual(verdict_for_score(0.45), Verdict.CONDITIONAL)
        self.assertEqual(verdict_for_score(0.44), Verdict.FAIL)

    def test_fail_modes_and_flags_are_normalized(self):
        result = coerce_evaluation({"execution_score": 0.1, "fail_modes": "NO_OWNERSHIP", "forced_decision": "true"})
        self.assertEqual(result.fail_modes, ["NO_OWNERSHIP"])
        self.assertTrue(result.forced_decision)

    def test_fallback_shape(self):
        result = fallback_evaluation()
        self.assertEqual(result.verdict, Verdict.FAIL)
        self.assertEqual(result.fail_modes, ["ANALYSIS_FAILED", "SYSTEM_TIMEOUT"])
        self.assertTrue(result.forced_decision)


class JsonCompletionTests(unittest.IsolatedAsyncioTestCase):
    messages = [ChatMessage(role="user", content="hi")]

    async def test_decodes_object(self):
        payload = await json_completion(self.messages, client=FakeAIClient(content='{"verdict": "FAIL"}'))
        self.assertEqual(payload, {"verdict": "FAIL"})

    async def test_invalid_json_raises_llm_invalid(self):
        for content in ("", "not json", "[1, 2]"):
            with self.assertRaises(EvaluationLLMError) as ctx:
                await json_completion(self.messages, client=FakeAIClient(content=content))
            self.assertEqual(ctx.exception.code, "llm_invalid")

    async def test_provider_error_raises_llm_exception(self):
        with self.assertRaises(EvaluationLLMError) as ctx:
            await json_completion(self.messages, client=FakeAIClient(error=TimeoutError("slow")))
        self.assertEqual(ctx.exception.code, "llm_exception")

    async def test_unconfigured_provider_raises_llm_disabled(self):
        with patch("autonomy_gate.services.evaluation_llm.llm_configured", return_value=False):
            with self.assertRaises(EvaluationLLMError) as ctx:
                await json_completion(self.messages)
        self.assertEqual(ctx.exception.code, "llm_disabled")


class EvaluateCandidateTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        clear_verdict_cache()

    async def test_full_flow_and_cache_hit(self):
        client = FakeAIClient(content=json.dumps(MODEL_VERDICT))
        request = EvaluateCandidateRequest(resume_text=RESUME)

        async with _github_client() as http_client:
            outcome = await evaluate_candidate(request, ai_client=client, http_client=http_client)

        self.assertFalse(outcome.cached)
        self.assertEqual(outcome.result.verdict, Verdict.PASS)
        self.assertEqual(outcome.bundle.github_url, "https://github.com/arivera")
        self.assertEqual(outcome.bundle.inferred_title, "Backend Engineer")
        self.assertEqual(outcome.bundle.role_context, "Software Engineer")
        self.assertEqual(outcome.bundle.github.total_stars, 12)
        user_prompt = client.calls[0][1].content
        self.assertIn("EVALUATE FOR: Software Engineer", user_prompt)
        self.assertIn("ledger: payments (12*)", user_prompt)

        again = await evaluate_candidate(request, ai_client=client)
        self.assertTrue(again.cached)
        self.assertEqual(again.result, outcome.result)
        self.assertEqual(len(client.calls), 1)

    async def test_role_override_reaches_prompt(self):
        client = FakeAIClient(content=json.dumps(MODEL_VERDICT))
        request = EvaluateCandidateRequest(resume_text=RESUME, role_context="Founding Engineer", use_cache=False)

        async with _github_client() as http_client:
            outcome = await evaluate_candidate(request, ai_client=client, http_client=http_client)

        self.assertTrue(outcome.bundle.role_overridden)
        self.assertIn("EVALUATE FOR: Founding Engineer", client.calls[0][1].content)
        self.assertEqual(outcome.evidence_summary().inferred_role, "Software Engineer")

    async def test_provider_failure_returns_uncached_fallback(self):
        failing = FakeAIClient(error=RuntimeError("connection reset"))
        request = EvaluateCandidateRequest(resume_text=RESUME)

        async with _github_client() as http_client:
            outcome = await evaluate_candidate(request, ai_client=failing, http_client=http_client)
        self.assertEqual(outcome.result, fallback_evaluation())

        healthy = FakeAIClient(content=json.dumps(MODEL_VERDICT))
        async with _github_client() as http_client:
            retry = await evaluate_candidate(request, ai_client=healthy, http_client=http_client)
        self.assertFalse(retry.cached)
        self.assertEqual(retry.result.verdict, Verdict.PASS)

    async def test_invalid_model_output_propagates(self):
        request = EvaluateCandidateRequest(resume_text=RESUME, use_cache=False)
        async with _github_client() as http_client:
            with self.assertRaises(EvaluationLLMError) as ctx:
                await evaluate_candidate(request, ai_client=FakeAIClient(content="oops"), http_client=http_client)
        self.assertEqual(ctx.exception.code, "llm_invalid")


if __name__ == "__main__":
    unittest.main()
