import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from autonomy_gate.features.role_inference import RoleCatalog  # noqa: E402
from autonomy_gate.schemas.candidate import GitHubSummary  # noqa: E402
from autonomy_gate.services.evidence import analyze_candidate, build_evidence_bundle  # noqa: E402
from autonomy_gate.services.prompts import TRUNCATION_MARKER, build_evaluation_messages, truncate_resume  # noqa: E402

RESUME = (
    "Jane Doe\n"
    "github.com/janedoe | linkedin.com/in/jane-doe\n"
    "Professional Experience\n"
    "Data Scientist - Modelworks\n"
    "Built ML pipelines in Python and shipped NLP analytics.\n"
)


class AnalyzeCandidateTests(unittest.TestCase):
    def test_signals_from_reference_catalog(self):
        signals = analyze_candidate(RESUME, [])
        self.assertEqual(signals.github, "https://github.com/janedoe")
        self.assertEqual(signals.linkedin, "https://linkedin.com/in/jane-doe")
        self.assertEqual(signals.inferred_title, "Data Scientist")
        self.assertEqual(signals.role_context, "Data Scientist")

    def test_injected_catalog_is_used(self):
        catalog = RoleCatalog.from_mapping({"Researcher": ["nlp", "python"]})
        signals = analyze_candidate(RESUME, [], catalog)
        self.assertEqual(signals.role_context, "Researcher")

    def test_empty_document(self):
        signals = analyze_candidate("", [])
        self.assertIsNone(signals.github)
        self.assertIsNone(signals.inferred_title)
        self.assertEqual(signals.role_context, "General Autonomy Check")


class EvidenceBundleTests(unittest.TestCase):
    def setUp(self):
        self.signals = analyze_candidate(RESUME, [])

    def test_defaults_come_from_inference(self):
        bundle = build_evidence_bundle(RESUME, self.signals)
        self.assertEqual(bundle.role_context, "Data Scientist")
        self.assertEqual(bundle.inferred_role, "Data Scientist")
        self.assertFalse(bundle.role_overridden)
        self.assertEqual(bundle.github_url, "https://github.com/janedoe")

    def test_operator_overrides_win(self):
        bundle = build_evidence_bundle(
            RESUME,
            self.signals,
            role_context="Founding Engineer",
            github_url="github.com/other.",
        )
        self.assertEqual(bundle.role_context, "Founding Engineer")
        self.assertEqual(bundle.inferred_role, "Data Scientist")
        self.assertTrue(bundle.role_overridden)
        self.assertEqual(bundle.github_url, "https://github.com/other")

    def test_blank_override_is_ignored(self):
        bundle = build_evidence_bundle(RESUME, self.signals, role_context="   ", linkedin_url="")
        self.assertEqual(bundle.role_context, "Data Scientist")
        self.assertEqual(bundle.linkedin_url, "https://linkedin.com/in/jane-doe")


class PromptTests(unittest.TestCase):
    def test_resume_truncation(self):
        self.assertEqual(truncate_resume("abcdef", max_chars=3), "abc" + TRUNCATION_MARKER)
        self.assertEqual(truncate_resume("abc", max_chars=3), "abc")

    def test_messages_carry_bundle_evidence(self):
        bundle = build_evidence_bundle(
            RESUME,
            analyze_candidate(RESUME, []),
            github=GitHubSummary(repos=["nlp-kit: tools (3*)"], languages=["Python"], total_stars=3, recent_activity="Activity: PushEvent."),
        )
        system, user = build_evaluation_messages(bundle)
        self.assertEqual(system.role, "system")
        self.assertIn("torvalds/linux", system.content)
        self.assertIn("EVALUATE FOR: Data Scientist", user.content)
        self.assertIn("nlp-kit: tools (3*)", user.content)
        self.assertIn("Activity: PushEvent.", user.content)
        self.assertIn("LINKEDIN_REF: https://linkedin.com/in/jane-doe", user.content)

    def test_missing_github_is_marked_none(self):
        bundle = build_evidence_bundle(RESUME, analyze_candidate(RESUME, []))
        _system, user = build_evaluation_messages(bundle)
        self.assertIn("GITHUB_REPOS: NONE", user.content)


if __name__ == "__main__":
    unittest.main()
