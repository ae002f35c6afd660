import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from autonomy_gate.features.profile_links import (  # noqa: E402
    DetectedProfiles,
    detect_profiles,
    extract_github_username,
    normalize_profile_url,
)


class DetectProfilesTests(unittest.TestCase):
    def test_hyperlink_match_wins_over_text_match(self):
        text = "Code lives at github.com/text-user and more."
        profiles = detect_profiles(text, ["https://github.com/link-user"])
        self.assertEqual(profiles.github, "https://github.com/link-user")

    def test_first_matching_hyperlink_wins(self):
        links = ["mailto:jane@example.com", "https://github.com/first", "https://github.com/second"]
        self.assertEqual(detect_profiles("", links).github, "https://github.com/first")

    def test_falls_back_to_first_text_match(self):
        text = "See github.com/alice/project and github.com/bob"
        self.assertEqual(detect_profiles(text, []).github, "https://github.com/alice/project")

    def test_hyperlink_scheme_and_trailing_period_normalized(self):
        profiles = detect_profiles("", ["github.com/alice."])
        self.assertEqual(profiles.github, "https://github.com/alice")

    def test_linkedin_detected_in_text(self):
        text = "Jane Doe | www.LinkedIn.com/in/jane-doe_%C3%A9, Berlin"
        profiles = detect_profiles(text)
        self.assertEqual(profiles.linkedin, "https://www.LinkedIn.com/in/jane-doe_%C3%A9")

    def test_linkedin_keeps_trailing_slash(self):
        profiles = detect_profiles("https://linkedin.com/in/jane/ is my profile")
        self.assertEqual(profiles.linkedin, "https://linkedin.com/in/jane/")

    def test_platforms_are_detected_independently(self):
        profiles = detect_profiles(
            "linkedin.com/in/someone",
            ["https://github.com/coder"],
        )
        self.assertEqual(profiles.github, "https://github.com/coder")
        self.assertEqual(profiles.linkedin, "https://linkedin.com/in/someone")

    def test_no_match_is_absent_not_error(self):
        self.assertEqual(detect_profiles("no links here", []), DetectedProfiles())

    def test_tolerates_empty_and_malformed_input(self):
        profiles = detect_profiles("", ["", "::::", None, 42, "http://"])
        self.assertIsNone(profiles.github)
        self.assertIsNone(profiles.linkedin)

    def test_existing_http_scheme_is_kept(self):
        self.assertEqual(normalize_profile_url("http://github.com/old;"), "http://github.com/old")
        self.assertEqual(normalize_profile_url("HTTPS://github.com/caps"), "HTTPS://github.com/caps")

    def test_only_one_trailing_character_is_stripped(self):
        self.assertEqual(normalize_profile_url("github.com/alice.,"), "https://github.com/alice.")


class GithubUsernameTests(unittest.TestCase):
    def test_extracts_owner_segment(self):
        self.assertEqual(extract_github_username("https://github.com/octocat/hello-world"), "octocat")

    def test_returns_none_for_non_github(self):
        self.assertIsNone(extract_github_username("https://gitlab.com/octocat"))
        self.assertIsNone(extract_github_username(None))


if __name__ == "__main__":
    unittest.main()
