from .job_title import extract_recent_job_title, find_section_start
from .profile_links import DetectedProfiles, detect_profiles, extract_github_username, normalize_profile_url
from .role_inference import (
    DEFAULT_FALLBACK_ROLE,
    RoleCatalog,
    infer_target_role,
    score_roles,
)

__all__ = [
    "DetectedProfiles",
    "detect_profiles",
    "extract_github_username",
    "normalize_profile_url",
    "extract_recent_job_title",
    "find_section_start",
    "DEFAULT_FALLBACK_ROLE",
    "RoleCatalog",
    "infer_target_role",
    "score_roles",
]
