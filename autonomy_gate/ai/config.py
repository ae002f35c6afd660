import os
from dataclasses import dataclass

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-8b-instant",
}

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    enabled: bool


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()
    model = (os.getenv("AI_MODEL") or _DEFAULT_MODELS.get(provider, "gpt-4o-mini")).strip()
    return AIConfig(provider=provider, model=model, enabled=_env_bool("LLM_ENABLED", True))
