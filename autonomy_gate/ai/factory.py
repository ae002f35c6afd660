import os

from autonomy_gate.ai.config import GROQ_BASE_URL, load_ai_config
from autonomy_gate.ai.types import AIClient

from autonomy_gate.ai.providers.openai_provider import OpenAIProvider


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return (
        lower.startswith("your_")
        or lower.startswith("replace_")
        or lower in {"changeme", "todo", "undefined", "placeholder_api_key"}
    )


def provider_api_key(provider: str) -> str | None:
    if provider == "groq":
        raw = os.getenv("GROQ_API_KEY") or ""
    else:
        raw = os.getenv("OPENAI_API_KEY") or ""
    key = raw.strip()
    if not key or _looks_like_placeholder(key):
        return None
    return key


def llm_configured() -> bool:
    cfg = load_ai_config()
    if not cfg.enabled or cfg.provider not in {"openai", "groq"}:
        return False
    return provider_api_key(cfg.provider) is not None


def get_ai_client() -> AIClient:
    cfg = load_ai_config()

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.model, api_key=provider_api_key("openai"))

    if cfg.provider == "groq":
        return OpenAIProvider(
            model=cfg.model,
            api_key=provider_api_key("groq"),
            base_url=os.getenv("GROQ_BASE_URL") or GROQ_BASE_URL,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
