import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


@dataclass(frozen=True)
class LLMConfig:
    enabled: bool = True
    api_key: str | None = None
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    timeout_s: float = 30.0
    max_retries: int = 2
    temperature: float = 0.2

    @property
    def is_configured(self) -> bool:
        if not self.enabled:
            return False
        key = (self.api_key or "").strip()
        return bool(key) and not _looks_like_placeholder(key)


def load_llm_config() -> LLMConfig:
    return LLMConfig(
        enabled=_env_bool("LLM_ENABLED", True),
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip() or None,
        base_url=(os.getenv("OPENAI_BASE_URL") or "").strip() or None,
        model=(os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip(),
        timeout_s=float(os.getenv("LLM_TIMEOUT_S", "30")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
    )
