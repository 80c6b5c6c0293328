"""Process-wide configuration: fallback credentials and model defaults."""

import os
from dataclasses import dataclass
from typing import Optional

from siemgen.models import Provider


DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_GROQ_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"

# Used when no fallback key is configured; the backend rejects it at call time.
PLACEHOLDER_API_KEY = "default_key"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


@dataclass(frozen=True)
class Settings:
    """Generator configuration."""
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    groq_model: str = DEFAULT_GROQ_MODEL
    groq_base_url: str = GROQ_BASE_URL
    max_tokens: int = 2048
    timeout: float = 120.0

    def __repr__(self) -> str:
        configured = [p.value for p in Provider if self.api_key_for(p)]
        return f"Settings(configured_keys={configured}, timeout={self.timeout})"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment. Missing keys are not an error."""
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            anthropic_model=os.getenv("SIEMGEN_ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL),
            openai_model=os.getenv("SIEMGEN_OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            groq_model=os.getenv("SIEMGEN_GROQ_MODEL", DEFAULT_GROQ_MODEL),
            groq_base_url=os.getenv("GROQ_BASE_URL", GROQ_BASE_URL),
            max_tokens=_env_int("SIEMGEN_MAX_TOKENS", 2048),
            timeout=_env_float("SIEMGEN_TIMEOUT", 120.0),
        )

    def api_key_for(self, provider: Provider) -> Optional[str]:
        """Fallback key for a provider, if one is configured."""
        return {
            Provider.ANTHROPIC: self.anthropic_api_key,
            Provider.OPENAI: self.openai_api_key,
            Provider.GROQ: self.groq_api_key,
        }.get(Provider(provider))

    def model_for(self, provider: Provider) -> Optional[str]:
        return {
            Provider.ANTHROPIC: self.anthropic_model,
            Provider.OPENAI: self.openai_model,
            Provider.GROQ: self.groq_model,
        }.get(Provider(provider))
