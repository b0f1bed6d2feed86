from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env lives at the project root: app/core/config.py -> app/core -> app -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

# OpenRouter keys are sometimes pasted into OPENAI_API_KEY; they still have to go through OpenRouter
OPENROUTER_KEY_PREFIX = "sk-or-v1-"


class Settings(BaseSettings):
    openai_api_key: str = ""
    openrouter_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openai_model: str = "gpt-4o"
    openrouter_model: str = "openai/gpt-4o"
    # Sent as HTTP-Referer / X-Title when routing through OpenRouter
    openrouter_referer: str = "https://nirogya.app"
    app_title: str = "Nirogya"
    # Upper bound for a single completion call (seconds); no retries are made
    completion_timeout_seconds: float = 60.0
    database_url: str = "sqlite:///./nirogya.db"
    # Object storage root for uploaded reports, relative paths resolve from the working directory
    storage_dir: str = "data/uploads"
    upload_max_mb: int = 10
    # CORS: comma separated origins; "*" allows everything
    cors_origins: str = "*"
    # Per-IP requests per minute on /analyze, /chat and /files/upload
    rate_limit_per_minute: int = 60
    log_level: str = "INFO"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("openai_api_key", "openrouter_api_key", mode="before")
    @classmethod
    def strip_keys(cls, v: str | None) -> str:
        """Trailing spaces from copy/paste break the Authorization header."""
        return (v or "").strip()


settings = Settings()


class ProviderKind(str, Enum):
    OPENAI = "openai"
    OPENROUTER = "openrouter"


@dataclass(frozen=True)
class CompletionProvider:
    """Resolved upstream for chat completions. Built once from Settings."""

    kind: ProviderKind
    api_key: str = field(repr=False)
    base_url: str
    model: str
    referer: str = ""
    app_title: str = ""

    def request_headers(self, purpose: str) -> dict[str, str]:
        """Extra headers for one call; only the router needs them."""
        if self.kind is not ProviderKind.OPENROUTER:
            return {}
        return {
            "HTTP-Referer": self.referer,
            "X-Title": f"{self.app_title} {purpose}".strip(),
        }


def resolve_provider(cfg: Settings) -> CompletionProvider | None:
    """
    Picks the completion provider:
    - OPENROUTER_API_KEY set -> OpenRouter.
    - OPENAI_API_KEY holding an OpenRouter key (sk-or-v1-...) -> OpenRouter with that key.
    - OPENAI_API_KEY set -> OpenAI.
    - Neither -> None (callers raise MissingCredential).
    """
    router_key = (cfg.openrouter_api_key or "").strip()
    direct_key = (cfg.openai_api_key or "").strip()
    if not router_key and direct_key.startswith(OPENROUTER_KEY_PREFIX):
        router_key = direct_key
    if router_key:
        return CompletionProvider(
            kind=ProviderKind.OPENROUTER,
            api_key=router_key,
            base_url=cfg.openrouter_base_url,
            model=cfg.openrouter_model,
            referer=cfg.openrouter_referer,
            app_title=cfg.app_title,
        )
    if direct_key:
        return CompletionProvider(
            kind=ProviderKind.OPENAI,
            api_key=direct_key,
            base_url=cfg.openai_base_url,
            model=cfg.openai_model,
        )
    return None
