from __future__ import annotations

import os
from dataclasses import dataclass

ANTHROPIC = "anthropic"
DEEPSEEK = "deepseek"
PROVIDERS = (ANTHROPIC, DEEPSEEK)


@dataclass(frozen=True)
class GenerationSettings:
    """
    Read-only configuration shared by every generation run. Build it once and
    hand it to the orchestrator; nothing downstream reads the environment.
    """

    provider: str = ANTHROPIC
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-haiku-4-5-20251001"
    deepseek_api_key: str = ""
    deepseek_model: str = "deepseek-chat"
    deepseek_base_url: str = "https://api.deepseek.com"
    max_tokens: int = 4096
    timeout_seconds: float = 60.0
    max_retries: int = 1
    repair_max_retries: int = 0
    retry_initial_delay: float = 1.0
    retry_delay_cap: float = 10.0
    environment: str = "development"

    @property
    def diagnostics_enabled(self) -> bool:
        return self.environment != "production"

    @property
    def model_id(self) -> str:
        return self.deepseek_model if self.provider == DEEPSEEK else self.anthropic_model

    @classmethod
    def from_env(cls) -> "GenerationSettings":
        return cls(
            provider=os.getenv("AI_PROVIDER", ANTHROPIC).strip().lower() or ANTHROPIC,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", cls.anthropic_model),
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY", ""),
            deepseek_model=os.getenv("DEEPSEEK_MODEL", cls.deepseek_model),
            deepseek_base_url=os.getenv("DEEPSEEK_BASE_URL", cls.deepseek_base_url),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", cls.max_tokens)),
            timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", cls.timeout_seconds)),
            max_retries=int(os.getenv("LLM_MAX_RETRIES", cls.max_retries)),
            repair_max_retries=int(os.getenv("LLM_REPAIR_MAX_RETRIES", cls.repair_max_retries)),
            retry_initial_delay=float(os.getenv("LLM_RETRY_INITIAL_DELAY", cls.retry_initial_delay)),
            retry_delay_cap=float(os.getenv("LLM_RETRY_DELAY_CAP", cls.retry_delay_cap)),
            environment=os.getenv("APP_ENV", cls.environment).strip().lower(),
        )
