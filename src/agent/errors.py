from __future__ import annotations

from typing import Dict, List, Optional

from models.schemas import AttemptRecord, Tier


class GenerationError(Exception):
    """Base class for structured-generation failures."""


class ProviderConfigurationError(GenerationError):
    """Selected provider is unknown or has no credential configured."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class NonRetryableProviderError(GenerationError):
    """Provider rejected the call for a reason a retry or a new prompt cannot fix."""

    def __init__(self, provider: str, tier: Tier, cause: BaseException):
        self.provider = provider
        self.tier = tier
        super().__init__(f"[{provider}] {tier.value} call failed: {type(cause).__name__}")


class TransientProviderError(GenerationError):
    """Provider stayed rate limited, unavailable or timed out through the retry budget."""

    def __init__(self, provider: str, tier: Tier, cause: BaseException, calls: int):
        self.provider = provider
        self.tier = tier
        self.calls = calls
        super().__init__(
            f"[{provider}] {tier.value} call failed after {calls} attempt(s): {type(cause).__name__}"
        )


class SchemaValidationError(GenerationError):
    """Model output could not be parsed into the artifact's required shape."""

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        self.last_error = last_error
        super().__init__(message)


class TerminalGenerationError(GenerationError):
    """All tiers failed. The message is safe to show; the attempts are for logs only."""

    def __init__(self, artifact_label: str, attempts: List[AttemptRecord]):
        self.attempts = list(attempts)
        super().__init__(
            f"AI returned invalid {artifact_label} JSON after retry and repair. Please try again."
        )

    @property
    def stop_reasons(self) -> Dict[str, str]:
        return {record.tier.value: record.stop_reason or "unknown" for record in self.attempts}
