from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from agent.config import GenerationSettings
from agent.errors import (
    NonRetryableProviderError,
    SchemaValidationError,
    TerminalGenerationError,
    TransientProviderError,
)
from agent.llm_client import ModelClient, create_model_client
from agent.logger import log_event, new_run_id
from agent.parser import parse_response
from agent.prompts import REPAIR_INPUT_MAX_CHARS, build_prompt, build_repair_prompt
from agent.retry import is_retryable_error, request_with_retry
from models.schemas import (
    ArtifactType,
    AttemptRecord,
    GenerationOutcome,
    GenerationRequest,
    ModelInvocation,
    PromptPair,
    PromptVariant,
    Tier,
    TripContext,
    WeatherForecast,
)

logger = logging.getLogger(__name__)

# None marks the terminal failure state.
TRANSITIONS: Dict[Tier, Optional[Tier]] = {
    Tier.PRIMARY: Tier.COMPACT_RETRY,
    Tier.COMPACT_RETRY: Tier.REPAIR,
    Tier.REPAIR: None,
}

ARTIFACT_LABELS = {
    ArtifactType.PACKING_LIST: "packing-list",
    ArtifactType.TRIP_PLAN: "trip-plan",
}


class GenerationOrchestrator:
    """
    Turns a GenerationRequest into a shape-valid artifact by walking the tier
    state machine: primary prompt, compact prompt, then a JSON repair pass
    over the last raw output. Each tier's call is wrapped in the retry
    executor; only a failed shape check moves to the next tier.

    Instances hold read-only configuration and can serve concurrent runs.
    """

    def __init__(
        self,
        model_client: ModelClient,
        settings: Optional[GenerationSettings] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.model_client = model_client
        self.settings = settings or GenerationSettings()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: GenerationSettings, client: Optional[Any] = None) -> "GenerationOrchestrator":
        return cls(create_model_client(settings, client=client), settings)

    def _prompt_for(self, tier: Tier, request: GenerationRequest, attempts: List[AttemptRecord]) -> Optional[PromptPair]:
        if tier is Tier.PRIMARY:
            variant = PromptVariant.FULL
        elif tier is Tier.COMPACT_RETRY:
            variant = PromptVariant.COMPACT
        else:
            # Most recent non-empty output: compact tier first, then primary.
            source = next((a.response_text for a in reversed(attempts) if a.response_text), "")
            if not source:
                return None
            return build_repair_prompt(
                request.artifact_type,
                source,
                REPAIR_INPUT_MAX_CHARS[request.artifact_type],
            )
        return build_prompt(request.artifact_type, request.trip_context, request.weather_forecast, variant)

    async def _run_tier(
        self,
        tier: Tier,
        request: GenerationRequest,
        attempts: List[AttemptRecord],
    ) -> Tuple[AttemptRecord, Optional[Dict[str, Any]]]:
        record = AttemptRecord(tier=tier)
        prompt = self._prompt_for(tier, request, attempts)
        if prompt is None:
            record.parse_outcome = "skipped: no output to repair"
            return record, None

        settings = self.settings
        record.invocation = ModelInvocation(
            provider=self.model_client.provider,
            model_id=self.model_client.model_id,
            max_tokens=settings.max_tokens,
            prompt=prompt,
            temperature=0,
        )

        def count_call(_attempt: int) -> None:
            record.calls += 1

        max_retries = settings.repair_max_retries if tier is Tier.REPAIR else settings.max_retries
        try:
            response = await request_with_retry(
                lambda: self.model_client.invoke(prompt, settings.max_tokens, 0),
                max_retries,
                initial_delay=settings.retry_initial_delay,
                delay_cap=settings.retry_delay_cap,
                sleep=self._sleep,
                on_attempt=count_call,
            )
        except Exception as exc:
            # Provider failures end the run; only shape failures escalate.
            if not is_retryable_error(exc):
                raise NonRetryableProviderError(self.model_client.provider, tier, exc) from exc
            logger.warning("%s tier exhausted retries: %s", tier.value, exc)
            raise TransientProviderError(self.model_client.provider, tier, exc, record.calls) from exc

        record.stop_reason = response.stop_reason
        record.response_text = response.text
        try:
            artifact = parse_response(request.artifact_type, response.text)
        except SchemaValidationError as exc:
            record.parse_outcome = f"invalid: {exc}"
            return record, None
        record.parse_outcome = "ok"
        return record, artifact

    async def run(self, request: GenerationRequest) -> GenerationOutcome:
        run_id = new_run_id()
        label = ARTIFACT_LABELS[request.artifact_type]
        attempts: List[AttemptRecord] = []
        tier: Optional[Tier] = Tier.PRIMARY

        while tier is not None:
            record, artifact = await self._run_tier(tier, request, attempts)
            attempts.append(record)
            log_event(
                run_id,
                "generation_attempt",
                {
                    "artifact": request.artifact_type.value,
                    "tier": tier.value,
                    "outcome": record.parse_outcome,
                    "stop_reason": record.stop_reason,
                    "calls": record.calls,
                },
            )
            if artifact is not None:
                log_event(
                    run_id,
                    "generation_succeeded",
                    {"artifact": request.artifact_type.value, "tier": tier.value},
                )
                return GenerationOutcome(request.artifact_type, artifact, attempts)

            next_tier = TRANSITIONS[tier]
            if next_tier is not None and self.settings.diagnostics_enabled:
                logger.warning(
                    "%s parse failed on %s tier; escalating to %s: %s",
                    label,
                    tier.value,
                    next_tier.value,
                    record.parse_outcome,
                )
            tier = next_tier

        error = TerminalGenerationError(label, attempts)
        if self.settings.diagnostics_enabled:
            logger.error("%s generation failed after retry and repair; stop reasons: %s", label, error.stop_reasons)
            log_event(
                run_id,
                "generation_failed",
                {
                    "artifact": request.artifact_type.value,
                    "stop_reasons": error.stop_reasons,
                    "outcomes": [a.parse_outcome for a in attempts],
                },
            )
        raise error

    async def generate(self, request: GenerationRequest) -> Dict[str, Any]:
        outcome = await self.run(request)
        return outcome.artifact

    async def generate_trip_plan(self, trip: TripContext, forecast: WeatherForecast) -> Dict[str, Any]:
        return await self.generate(
            GenerationRequest(
                artifact_type=ArtifactType.TRIP_PLAN,
                trip_context=trip,
                weather_forecast=forecast,
            )
        )

    async def generate_packing_list(self, trip: TripContext, forecast: WeatherForecast) -> Dict[str, Any]:
        return await self.generate(
            GenerationRequest(
                artifact_type=ArtifactType.PACKING_LIST,
                trip_context=trip,
                weather_forecast=forecast,
            )
        )
