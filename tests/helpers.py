import json
from types import SimpleNamespace
from typing import Any, List

import httpx

from agent.llm_client import ModelClient
from models.schemas import ModelResponse, PromptPair, TripContext, WeatherForecast

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def status_response(status_code: int, url: str = ANTHROPIC_URL) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", url))


def timeout_request(url: str = ANTHROPIC_URL) -> httpx.Request:
    return httpx.Request("POST", url)


class FakeAnthropicClient:
    """Stands in for anthropic.Anthropic: `messages.create` replays scripted results."""

    def __init__(self, results: List[Any]):
        self._results = list(results)
        self.calls: list[dict] = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeOpenAIClient:
    """Stands in for openai.OpenAI: `chat.completions.create` replays scripted results."""

    def __init__(self, results: List[Any]):
        self._results = list(results)
        self.calls: list[dict] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class ScriptedModelClient(ModelClient):
    """ModelClient returning scripted texts (or raising scripted errors) per call."""

    provider = "scripted"
    model_id = "scripted-model"

    def __init__(self, results: List[Any]):
        self._results = list(results)
        self.prompts: list[PromptPair] = []
        self.calls: list[dict] = []

    async def invoke(self, prompt: PromptPair, max_tokens: int = 4096, temperature: float = 0) -> ModelResponse:
        self.prompts.append(prompt)
        self.calls.append({"max_tokens": max_tokens, "temperature": temperature})
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, ModelResponse):
            return result
        return ModelResponse(text=result, stop_reason="end_turn")


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def anthropic_message(text: str, stop_reason: str = "end_turn") -> dict:
    return {"content": [{"type": "text", "text": text}], "stop_reason": stop_reason}


def austin_trip() -> TripContext:
    return TripContext(
        destination="Austin, TX",
        start_date="2026-06-01",
        end_date="2026-06-03",
        activities=["hiking"],
        children=[{"age": 4}],
    )


def warm_forecast() -> WeatherForecast:
    return WeatherForecast(
        summary="Warm",
        forecast=[{"name": "Monday", "high": 95, "low": 70, "condition": "Sunny", "precipitation": 5}],
    )


SIX_CATEGORY_PACKING_LIST = {
    "categories": [
        {"name": "Clothing", "items": [{"name": "Sun hat", "quantity": "1", "reason": "95°F and sunny"}]},
        {"name": "Toiletries", "items": [{"name": "Sunscreen SPF 50", "quantity": "1", "reason": "Strong sun"}]},
        {"name": "Gear/Equipment", "items": [{"name": "Hiking shoes", "quantity": "1 pair", "reason": "Hiking"}]},
        {"name": "Documents", "items": [{"name": "ID", "quantity": "1", "reason": "Travel"}]},
        {"name": "Medications", "items": [{"name": "Children's ibuprofen", "quantity": "1", "reason": "Age 4"}]},
        {"name": "Snacks", "items": [{"name": "Water bottles", "quantity": "2-3", "reason": "Heat"}]},
    ]
}

VALID_TRIP_PLAN = {
    "overview": "A warm weekend in Austin.",
    "suggestedActivities": [
        {
            "id": "zilker-park",
            "name": "Zilker Park",
            "category": "parks",
            "description": "Open lawns and a playground.",
            "duration": "half day",
            "kidFriendly": True,
            "weatherDependent": True,
            "bestDays": ["Monday"],
            "reason": "Morning visit before the heat.",
        }
    ],
    "dailyItinerary": [
        {"day": "Day 1 (2026-06-01)", "activities": ["zilker-park"], "meals": "Tacos", "notes": "Bring water"}
    ],
    "tips": ["Plan outdoor time before noon."],
}


def dumps(payload: dict) -> str:
    return json.dumps(payload)
