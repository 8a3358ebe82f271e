from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from agent.errors import SchemaValidationError
from models.schemas import ArtifactType

Extractor = Callable[[str], Optional[str]]

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*([\s\S]*?)\s*```")

REQUIRED_ARRAYS: Dict[ArtifactType, Tuple[str, ...]] = {
    ArtifactType.PACKING_LIST: ("categories",),
    ArtifactType.TRIP_PLAN: ("suggestedActivities", "dailyItinerary", "tips"),
}


def raw_text(text: str) -> Optional[str]:
    stripped = text.strip()
    return stripped or None


def fenced_block(text: str) -> Optional[str]:
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    if not match:
        return None
    inner = match.group(1).strip()
    return inner or None


def brace_span(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


# Models wrap JSON in prose or markdown despite instructions, so try the
# cheapest interpretation first and fall back to looser ones.
EXTRACTORS: List[Extractor] = [raw_text, fenced_block, brace_span]


def extract_candidates(text: Optional[str]) -> List[str]:
    if not isinstance(text, str) or not text.strip():
        return []
    candidates: List[str] = []
    for extractor in EXTRACTORS:
        candidate = extractor(text)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def shape_error(artifact_type: ArtifactType, parsed: Any) -> Optional[str]:
    """
    Return why `parsed` misses the artifact's shape contract, or None if it fits.
    Only the required top-level arrays are checked; their contents are not.
    """
    if not isinstance(parsed, dict):
        return f"Expected a JSON object, got {type(parsed).__name__}"
    missing = [key for key in REQUIRED_ARRAYS[artifact_type] if not isinstance(parsed.get(key), list)]
    if missing:
        return f"Missing required {artifact_type.value} arrays: {', '.join(missing)}"
    return None


def parse_artifact(artifact_type: ArtifactType, candidates: List[str]) -> Dict[str, Any]:
    last_error: Optional[BaseException] = None
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        # Deeply nested output exhausts the decoder's recursion limit.
        except (ValueError, RecursionError) as exc:
            last_error = exc
            continue
        problem = shape_error(artifact_type, parsed)
        if problem is None:
            return parsed
        last_error = ValueError(problem)

    if last_error is None:
        raise SchemaValidationError("AI returned invalid format. Please try again.")
    raise SchemaValidationError(str(last_error), last_error=last_error)


def parse_response(artifact_type: ArtifactType, text: Optional[str]) -> Dict[str, Any]:
    return parse_artifact(artifact_type, extract_candidates(text))
