from __future__ import annotations

import json
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


LOG_PATH = Path(os.getenv("AGENT_LOG_PATH", "agent.log"))


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


def log_event(run_id: str, event: str, data: Dict[str, Any]) -> None:
    """
    Append one generation event to the JSON-line log. The orchestrator writes
    `generation_attempt` per tier (tier, outcome, stop reason, call count),
    `generation_succeeded` with the winning tier, and outside production
    `generation_failed` with every tier's stop reason. Raw model text and
    trip details are never logged.
    """
    try:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "run_id": run_id,
            "event": event,
            "data": data,
        }
        LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        with LOG_PATH.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    except Exception:
        # A broken log file must not fail a generation run.
        return
