# src/api/main.py
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent.config import GenerationSettings
from agent.errors import GenerationError, ProviderConfigurationError, TerminalGenerationError
from agent.orchestrator import GenerationOrchestrator
from models.schemas import TripRequest

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_ERROR_MESSAGE = "API configuration error. Please contact support."

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

settings = GenerationSettings.from_env()
_orchestrator: Optional[GenerationOrchestrator] = None


def get_orchestrator() -> GenerationOrchestrator:
    """
    Build the orchestrator on first use so the app can start (and report
    health) before credentials are configured.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = GenerationOrchestrator.from_settings(settings)
    return _orchestrator


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "provider": settings.provider}


@app.post("/api/trip-plan")
async def trip_plan(req: TripRequest):
    try:
        plan = await get_orchestrator().generate_trip_plan(req.trip_context(), req.weather_forecast)
    except ProviderConfigurationError as exc:
        logger.error("Trip plan unavailable: %s", exc)
        return _error(CONFIG_ERROR_MESSAGE)
    except TerminalGenerationError:
        return _error("Failed to generate trip plan. Please try again.")
    except GenerationError as exc:
        logger.error("Trip plan generation failed: %s", exc)
        return _error("Failed to generate trip plan. Please try again.")
    return {"tripPlan": plan}


@app.post("/api/generate")
async def packing_list(req: TripRequest):
    try:
        result = await get_orchestrator().generate_packing_list(req.trip_context(), req.weather_forecast)
    except ProviderConfigurationError as exc:
        logger.error("Packing list unavailable: %s", exc)
        return _error(CONFIG_ERROR_MESSAGE)
    except TerminalGenerationError:
        return _error("Failed to generate packing list. Please try again.")
    except GenerationError as exc:
        logger.error("Packing list generation failed: %s", exc)
        return _error("Failed to generate packing list. Please try again.")
    return {"packingList": result}
