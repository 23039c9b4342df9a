"""
FastAPI server — trigger cycle results calculation and read calculated results.

POST /calculate-recognition-results runs the batch job synchronously and returns
200 on full success, 400 on any failure (409 when the cycle is locked).
OPTIONS preflight is answered by permissive CORS middleware.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from recognition_engine.core.exceptions import CycleLockedError, RecognitionEngineError
from recognition_engine.database import init_db, session_scope
from recognition_engine.database import repositories
from recognition_engine.recognition_logging import get_logger
from recognition_engine.results_worker import calculate_cycle_results

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class CalculateResultsRequest(BaseModel):
    """POST /calculate-recognition-results body."""

    cycle_id: str | None = Field(None, max_length=64, description="Award cycle id")


class ThemeOutcomeModel(BaseModel):
    theme_id: str
    theme_name: str
    success: bool
    nominee_count: int = 0
    theme_results_id: str | None = None
    error: str | None = None


class CalculateResultsResponse(BaseModel):
    """Full-success response; failures are returned as {"error": ...} with status 400."""

    success: bool = Field(..., description="True when every theme was published and the cycle announced")
    cycle_id: str
    status: str = Field(..., description="Cycle status after the run")
    themes: list[ThemeOutcomeModel] = Field(default_factory=list)


class PublishThemeResultResponse(BaseModel):
    id: str
    theme_id: str
    cycle_id: str
    published_at: int


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    init_db()
    logger.info("api_started")
    yield
    logger.info("api_stopped")


app = FastAPI(
    title="Recognition Results Engine API",
    description="Calculates weighted rankings and fairness reports for recognition cycles.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported like every other failure: 400 {"error": ...}."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error_response(400, message)


@app.post("/calculate-recognition-results", response_model=CalculateResultsResponse)
def calculate_recognition_results(body: CalculateResultsRequest) -> Any:
    """
    Calculate, rank and publish all theme results of a cycle.

    Returns 400 with {"error": ...} on missing cycle_id, unknown cycle, no themes,
    no eligible nominations, or write failure (plus per-theme outcomes when known).
    """
    logger.info("calculate_results_called", cycle_id=body.cycle_id)
    try:
        result = calculate_cycle_results(body.cycle_id)
    except CycleLockedError as e:
        return _error_response(409, e.message)
    except RecognitionEngineError as e:
        logger.warning("calculate_results_rejected", cycle_id=body.cycle_id, code=e.code, error=e.message)
        return _error_response(400, e.message)
    except Exception as e:
        logger.exception("calculate_results_failed", cycle_id=body.cycle_id, error=str(e))
        return _error_response(400, str(e) or e.__class__.__name__)

    if not result.success:
        return _error_response(
            400,
            result.error or "Calculation failed",
            themes=[t.to_dict() for t in result.themes],
        )
    return result.to_dict()


@app.get("/cycles/{cycle_id}/results")
def get_cycle_results(cycle_id: str) -> list[dict[str, Any]]:
    """Theme results of a cycle with nominee rankings ordered by rank."""
    with session_scope() as session:
        results = repositories.list_cycle_results(session, cycle_id.strip())
    if not results:
        raise HTTPException(status_code=404, detail=f"No results for cycle {cycle_id}")
    return results


@app.post("/theme-results/{theme_result_id}/publish", response_model=PublishThemeResultResponse)
def publish_theme_result(theme_result_id: str) -> PublishThemeResultResponse:
    """Mark a calculated theme result as published (sets published_at)."""
    with session_scope() as session:
        row = repositories.mark_theme_result_published(session, theme_result_id.strip())
    if row is None:
        raise HTTPException(status_code=404, detail="Theme result not found")
    logger.info("theme_result_published", theme_result_id=row["id"], cycle_id=row["cycle_id"])
    return PublishThemeResultResponse(
        id=row["id"],
        theme_id=row["theme_id"],
        cycle_id=row["cycle_id"],
        published_at=row["published_at"],
    )


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}
