from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from stepcheck import get_version
from stepcheck.core.config import ProgressMode, ProgressSettings
from stepcheck.core.discovery import discover_artifacts
from stepcheck.core.errors import StepcheckError
from stepcheck.core.report import ProgressReport
from stepcheck.pipeline import compute_progress, load_settings

LOGGER = logging.getLogger("stepcheck.result_server")
GENERIC_ERROR = "Failed to read progress"


@lru_cache
def get_settings() -> ProgressSettings:
    return load_settings()


class HealthResponse(BaseModel):
    status: str
    mode: ProgressMode
    forceAllPassed: bool
    artifactCount: int


class ErrorResponse(BaseModel):
    error: str
    message: str


app = FastAPI(title="Stepcheck Result API", version=get_version())
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def use_settings(settings: ProgressSettings) -> None:
    """Serve ``settings`` instead of the environment-derived defaults."""
    app.dependency_overrides[get_settings] = lambda: settings


@app.middleware("http")
async def log_requests(request: Request, call_next):
    LOGGER.info("%s %s", request.method, request.url.path)
    return await call_next(request)


@app.get("/health", response_model=HealthResponse)
def health(settings: ProgressSettings = Depends(get_settings)) -> HealthResponse:
    artifacts = discover_artifacts(settings.resolved_test_dir)
    return HealthResponse(
        status="ok",
        mode=settings.mode,
        forceAllPassed=settings.force_all_passed,
        artifactCount=len(artifacts),
    )


@app.get(
    "/result",
    response_model=ProgressReport,
    responses={500: {"model": ErrorResponse}},
)
async def get_result(settings: ProgressSettings = Depends(get_settings)) -> JSONResponse:
    try:
        report = await compute_progress(settings)
    except StepcheckError as exc:
        LOGGER.warning("Progress unavailable (%s): %s", exc.category, exc.message)
        return JSONResponse(status_code=500, content=exc.to_payload())
    except Exception as exc:  # noqa: BLE001 - every request gets an answer
        LOGGER.exception("Unexpected failure while computing progress")
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR, "message": str(exc)})
    return JSONResponse(content=report.to_payload())


__all__ = ["app", "get_settings", "use_settings"]
