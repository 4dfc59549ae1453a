"""
Onboarding API Endpoints.

Stateless HTTP front for the question oracle: the caller sends its
profile, coverage and answers, and gets back the next question, a coverage
update and tracks. Session state lives with the caller.
"""

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from . import __version__
from .config import get_settings
from .errors import OracleError, OracleErrorKind, OracleRequestError
from .llm.client import get_oracle_client
from .llm.prompt_logger import enable_prompt_logging
from .models import QUICK_PICKS, OracleRequest
from .oracle import QuestionOracleGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


# Client-facing message per failure kind
ORACLE_ERROR_MESSAGES: dict[OracleErrorKind, str] = {
    OracleErrorKind.AUTH_FAILURE: "Invalid oracle API key",
    OracleErrorKind.RATE_LIMITED: "Oracle rate limit exceeded",
    OracleErrorKind.BAD_REQUEST: "Invalid request to oracle",
    OracleErrorKind.TIMEOUT: "Oracle timed out",
    OracleErrorKind.EMPTY_RESPONSE: "No response from oracle",
    OracleErrorKind.UNKNOWN_TRANSPORT_ERROR: "Oracle API error",
}


# =============================================================================
# Dependencies
# =============================================================================

@lru_cache
def get_gateway() -> QuestionOracleGateway:
    """
    Shared gateway built once from settings, so every request reuses the
    same oracle client and its connection pool. Overridden in tests.
    """
    settings = get_settings()
    if settings.onboarding_log_prompts:
        enable_prompt_logging(True)
    return QuestionOracleGateway(
        get_oracle_client(settings),
        timeout_seconds=settings.oracle_timeout_seconds,
    )


def parse_oracle_request(payload: dict[str, Any]) -> OracleRequest:
    """Validate the raw body, mapping every problem to a 400."""
    coverage = payload.get("coverage")
    if not isinstance(coverage, dict) or not coverage:
        logger.error(f"Invalid coverage data: {coverage!r}")
        raise HTTPException(status_code=400, detail="Invalid coverage data")

    answers = payload.get("answers", [])
    if not isinstance(answers, list):
        logger.error(f"Invalid answers data: {answers!r}")
        raise HTTPException(status_code=400, detail="Invalid answers data")

    try:
        return OracleRequest.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Invalid onboarding request: {e.error_count()} errors")
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid request", "details": e.errors(include_url=False, include_context=False)},
        )


# =============================================================================
# Routes
# =============================================================================

@router.post("/next-question")
async def next_question(
    payload: dict[str, Any] = Body(...),
    gateway: QuestionOracleGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """
    Ask the oracle for the next question.

    Always answers with a schema-valid response (a fallback question when
    the oracle's output can't be recovered). Transport failures are 502.
    """
    request = parse_oracle_request(payload)

    try:
        response = await gateway.request_next_question(request.profile, request.coverage, request.answers)
    except OracleRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OracleError as e:
        logger.error(f"Oracle error ({e.kind.value}, status={e.status_code}): {e}")
        raise HTTPException(
            status_code=502,
            detail={"error": ORACLE_ERROR_MESSAGES[e.kind], "kind": e.kind.value},
        )

    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/quick-picks")
async def quick_picks() -> list[dict[str, Any]]:
    """The predefined quick pick catalog."""
    return [pick.model_dump(mode="json") for pick in QUICK_PICKS]


@router.get("/health")
async def health() -> dict[str, Any]:
    settings = get_settings()
    return {
        "status": "healthy",
        "version": __version__,
        "oracle": "openai" if settings.oracle_configured else "mock",
        "model": settings.oracle_model,
    }


# =============================================================================
# App
# =============================================================================

def create_app() -> FastAPI:
    """FastAPI app serving the onboarding router under /api."""
    app = FastAPI(title="Onboarding", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        settings = get_settings()
        logger.info("Onboarding API starting up...")
        logger.info(f"  Oracle: {'openai' if settings.oracle_configured else 'mock'} ({settings.oracle_model})")

    return app
