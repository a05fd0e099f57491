"""
AI coach API endpoints.

Provides:
- POST /v1/ai/generate-program  -> {program, warning?}
- POST /v1/ai/analyze-workout   -> {analysis, warning?}
- POST /v1/ai/weekly-digest     -> {digest, warning?}
- GET  /v1/ai/usage             -> today's quota usage

Each POST is one synchronous, stateless request: at most two model calls,
then the persisted row is returned (never the raw model text). ``warning``
is present only when the caller is near the daily limit.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime
import logging

from core.database import get_db
from core.auth import get_current_user
from core.exceptions import PreconditionError
from models import User
from schemas import AIProgramResponse, AIRecommendationResponse, WorkoutAnalysisResponse
from services import ai_orchestrator
from services.ai_quota import get_usage_status
from services.llm_client import LanguageModelClient, get_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/ai", tags=["ai"])


# ============ Request/Response Models ============

class GenerateProgramRequest(BaseModel):
    specific_instructions: Optional[str] = Field(default=None, max_length=4000)
    feedback: Optional[str] = Field(default=None, max_length=4000)


class AnalyzeWorkoutRequest(BaseModel):
    workout_id: Optional[str] = None


class UsageResponse(BaseModel):
    used: int
    limit: int
    remaining: int
    resets_at: datetime


def _respond(key: str, value: BaseModel, warning: Optional[str]) -> JSONResponse:
    body = {key: value.model_dump(mode="json")}
    if warning:
        body["warning"] = warning
    return JSONResponse(content=body)


# ============ Preflight ============

@router.options("/generate-program", include_in_schema=False)
@router.options("/analyze-workout", include_in_schema=False)
@router.options("/weekly-digest", include_in_schema=False)
def preflight(request: Request):
    return PlainTextResponse("ok")


# ============ Endpoints ============

@router.post("/generate-program")
def generate_program(
    payload: Optional[GenerateProgramRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LanguageModelClient = Depends(get_llm_client),
):
    """Generate a multi-week program. Stored as ``proposed`` until accepted."""
    payload = payload or GenerateProgramRequest()
    program, warning = ai_orchestrator.generate_program(
        db,
        current_user,
        llm,
        specific_instructions=payload.specific_instructions,
        feedback=payload.feedback,
    )
    return _respond("program", AIProgramResponse.model_validate(program), warning)


@router.post("/analyze-workout")
def analyze_workout(
    payload: Optional[AnalyzeWorkoutRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LanguageModelClient = Depends(get_llm_client),
):
    if payload is None or not payload.workout_id:
        raise PreconditionError("workout_id is required")
    try:
        workout_id = UUID(payload.workout_id)
    except ValueError:
        raise PreconditionError("workout_id is required")

    analysis, warning = ai_orchestrator.analyze_workout(db, current_user, llm, workout_id)
    return _respond("analysis", WorkoutAnalysisResponse.model_validate(analysis), warning)


@router.post("/weekly-digest")
def weekly_digest(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm: LanguageModelClient = Depends(get_llm_client),
):
    recommendation, warning = ai_orchestrator.weekly_digest(db, current_user, llm)
    return _respond("digest", AIRecommendationResponse.model_validate(recommendation), warning)


@router.get("/usage", response_model=UsageResponse)
def usage(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_usage_status(db, current_user.id)
