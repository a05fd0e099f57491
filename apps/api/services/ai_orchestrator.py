"""
AI orchestrators: generate-program, analyze-workout, weekly-digest.

Each request runs the same sequential pipeline:

    quota guard -> context -> prompt -> model (+1 repair) -> contract
    -> usage log -> persist

The quota guard runs first, so a user at the daily limit never triggers a
context read or a model call. The usage row and the persisted result are
added to the same session and commit together; a failed call leaves
neither behind.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from core.config import settings
from models import AIProgram, AIRecommendation, User, WorkoutAnalysis
from services.ai_context import (
    gather_analysis_context,
    gather_digest_context,
    gather_program_context,
)
from services.ai_contracts import (
    INCOMPLETE_PROGRAM,
    INVALID_ANALYSIS,
    INVALID_DIGEST,
    INVALID_PROGRAM_JSON,
    ProgramProposal,
    WeeklyDigestResult,
    WorkoutAnalysisResult,
    validate_payload,
)
from services.ai_invoker import ModelParams, invoke_json
from services.ai_prompts import (
    build_analysis_prompt,
    build_digest_prompt,
    build_program_prompt,
)
from services.ai_quota import check_daily_quota
from services.ai_usage import record_usage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

GENERATE_PROGRAM = "generate-program"
ANALYZE_WORKOUT = "analyze-workout"
WEEKLY_DIGEST = "weekly-digest"

PROGRAM_TEMPERATURE = 0.7
PROGRAM_MAX_TOKENS = 4096
ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 1024
DIGEST_TEMPERATURE = 0.4
DIGEST_MAX_TOKENS = 2048

GENERATION_PROMPT_MAX_CHARS = 2000


def model_params(function_name: str) -> ModelParams:
    temperature, max_tokens = {
        GENERATE_PROGRAM: (PROGRAM_TEMPERATURE, PROGRAM_MAX_TOKENS),
        ANALYZE_WORKOUT: (ANALYSIS_TEMPERATURE, ANALYSIS_MAX_TOKENS),
        WEEKLY_DIGEST: (DIGEST_TEMPERATURE, DIGEST_MAX_TOKENS),
    }[function_name]
    return ModelParams(
        model=settings.model_for(function_name),
        temperature=temperature,
        max_tokens=max_tokens,
    )


def _utc_now(now: Optional[datetime]) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# generate-program
# ---------------------------------------------------------------------------

def generate_program(
    db: Session,
    user: User,
    llm,
    specific_instructions: Optional[str] = None,
    feedback: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[AIProgram, Optional[str]]:
    now = _utc_now(now)
    quota = check_daily_quota(db, user.id, now)

    context = gather_program_context(db, user, now.date())
    bundle = build_program_prompt(
        context.profile,
        context.history,
        specific_instructions=specific_instructions,
        feedback=feedback,
    )

    result = invoke_json(llm, bundle, model_params(GENERATE_PROGRAM), INVALID_PROGRAM_JSON)
    proposal = validate_payload(ProgramProposal, result.payload, INCOMPLETE_PROGRAM)

    record_usage(db, user.id, GENERATE_PROGRAM, result.model, result.input_tokens, result.output_tokens)

    program = AIProgram(
        user_id=user.id,
        name=proposal.name,
        description=proposal.description,
        split_type=proposal.split_type,
        duration_weeks=proposal.duration_weeks or len(proposal.weeks),
        progression_notes=proposal.progression_notes,
        deload_strategy=proposal.deload_strategy,
        status="proposed",
        ai_response=result.payload,
        generation_prompt=bundle.user[:GENERATION_PROMPT_MAX_CHARS],
    )
    db.add(program)
    db.flush()

    logger.info(
        f"Program proposed for user {user.id}: {program.name}",
        extra={"extra_fields": {
            "user_id": str(user.id),
            "program_id": str(program.id),
            "weeks": len(proposal.weeks),
            "attempts": result.attempts,
        }},
    )
    return program, quota.warning


# ---------------------------------------------------------------------------
# analyze-workout
# ---------------------------------------------------------------------------

def analyze_workout(
    db: Session,
    user: User,
    llm,
    workout_id: UUID,
    now: Optional[datetime] = None,
) -> Tuple[WorkoutAnalysis, Optional[str]]:
    now = _utc_now(now)
    quota = check_daily_quota(db, user.id, now)

    context = gather_analysis_context(db, user, workout_id)
    bundle = build_analysis_prompt(
        context.workout,
        context.exercises,
        context.previous,
        profile=context.profile,
    )

    result = invoke_json(llm, bundle, model_params(ANALYZE_WORKOUT), INVALID_ANALYSIS)
    analysis_result = validate_payload(WorkoutAnalysisResult, result.payload, INVALID_ANALYSIS)

    record_usage(db, user.id, ANALYZE_WORKOUT, result.model, result.input_tokens, result.output_tokens)

    analysis = WorkoutAnalysis(
        user_id=user.id,
        workout_id=context.workout.id,
        summary=analysis_result.summary,
        performance_rating=analysis_result.performance_rating,
        highlights=[h.model_dump(exclude_none=True) for h in analysis_result.highlights],
        watch_items=[w.model_dump(exclude_none=True) for w in analysis_result.watch_items],
        suggested_adjustments=[],
        coaching_tip=analysis_result.coaching_tip,
        ai_response=result.payload,
    )
    db.add(analysis)
    db.flush()

    logger.info(
        f"Workout {context.workout.id} analyzed: {analysis.performance_rating}",
        extra={"extra_fields": {"user_id": str(user.id), "attempts": result.attempts}},
    )
    return analysis, quota.warning


# ---------------------------------------------------------------------------
# weekly-digest
# ---------------------------------------------------------------------------

def weekly_digest(
    db: Session,
    user: User,
    llm,
    now: Optional[datetime] = None,
) -> Tuple[AIRecommendation, Optional[str]]:
    now = _utc_now(now)
    quota = check_daily_quota(db, user.id, now)

    context = gather_digest_context(db, user, now.date())
    bundle = build_digest_prompt(
        context.week_start,
        context.today,
        context.done,
        context.planned,
        context.analyses,
        context.profile,
    )

    result = invoke_json(llm, bundle, model_params(WEEKLY_DIGEST), INVALID_DIGEST)
    digest = validate_payload(WeeklyDigestResult, result.payload, INVALID_DIGEST)

    record_usage(db, user.id, WEEKLY_DIGEST, result.model, result.input_tokens, result.output_tokens)

    recommendation = AIRecommendation(
        user_id=user.id,
        type="progression",
        title=f"Weekly Digest - {context.week_start.isoformat()} - {context.today.isoformat()}",
        content=digest.week_summary,
        context=result.payload,
        priority="medium",
    )
    db.add(recommendation)
    db.flush()

    logger.info(
        f"Weekly digest stored for user {user.id}: {digest.overall_rating}",
        extra={"extra_fields": {
            "user_id": str(user.id),
            "done": len(context.done),
            "planned": len(context.planned),
            "attempts": result.attempts,
        }},
    )
    return recommendation, quota.warning
