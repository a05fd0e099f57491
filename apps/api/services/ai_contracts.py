"""
Structural contracts for parsed model output.

A payload that parses as JSON but does not satisfy its contract is rejected
with UpstreamFormatError before anything is persisted or logged. The
verbatim payload is what gets stored; these models only gate acceptance.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.exceptions import UpstreamFormatError

logger = logging.getLogger(__name__)

INVALID_PROGRAM_JSON = "AI returned invalid JSON. Please try again."
INCOMPLETE_PROGRAM = "AI returned an incomplete program. Please try again."
INVALID_ANALYSIS = "AI returned invalid analysis. Please try again."
INVALID_DIGEST = "AI returned invalid digest. Please try again."


class _Contract(BaseModel):
    model_config = ConfigDict(extra="allow")


# ============ generate-program ============

class ProgramExercise(_Contract):
    exercise_name: str = Field(min_length=1)
    expected_sets: int = Field(ge=0)
    expected_reps: int = Field(ge=0)
    recommended_weight: Optional[str] = None
    rest_in_seconds: int = Field(ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)

    @field_validator("recommended_weight", mode="before")
    @classmethod
    def _weight_as_text(cls, v: Any) -> Any:
        # models often emit 80 instead of "80"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v


class ProgramWorkout(_Contract):
    day_of_week: str
    name: str = Field(min_length=1)
    workout_type: Optional[str] = None
    exercises: List[ProgramExercise] = Field(default_factory=list)

    @field_validator("day_of_week")
    @classmethod
    def _lower_day(cls, v: str) -> str:
        return v.strip().lower()


class ProgramWeek(_Contract):
    week_number: int = Field(ge=1)
    theme: Optional[str] = None
    workouts: List[ProgramWorkout] = Field(default_factory=list)


class ProgramProposal(_Contract):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    split_type: Optional[str] = None
    duration_weeks: Optional[int] = Field(default=None, ge=1)
    progression_notes: Optional[str] = None
    deload_strategy: Optional[str] = None
    weeks: List[ProgramWeek] = Field(min_length=1)

    @model_validator(mode="after")
    def _unique_week_numbers(self) -> "ProgramProposal":
        # one AIProgramWeek row per (program, week_number)
        numbers = [w.week_number for w in self.weeks]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"duplicate week_number in {numbers}")
        return self


# ============ analyze-workout ============

Trend = Literal["improving", "stable", "declining"]


class ExerciseObservation(_Contract):
    exercise_name: str
    observation: str
    trend: Optional[Trend] = None


class WorkoutAnalysisResult(_Contract):
    summary: str = Field(min_length=1)
    performance_rating: Literal["exceeded", "on_track", "below_target", "needs_attention"]
    highlights: List[ExerciseObservation] = Field(default_factory=list)
    watch_items: List[ExerciseObservation] = Field(default_factory=list)
    coaching_tip: Optional[str] = None


# ============ weekly-digest ============

class WeeklyDigestResult(_Contract):
    week_summary: str = Field(min_length=1)
    overall_rating: Literal["excellent", "good", "average", "needs_improvement"]
    workouts_completed: int = Field(ge=0)
    workouts_planned: int = Field(ge=0)
    key_achievements: List[str] = Field(default_factory=list)
    areas_to_improve: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    motivational_note: str = Field(min_length=1)


T = TypeVar("T", bound=BaseModel)


def validate_payload(contract: Type[T], payload: Dict[str, Any], error_message: str) -> T:
    try:
        return contract.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            f"{contract.__name__} rejected model output: {e.error_count()} errors",
            extra={"extra_fields": {"errors": e.errors(include_url=False)[:5]}},
        )
        raise UpstreamFormatError(error_message)
