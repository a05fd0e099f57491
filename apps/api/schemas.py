from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
from uuid import UUID
from typing import Optional, List, Dict, Any


class GoalEntry(BaseModel):
    goal: str
    priority: Optional[int] = None


class SportHistoryEntry(BaseModel):
    sport: str
    years: Optional[float] = None
    level: Optional[str] = None


class AthleteProfileUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""
    language: Optional[str] = Field(default=None, pattern="^(fr|en)$")
    age: Optional[int] = Field(default=None, ge=0, le=120)
    weight_kg: Optional[float] = Field(default=None, gt=0)
    height_cm: Optional[float] = Field(default=None, gt=0)
    gender: Optional[str] = None
    weight_experience: Optional[str] = None
    current_frequency: Optional[int] = Field(default=None, ge=0, le=7)
    current_split: Optional[str] = None
    injuries_limitations: Optional[str] = None
    goals_ranked: Optional[List[GoalEntry]] = None
    goal_timeline: Optional[str] = None
    available_days: Optional[List[str]] = None
    session_duration: Optional[int] = Field(default=None, gt=0)
    equipment: Optional[str] = None
    sports_history: Optional[List[SportHistoryEntry]] = None
    nutrition_context: Optional[str] = None
    additional_notes: Optional[str] = None
    custom_coaching_prompt: Optional[str] = None
    onboarding_completed: Optional[bool] = None


class AthleteProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    language: str
    age: Optional[int] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    gender: Optional[str] = None
    weight_experience: Optional[str] = None
    current_frequency: Optional[int] = None
    current_split: Optional[str] = None
    injuries_limitations: Optional[str] = None
    goals_ranked: Optional[List[Dict[str, Any]]] = None
    goal_timeline: Optional[str] = None
    available_days: Optional[List[str]] = None
    session_duration: Optional[int] = None
    equipment: Optional[str] = None
    sports_history: Optional[List[Dict[str, Any]]] = None
    nutrition_context: Optional[str] = None
    additional_notes: Optional[str] = None
    custom_coaching_prompt: Optional[str] = None
    onboarding_completed: bool = False
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExerciseResponse(BaseModel):
    id: UUID
    exercise_name: str
    workout_name: Optional[str] = None
    expected_sets: Optional[int] = None
    expected_reps: Optional[int] = None
    recommended_weight: Optional[str] = None
    rest_in_seconds: Optional[int] = None
    rpe: Optional[float] = None
    realized_sets: Optional[int] = None
    realized_reps: Optional[int] = None
    realized_weight: Optional[float] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class WorkoutAnalysisResponse(BaseModel):
    id: UUID
    workout_id: UUID
    summary: str
    performance_rating: str
    highlights: List[Dict[str, Any]] = []
    watch_items: List[Dict[str, Any]] = []
    suggested_adjustments: List[Any] = []
    coaching_tip: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutResponse(BaseModel):
    id: UUID
    name: str
    date: date
    workout_type: Optional[str] = None
    status: str
    notes: Optional[str] = None
    source: str
    ai_program_id: Optional[UUID] = None
    ai_week_number: Optional[int] = None
    created_at: datetime
    exercises: List[ExerciseResponse] = []

    model_config = ConfigDict(from_attributes=True)


class WorkoutDetailResponse(WorkoutResponse):
    latest_analysis: Optional[WorkoutAnalysisResponse] = None


class ProgramWeekResponse(BaseModel):
    week_number: int
    theme: Optional[str] = None
    start_date: date

    model_config = ConfigDict(from_attributes=True)


class AIProgramResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    split_type: Optional[str] = None
    duration_weeks: Optional[int] = None
    progression_notes: Optional[str] = None
    deload_strategy: Optional[str] = None
    status: str
    ai_response: Dict[str, Any]
    started_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    weeks: List[ProgramWeekResponse] = []

    model_config = ConfigDict(from_attributes=True)


class AIRecommendationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    content: str
    context: Optional[Dict[str, Any]] = None
    priority: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
