"""
Workouts API.

Calendar view and logging of planned vs realized performance. Every query
is scoped to the caller; another user's workout is indistinguishable from a
missing one (404).
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from uuid import UUID
from datetime import date
import logging

from core.database import get_db
from core.auth import get_current_user
from core.exceptions import NotFoundError
from models import Exercise, User, Workout, WorkoutAnalysis
from schemas import ExerciseResponse, WorkoutAnalysisResponse, WorkoutDetailResponse, WorkoutResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/workouts", tags=["workouts"])


# ============ Request/Response Models ============

class ExerciseCreate(BaseModel):
    exercise_name: str = Field(min_length=1)
    expected_sets: Optional[int] = Field(default=None, ge=0)
    expected_reps: Optional[int] = Field(default=None, ge=0)
    recommended_weight: Optional[str] = None
    rest_in_seconds: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    realized_sets: Optional[int] = Field(default=None, ge=0)
    realized_reps: Optional[int] = Field(default=None, ge=0)
    realized_weight: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class WorkoutCreate(BaseModel):
    name: str = Field(min_length=1)
    date: date
    workout_type: Optional[str] = None
    status: Literal["planned", "done"] = "planned"
    notes: Optional[str] = None
    exercises: List[ExerciseCreate] = []


class WorkoutComplete(BaseModel):
    notes: Optional[str] = None


class ExerciseRealizedUpdate(BaseModel):
    realized_sets: Optional[int] = Field(default=None, ge=0)
    realized_reps: Optional[int] = Field(default=None, ge=0)
    realized_weight: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


# ============ Helpers ============

def _get_owned_workout(db: Session, user: User, workout_id: UUID) -> Workout:
    workout = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(Workout.id == workout_id, Workout.user_id == user.id)
        .first()
    )
    if not workout:
        raise NotFoundError("Workout not found")
    return workout


# ============ Endpoints ============

@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
def create_workout(
    payload: WorkoutCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = Workout(
        user_id=current_user.id,
        name=payload.name,
        date=payload.date,
        workout_type=payload.workout_type,
        status=payload.status,
        notes=payload.notes,
        source="manual",
    )
    for position, ex in enumerate(payload.exercises):
        workout.exercises.append(Exercise(
            user_id=current_user.id,
            position=position,
            workout_name=payload.name,
            **ex.model_dump(),
        ))
    db.add(workout)
    db.flush()
    db.refresh(workout)
    return workout


@router.get("", response_model=List[WorkoutResponse])
def list_workouts(
    start: Optional[date] = Query(None, description="First date, inclusive"),
    end: Optional[date] = Query(None, description="Last date, inclusive"),
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(Workout.user_id == current_user.id)
    )
    if start:
        query = query.filter(Workout.date >= start)
    if end:
        query = query.filter(Workout.date <= end)
    if status_filter:
        query = query.filter(Workout.status == status_filter)
    return query.order_by(Workout.date.asc(), Workout.created_at.asc()).all()


@router.get("/{workout_id}", response_model=WorkoutDetailResponse)
def get_workout(
    workout_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = _get_owned_workout(db, current_user, workout_id)
    latest = (
        db.query(WorkoutAnalysis)
        .filter(WorkoutAnalysis.workout_id == workout.id, WorkoutAnalysis.user_id == current_user.id)
        .order_by(WorkoutAnalysis.created_at.desc())
        .first()
    )
    response = WorkoutDetailResponse.model_validate(workout)
    if latest:
        response.latest_analysis = WorkoutAnalysisResponse.model_validate(latest)
    return response


@router.post("/{workout_id}/complete", response_model=WorkoutResponse)
def complete_workout(
    workout_id: UUID,
    payload: Optional[WorkoutComplete] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = _get_owned_workout(db, current_user, workout_id)
    workout.status = "done"
    if payload and payload.notes is not None:
        workout.notes = payload.notes
    db.flush()
    logger.info(f"Workout {workout.id} completed by user {current_user.id}")
    return workout


@router.patch("/{workout_id}/exercises/{exercise_id}", response_model=ExerciseResponse)
def update_exercise(
    workout_id: UUID,
    exercise_id: UUID,
    payload: ExerciseRealizedUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = _get_owned_workout(db, current_user, workout_id)
    exercise = next((e for e in workout.exercises if e.id == exercise_id), None)
    if exercise is None:
        raise NotFoundError("Exercise not found")

    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(exercise, key, value)
    db.flush()
    return exercise


@router.delete("/{workout_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workout(
    workout_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    workout = _get_owned_workout(db, current_user, workout_id)
    db.delete(workout)
    db.flush()
