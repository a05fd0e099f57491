"""
Context Gatherer for the AI orchestrators.

Reads the caller's profile and workout history. Every query is scoped to
the authenticated user; nothing here writes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from core.exceptions import NotFoundError, PreconditionError
from models import AthleteProfile, Exercise, User, Workout, WorkoutAnalysis

logger = logging.getLogger(__name__)

HISTORY_WINDOW_DAYS = 56
HISTORY_LIMIT = 30
TREND_LIMIT = 4
DIGEST_WINDOW_DAYS = 7


@dataclass
class WorkoutWithExercises:
    workout: Workout
    exercises: List[Exercise] = field(default_factory=list)


@dataclass
class ProgramContext:
    profile: AthleteProfile
    history: List[WorkoutWithExercises]


@dataclass
class AnalysisContext:
    workout: Workout
    exercises: List[Exercise]
    previous: List[WorkoutWithExercises]
    profile: Optional[AthleteProfile] = None


@dataclass
class DigestContext:
    profile: AthleteProfile
    week_start: date
    today: date
    done: List[WorkoutWithExercises]
    planned: List[Workout]
    analyses: Dict[UUID, WorkoutAnalysis] = field(default_factory=dict)


def get_profile(db: Session, user: User) -> Optional[AthleteProfile]:
    return db.query(AthleteProfile).filter(AthleteProfile.user_id == user.id).first()


def require_profile(db: Session, user: User) -> AthleteProfile:
    profile = get_profile(db, user)
    if profile is None:
        raise PreconditionError("Complete your profile first")
    return profile


def _with_exercises(workouts: List[Workout]) -> List[WorkoutWithExercises]:
    return [WorkoutWithExercises(workout=w, exercises=list(w.exercises)) for w in workouts]


def gather_program_context(db: Session, user: User, today: date) -> ProgramContext:
    """Profile plus up to 30 done workouts from the last 8 weeks, newest first."""
    profile = require_profile(db, user)

    since = today - timedelta(days=HISTORY_WINDOW_DAYS)
    workouts = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(
            Workout.user_id == user.id,
            Workout.status == "done",
            Workout.date >= since,
        )
        .order_by(Workout.date.desc(), Workout.created_at.desc())
        .limit(HISTORY_LIMIT)
        .all()
    )

    logger.debug(f"Program context for {user.id}: {len(workouts)} workouts since {since}")
    return ProgramContext(profile=profile, history=_with_exercises(workouts))


def gather_analysis_context(db: Session, user: User, workout_id: UUID) -> AnalysisContext:
    workout = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(Workout.id == workout_id, Workout.user_id == user.id)
        .first()
    )
    if workout is None:
        raise NotFoundError("Workout not found")

    exercises = list(workout.exercises)
    if not exercises:
        raise PreconditionError("No exercises found for this workout")

    previous_query = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(
            Workout.user_id == user.id,
            Workout.status == "done",
            Workout.id != workout.id,
        )
    )
    if workout.workout_type is None:
        previous_query = previous_query.filter(Workout.workout_type.is_(None))
    else:
        previous_query = previous_query.filter(Workout.workout_type == workout.workout_type)

    previous = (
        previous_query
        .order_by(Workout.date.desc(), Workout.created_at.desc())
        .limit(TREND_LIMIT)
        .all()
    )

    return AnalysisContext(
        workout=workout,
        exercises=exercises,
        previous=_with_exercises(previous),
        profile=get_profile(db, user),
    )


def gather_digest_context(db: Session, user: User, today: date) -> DigestContext:
    """
    Trailing week, today included: today-6 .. today.

    Raises PreconditionError when nothing in the window is done, even if
    planned workouts exist.
    """
    profile = require_profile(db, user)

    week_start = today - timedelta(days=DIGEST_WINDOW_DAYS - 1)
    workouts = (
        db.query(Workout)
        .options(selectinload(Workout.exercises))
        .filter(
            Workout.user_id == user.id,
            Workout.date >= week_start,
            Workout.date <= today,
        )
        .order_by(Workout.date.asc(), Workout.created_at.asc())
        .all()
    )

    done = [w for w in workouts if w.status == "done"]
    planned = [w for w in workouts if w.status == "planned"]

    if not done:
        raise PreconditionError("No completed workouts this week to analyze.")

    analyses: Dict[UUID, WorkoutAnalysis] = {}
    rows = (
        db.query(WorkoutAnalysis)
        .filter(
            WorkoutAnalysis.user_id == user.id,
            WorkoutAnalysis.workout_id.in_([w.id for w in done]),
        )
        .order_by(WorkoutAnalysis.created_at.asc())
        .all()
    )
    for row in rows:
        # latest analysis per workout wins
        analyses[row.workout_id] = row

    return DigestContext(
        profile=profile,
        week_start=week_start,
        today=today,
        done=_with_exercises(done),
        planned=planned,
        analyses=analyses,
    )
