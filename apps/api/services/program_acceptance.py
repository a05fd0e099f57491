"""
Program acceptance state machine.

    proposed --accept--> active --(another program accepted)--> archived
    proposed --reject--> rejected

Accepting expands the stored program JSON onto the calendar: one
AIProgramWeek per week, one planned Workout per program workout, and its
Exercises. The status transition is guarded (UPDATE ... WHERE
status='proposed'), so a second concurrent accept matches zero rows and
gets a ConflictError instead of duplicating the calendar.

All writes go through the request session and commit together.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, UpstreamFormatError
from models import AIProgram, AIProgramWeek, Exercise, User, Workout
from services.ai_contracts import INCOMPLETE_PROGRAM, ProgramExercise, ProgramProposal, validate_payload

logger = logging.getLogger(__name__)

DAY_OFFSETS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


@dataclass
class PlannedWorkout:
    name: str
    date: date
    workout_type: Optional[str]
    day_of_week: str
    exercises: List[ProgramExercise] = field(default_factory=list)


@dataclass
class PlannedWeek:
    week_number: int
    theme: Optional[str]
    start_date: date
    workouts: List[PlannedWorkout] = field(default_factory=list)


def day_offset(day_of_week: Optional[str]) -> int:
    """Offset from the week start. Unrecognized days fall on the first day."""
    return DAY_OFFSETS.get((day_of_week or "").strip().lower(), 0)


def next_monday(today: Optional[date] = None) -> date:
    """The Monday strictly after today."""
    today = today or datetime.now(timezone.utc).date()
    return today + timedelta(days=7 - today.weekday())


def expand_program(ai_response: Dict[str, Any], start_date: date) -> List[PlannedWeek]:
    """
    Map a stored program onto calendar dates. Pure.

    Week N starts at start_date + (N-1)*7 days; a workout lands on its
    week start plus the offset of its day_of_week.
    """
    proposal = validate_payload(ProgramProposal, ai_response, INCOMPLETE_PROGRAM)

    weeks = []
    for week in proposal.weeks:
        week_start = start_date + timedelta(days=(week.week_number - 1) * 7)
        planned = PlannedWeek(week_number=week.week_number, theme=week.theme, start_date=week_start)
        for workout in week.workouts:
            planned.workouts.append(PlannedWorkout(
                name=workout.name,
                date=week_start + timedelta(days=day_offset(workout.day_of_week)),
                workout_type=workout.workout_type,
                day_of_week=workout.day_of_week,
                exercises=list(workout.exercises),
            ))
        weeks.append(planned)
    return weeks


def _get_program(db: Session, user: User, program_id: UUID) -> AIProgram:
    program = (
        db.query(AIProgram)
        .filter(AIProgram.id == program_id, AIProgram.user_id == user.id)
        .first()
    )
    if program is None:
        raise NotFoundError("Program not found")
    return program


def count_planned_workouts(db: Session, user: User) -> int:
    return (
        db.query(Workout)
        .filter(Workout.user_id == user.id, Workout.status == "planned")
        .count()
    )


def accept_program(
    db: Session,
    user: User,
    program_id: UUID,
    start_date: Optional[date] = None,
    archive_planned: bool = False,
    now: Optional[datetime] = None,
) -> AIProgram:
    now = now or datetime.now(timezone.utc)
    start_date = start_date or next_monday(now.date())

    program = _get_program(db, user, program_id)
    try:
        weeks = expand_program(program.ai_response, start_date)
    except UpstreamFormatError:
        raise ConflictError("Program content is invalid and cannot be accepted")

    updated = (
        db.query(AIProgram)
        .filter(
            AIProgram.id == program.id,
            AIProgram.user_id == user.id,
            AIProgram.status == "proposed",
        )
        .update({"status": "active", "started_at": now}, synchronize_session="fetch")
    )
    if updated == 0:
        raise ConflictError("Program is no longer proposed")

    archived_programs = (
        db.query(AIProgram)
        .filter(
            AIProgram.user_id == user.id,
            AIProgram.status == "active",
            AIProgram.id != program.id,
        )
        .update({"status": "archived", "archived_at": now}, synchronize_session="fetch")
    )

    archived_workouts = 0
    if archive_planned:
        archived_workouts = (
            db.query(Workout)
            .filter(Workout.user_id == user.id, Workout.status == "planned")
            .update({"status": "archived"}, synchronize_session="fetch")
        )

    workout_count = 0
    for week in weeks:
        db.add(AIProgramWeek(
            program_id=program.id,
            user_id=user.id,
            week_number=week.week_number,
            theme=week.theme,
            start_date=week.start_date,
        ))
        for planned in week.workouts:
            workout = Workout(
                user_id=user.id,
                name=planned.name,
                date=planned.date,
                workout_type=planned.workout_type,
                status="planned",
                source="ai_generated",
                ai_program_id=program.id,
                ai_week_number=week.week_number,
            )
            for position, ex in enumerate(planned.exercises):
                workout.exercises.append(Exercise(
                    user_id=user.id,
                    position=position,
                    workout_name=planned.name,
                    exercise_name=ex.exercise_name,
                    expected_sets=ex.expected_sets,
                    expected_reps=ex.expected_reps,
                    recommended_weight=ex.recommended_weight,
                    rest_in_seconds=ex.rest_in_seconds,
                    rpe=ex.rpe,
                ))
            db.add(workout)
            workout_count += 1

    db.flush()
    db.refresh(program)

    logger.info(
        f"Program {program.id} accepted by user {user.id}",
        extra={"extra_fields": {
            "start_date": start_date.isoformat(),
            "weeks": len(weeks),
            "workouts": workout_count,
            "archived_programs": archived_programs,
            "archived_workouts": archived_workouts,
        }},
    )
    return program


def reject_program(db: Session, user: User, program_id: UUID) -> AIProgram:
    program = _get_program(db, user, program_id)
    updated = (
        db.query(AIProgram)
        .filter(
            AIProgram.id == program.id,
            AIProgram.user_id == user.id,
            AIProgram.status == "proposed",
        )
        .update({"status": "rejected"}, synchronize_session="fetch")
    )
    if updated == 0:
        raise ConflictError("Program is no longer proposed")
    db.flush()
    db.refresh(program)
    logger.info(f"Program {program.id} rejected by user {user.id}")
    return program
