"""
Prompt Builder for the AI orchestrators.

Pure functions: gathered context in, PromptBundle(system, user, schema) out.
No database access and no model calls, so every prompt can be asserted on
directly in tests.

Every prompt ends with a RESPOND IN line and an OUTPUT section embedding a
plain-language JSON schema. Exercise rows are rendered as one compact line
each, never as raw row dumps.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from models import AthleteProfile, Exercise, Workout, WorkoutAnalysis
from services.ai_context import WorkoutWithExercises


DEFAULT_SYSTEM_PROMPT = "You are a personal sports coach."
DEFAULT_LANGUAGE = "fr"

NO_HISTORY = "No completed workouts yet."
NO_TREND = "No previous workouts of this type."

OUTPUT_HEADER = "OUTPUT: Return ONLY valid JSON matching this schema (no markdown, no explanation, just JSON):"


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------

PROGRAM_SCHEMA = """{
  "name": "string (program name)",
  "description": "string (brief description)",
  "split_type": "string (e.g. Push/Pull/Legs, Upper/Lower, Full Body)",
  "duration_weeks": number (how many weeks),
  "progression_notes": "string (how to progress week to week)",
  "deload_strategy": "string (deload approach)",
  "weeks": [
    {
      "week_number": number,
      "theme": "string (e.g. Volume phase, Intensity phase)",
      "workouts": [
        {
          "day_of_week": "monday|tuesday|wednesday|thursday|friday|saturday|sunday",
          "name": "string (workout name)",
          "workout_type": "Strength|Cardio|Flexibility|Mixed",
          "exercises": [
            {
              "exercise_name": "string",
              "expected_sets": number,
              "expected_reps": number,
              "recommended_weight": "string or null (e.g. '80' for 80kg)",
              "rest_in_seconds": number,
              "rpe": number (1-10)
            }
          ]
        }
      ]
    }
  ]
}"""

ANALYSIS_SCHEMA = """{
  "summary": "string (2-3 sentence overview of the workout performance)",
  "performance_rating": "exceeded | on_track | below_target | needs_attention",
  "highlights": [{ "exercise_name": "string", "observation": "string", "trend": "improving | stable | declining" }],
  "watch_items": [{ "exercise_name": "string", "observation": "string", "trend": "improving | stable | declining" }],
  "coaching_tip": "string (one actionable tip for next session)"
}"""

DIGEST_SCHEMA = """{
  "week_summary": "string (2-4 sentence overview of the entire week)",
  "overall_rating": "excellent | good | average | needs_improvement",
  "workouts_completed": number,
  "workouts_planned": number,
  "key_achievements": ["string (1-3 specific achievements)"],
  "areas_to_improve": ["string (1-3 areas needing work)"],
  "recommendations": ["string (1-3 actionable recommendations for next week)"],
  "motivational_note": "string (short personalized motivational message)"
}"""


@dataclass(frozen=True)
class PromptBundle:
    system: str
    user: str
    schema: str


# ---------------------------------------------------------------------------
# Shared formatting
# ---------------------------------------------------------------------------

def resolve_system_prompt(profile: Optional[AthleteProfile]) -> str:
    if profile is not None and profile.custom_coaching_prompt:
        return profile.custom_coaching_prompt
    return DEFAULT_SYSTEM_PROMPT


def resolve_language(profile: Optional[AthleteProfile]) -> str:
    lang = (profile.language if profile is not None else None) or DEFAULT_LANGUAGE
    return "French (FR)" if lang == "fr" else "English (EN)"


def _num(value: Any) -> str:
    """Render a number without trailing zeros; unknown renders '?'."""
    if value is None or value == "":
        return "?"
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _measure(value: Any) -> str:
    return "N/A" if value is None else _num(value)


def _or(value: Any, fallback: str = "N/A") -> str:
    if value is None or value == "" or value == []:
        return fallback
    return str(value)


def format_planned(exercise: Exercise) -> str:
    return (
        f"{_num(exercise.expected_sets)}x{_num(exercise.expected_reps)}"
        f"@{_num(exercise.recommended_weight)}kg RPE{_num(exercise.rpe)}"
    )


def format_realized(exercise: Exercise) -> str:
    if not exercise.realized_sets:
        return "not recorded"
    return (
        f"{_num(exercise.realized_sets)}x{_num(exercise.realized_reps)}"
        f"@{_num(exercise.realized_weight)}kg"
    )


def format_exercise_line(exercise: Exercise) -> str:
    return (
        f"{exercise.exercise_name}: planned {format_planned(exercise)}"
        f" | realized {format_realized(exercise)}"
    )


def format_workout_header(workout: Workout) -> str:
    return f"{workout.date.isoformat()} | {_or(workout.workout_type)} | {workout.name}"


def format_workout_block(item: WorkoutWithExercises, analysis: Optional[WorkoutAnalysis] = None) -> str:
    lines = [format_workout_header(item.workout)]
    lines.extend(f"  - {format_exercise_line(e)}" for e in item.exercises)
    if analysis is not None:
        lines.append(f"  [Analysis: {analysis.performance_rating} - {analysis.summary}]")
    return "\n".join(lines)


def _goal_names(profile: Optional[AthleteProfile]) -> List[str]:
    goals = (profile.goals_ranked if profile is not None else None) or []
    names = []
    for goal in goals:
        if isinstance(goal, dict):
            if goal.get("goal"):
                names.append(str(goal["goal"]))
        elif goal:
            names.append(str(goal))
    return names


def format_athlete_context(profile: AthleteProfile) -> str:
    goals = ", ".join(_goal_names(profile)) or "N/A"
    return f"ATHLETE CONTEXT: {_or(profile.weight_experience)} level, goals: {goals}"


def _output_block(language: str, schema: str) -> List[str]:
    return [
        f"RESPOND IN: {language}",
        "",
        OUTPUT_HEADER,
        schema,
    ]


# ---------------------------------------------------------------------------
# generate-program
# ---------------------------------------------------------------------------

def format_profile_block(profile: AthleteProfile) -> str:
    goals = ", ".join(f"{i}. {name}" for i, name in enumerate(_goal_names(profile), start=1))

    sports: List[str] = []
    for entry in profile.sports_history or []:
        if isinstance(entry, dict) and entry.get("sport"):
            sports.append(f"{entry['sport']} ({_num(entry.get('years'))}y, {_or(entry.get('level'))})")

    available_days = ", ".join(str(d) for d in (profile.available_days or []))

    return "\n".join([
        f"Age: {_or(profile.age)}",
        f"Weight: {_measure(profile.weight_kg)} kg",
        f"Height: {_measure(profile.height_cm)} cm",
        f"Gender: {_or(profile.gender)}",
        f"Experience: {_or(profile.weight_experience)}",
        f"Current frequency: {_or(profile.current_frequency)} days/week",
        f"Current split: {_or(profile.current_split)}",
        f"Injuries/limitations: {_or(profile.injuries_limitations, 'None')}",
        f"Goals: {goals or 'N/A'}",
        f"Goal timeline: {_or(profile.goal_timeline)}",
        f"Available days: {available_days or 'N/A'}",
        f"Session duration: {_or(profile.session_duration)} min",
        f"Equipment: {_or(profile.equipment)}",
        f"Sports history: {', '.join(sports) or 'None'}",
        f"Nutrition: {_or(profile.nutrition_context)}",
        f"Additional notes: {_or(profile.additional_notes, 'None')}",
    ])


def format_training_history(history: Sequence[WorkoutWithExercises]) -> str:
    if not history:
        return NO_HISTORY
    return "\n\n".join(format_workout_block(item) for item in history)


def build_program_prompt(
    profile: AthleteProfile,
    history: Sequence[WorkoutWithExercises],
    specific_instructions: Optional[str] = None,
    feedback: Optional[str] = None,
) -> PromptBundle:
    lines = [
        "ATHLETE PROFILE:",
        format_profile_block(profile),
        "",
        "TRAINING HISTORY (last 8 weeks):",
        format_training_history(history),
        "",
        "TASK: Generate a complete, personalized workout program for this athlete.",
    ]
    if specific_instructions:
        lines += ["", f"SPECIFIC INSTRUCTIONS FROM ATHLETE: {specific_instructions}"]
    if feedback:
        lines += ["", f"FEEDBACK ON PREVIOUS PROGRAM: {feedback}"]
    lines.append("")
    lines += _output_block(resolve_language(profile), PROGRAM_SCHEMA)

    return PromptBundle(
        system=resolve_system_prompt(profile),
        user="\n".join(lines),
        schema=PROGRAM_SCHEMA,
    )


# ---------------------------------------------------------------------------
# analyze-workout
# ---------------------------------------------------------------------------

def format_trend_line(exercise: Exercise) -> str:
    return (
        f"{exercise.exercise_name}: {_num(exercise.realized_sets)}x{_num(exercise.realized_reps)}"
        f"@{_num(exercise.realized_weight)}kg RPE{_num(exercise.rpe)}"
    )


def format_trend(previous: Sequence[WorkoutWithExercises]) -> str:
    if not previous:
        return NO_TREND
    blocks = []
    for item in previous:
        lines = [f"{item.workout.date.isoformat()} | {item.workout.name}"]
        lines.extend(f"  - {format_trend_line(e)}" for e in item.exercises)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_analysis_prompt(
    workout: Workout,
    exercises: Sequence[Exercise],
    previous: Sequence[WorkoutWithExercises],
    profile: Optional[AthleteProfile] = None,
) -> PromptBundle:
    table = []
    for exercise in exercises:
        line = format_exercise_line(exercise)
        if exercise.notes:
            line += f" | notes: {exercise.notes}"
        table.append(line)

    lines = [
        "WORKOUT COMPLETED:",
        f"Date: {workout.date.isoformat()}",
        f"Type: {_or(workout.workout_type)}",
        f"Name: {workout.name}",
        "",
        "EXERCISES (planned vs realized):",
        "\n".join(table),
    ]
    if workout.notes:
        lines += ["", f"WORKOUT NOTES: {workout.notes}"]
    lines += [
        "",
        f"TREND (last {len(previous)} similar workouts):",
        format_trend(previous),
    ]
    if profile is not None:
        lines += ["", format_athlete_context(profile)]
    lines += [
        "",
        "TASK: Analyze this completed workout. Compare realized vs planned performance. "
        "Identify highlights and areas to watch. Be encouraging but honest. Never be punishing.",
        "",
    ]
    lines += _output_block(resolve_language(profile), ANALYSIS_SCHEMA)

    return PromptBundle(
        system=resolve_system_prompt(profile),
        user="\n".join(lines),
        schema=ANALYSIS_SCHEMA,
    )


# ---------------------------------------------------------------------------
# weekly-digest
# ---------------------------------------------------------------------------

def build_digest_prompt(
    week_start: date,
    today: date,
    done: Sequence[WorkoutWithExercises],
    planned: Sequence[Workout],
    analyses: Dict[Any, WorkoutAnalysis],
    profile: AthleteProfile,
) -> PromptBundle:
    completed = "\n\n".join(
        format_workout_block(item, analyses.get(item.workout.id)) for item in done
    )
    remaining = "\n".join(format_workout_header(w) for w in planned) or "None"

    lines = [
        "WEEKLY DIGEST REQUEST",
        "",
        f"WEEK: {week_start.isoformat()} to {today.isoformat()}",
        f"COMPLETED WORKOUTS ({len(done)}):",
        completed,
        "",
        f"MISSED/REMAINING PLANNED ({len(planned)}):",
        remaining,
        "",
        format_athlete_context(profile),
        "",
        "TASK: Create a weekly digest summarizing this athlete's training week. Be encouraging but honest. "
        "Highlight achievements and areas for improvement. Give actionable recommendations for next week.",
        "",
    ]
    lines += _output_block(resolve_language(profile), DIGEST_SCHEMA)

    return PromptBundle(
        system=resolve_system_prompt(profile),
        user="\n".join(lines),
        schema=DIGEST_SCHEMA,
    )
