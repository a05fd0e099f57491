"""
Prompt Builder tests.

Pure functions: no database, no model calls. Verifies the sections every
prompt must carry and the compact exercise line format.
"""
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from models import AthleteProfile, Exercise, Workout, WorkoutAnalysis
from services.ai_context import WorkoutWithExercises
from services.ai_prompts import (
    ANALYSIS_SCHEMA,
    DEFAULT_SYSTEM_PROMPT,
    DIGEST_SCHEMA,
    NO_HISTORY,
    NO_TREND,
    OUTPUT_HEADER,
    PROGRAM_SCHEMA,
    build_analysis_prompt,
    build_digest_prompt,
    build_program_prompt,
    format_exercise_line,
    format_profile_block,
    resolve_language,
    resolve_system_prompt,
)


def _profile(**overrides) -> AthleteProfile:
    fields = dict(
        language="en",
        age=30,
        weight_kg=Decimal("82.5"),
        height_cm=Decimal("180"),
        gender="female",
        weight_experience="advanced",
        current_frequency=4,
        current_split="PPL",
        goals_ranked=[{"goal": "Strength", "priority": 1}, {"goal": "Hypertrophy", "priority": 2}],
        available_days=["monday", "wednesday", "friday"],
        session_duration=75,
        equipment="Barbell, rack",
        sports_history=[{"sport": "Rowing", "years": 3, "level": "club"}],
    )
    fields.update(overrides)
    return AthleteProfile(**fields)


def _exercise(**overrides) -> Exercise:
    fields = dict(
        exercise_name="Squat",
        expected_sets=3,
        expected_reps=8,
        recommended_weight="80",
        rpe=8,
    )
    fields.update(overrides)
    return Exercise(**fields)


def _workout(on=date(2026, 3, 2), **overrides) -> Workout:
    fields = dict(id=uuid4(), name="Lower A", date=on, workout_type="Strength", status="done")
    fields.update(overrides)
    return Workout(**fields)


# ---------------------------------------------------------------------------
# Shared formatting
# ---------------------------------------------------------------------------

class TestSharedFormatting:
    def test_default_system_prompt(self):
        assert resolve_system_prompt(None) == DEFAULT_SYSTEM_PROMPT
        assert resolve_system_prompt(_profile(custom_coaching_prompt=None)) == DEFAULT_SYSTEM_PROMPT

    def test_custom_system_prompt_wins(self):
        profile = _profile(custom_coaching_prompt="You are a strict powerlifting coach.")
        assert resolve_system_prompt(profile) == "You are a strict powerlifting coach."

    def test_language_resolution(self):
        assert resolve_language(_profile(language="fr")) == "French (FR)"
        assert resolve_language(_profile(language="en")) == "English (EN)"
        assert resolve_language(None) == "French (FR)"

    def test_exercise_line_planned_and_realized(self):
        ex = _exercise(realized_sets=3, realized_reps=8, realized_weight=Decimal("82.5"))
        assert format_exercise_line(ex) == "Squat: planned 3x8@80kg RPE8 | realized 3x8@82.5kg"

    def test_exercise_line_not_recorded(self):
        ex = _exercise(recommended_weight=None)
        assert format_exercise_line(ex) == "Squat: planned 3x8@?kg RPE8 | realized not recorded"


# ---------------------------------------------------------------------------
# generate-program
# ---------------------------------------------------------------------------

class TestProgramPrompt:
    def test_profile_block_fields(self):
        block = format_profile_block(_profile())
        assert "Age: 30" in block
        assert "Weight: 82.5 kg" in block
        assert "Goals: 1. Strength, 2. Hypertrophy" in block
        assert "Available days: monday, wednesday, friday" in block
        assert "Sports history: Rowing (3y, club)" in block
        assert "Injuries/limitations: None" in block
        assert "Goal timeline: N/A" in block

    def test_empty_history_renders_literal(self):
        bundle = build_program_prompt(_profile(), [])
        assert "TRAINING HISTORY (last 8 weeks):\n" + NO_HISTORY in bundle.user

    def test_history_lines(self):
        workout = _workout()
        history = [WorkoutWithExercises(workout, [_exercise(realized_sets=3, realized_reps=8, realized_weight=80)])]
        bundle = build_program_prompt(_profile(), history)
        assert "2026-03-02 | Strength | Lower A" in bundle.user
        assert "  - Squat: planned 3x8@80kg RPE8 | realized 3x8@80kg" in bundle.user
        assert NO_HISTORY not in bundle.user

    def test_sections_and_schema(self):
        bundle = build_program_prompt(
            _profile(language="fr"),
            [],
            specific_instructions="No deadlifts",
            feedback="Too much volume last time",
        )
        assert bundle.user.startswith("ATHLETE PROFILE:")
        assert "TASK: Generate a complete, personalized workout program for this athlete." in bundle.user
        assert "SPECIFIC INSTRUCTIONS FROM ATHLETE: No deadlifts" in bundle.user
        assert "FEEDBACK ON PREVIOUS PROGRAM: Too much volume last time" in bundle.user
        assert "RESPOND IN: French (FR)" in bundle.user
        assert bundle.user.endswith(OUTPUT_HEADER + "\n" + PROGRAM_SCHEMA)
        assert bundle.schema == PROGRAM_SCHEMA

    def test_optional_sections_omitted(self):
        bundle = build_program_prompt(_profile(), [])
        assert "SPECIFIC INSTRUCTIONS" not in bundle.user
        assert "FEEDBACK ON PREVIOUS PROGRAM" not in bundle.user


# ---------------------------------------------------------------------------
# analyze-workout
# ---------------------------------------------------------------------------

class TestAnalysisPrompt:
    def test_no_trend_literal_and_no_profile(self):
        workout = _workout(notes="Felt heavy")
        bundle = build_analysis_prompt(workout, [_exercise(notes="knee ok")], [], profile=None)

        assert "WORKOUT COMPLETED:\nDate: 2026-03-02\nType: Strength\nName: Lower A" in bundle.user
        assert "Squat: planned 3x8@80kg RPE8 | realized not recorded | notes: knee ok" in bundle.user
        assert "WORKOUT NOTES: Felt heavy" in bundle.user
        assert "TREND (last 0 similar workouts):\n" + NO_TREND in bundle.user
        assert "ATHLETE CONTEXT" not in bundle.user
        assert "RESPOND IN: French (FR)" in bundle.user
        assert bundle.system == DEFAULT_SYSTEM_PROMPT
        assert bundle.user.endswith(ANALYSIS_SCHEMA)

    def test_trend_and_athlete_context(self):
        previous = [
            WorkoutWithExercises(
                _workout(on=date(2026, 2, 23)),
                [_exercise(realized_sets=3, realized_reps=8, realized_weight=77.5)],
            )
        ]
        bundle = build_analysis_prompt(_workout(), [_exercise()], previous, profile=_profile())
        assert "TREND (last 1 similar workouts):" in bundle.user
        assert "2026-02-23 | Lower A\n  - Squat: 3x8@77.5kg RPE8" in bundle.user
        assert "ATHLETE CONTEXT: advanced level, goals: Strength, Hypertrophy" in bundle.user


# ---------------------------------------------------------------------------
# weekly-digest
# ---------------------------------------------------------------------------

class TestDigestPrompt:
    def test_digest_sections(self):
        done = _workout()
        analysis = WorkoutAnalysis(workout_id=done.id, performance_rating="exceeded", summary="Great squat day")
        planned = _workout(on=date(2026, 3, 4), name="Upper B", status="planned")

        bundle = build_digest_prompt(
            date(2026, 3, 1),
            date(2026, 3, 7),
            [WorkoutWithExercises(done, [_exercise()])],
            [planned],
            {done.id: analysis},
            _profile(),
        )

        assert bundle.user.startswith("WEEKLY DIGEST REQUEST")
        assert "WEEK: 2026-03-01 to 2026-03-07" in bundle.user
        assert "COMPLETED WORKOUTS (1):" in bundle.user
        assert "  [Analysis: exceeded - Great squat day]" in bundle.user
        assert "MISSED/REMAINING PLANNED (1):\n2026-03-04 | Strength | Upper B" in bundle.user
        assert "RESPOND IN: English (EN)" in bundle.user
        assert bundle.user.endswith(DIGEST_SCHEMA)

    def test_no_planned_renders_none(self):
        done = _workout()
        bundle = build_digest_prompt(
            date(2026, 3, 1), date(2026, 3, 7),
            [WorkoutWithExercises(done, [])], [], {}, _profile(),
        )
        assert "MISSED/REMAINING PLANNED (0):\nNone" in bundle.user
