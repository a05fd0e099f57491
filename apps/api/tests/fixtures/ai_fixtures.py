"""Scripted language-model client and canned model payloads for AI tests."""
import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Union

from models import AIUsageLog
from services.llm_client import LLMCompletion


# ---------------------------------------------------------------------------
# Fake language model
# ---------------------------------------------------------------------------

@dataclass
class RecordedCall:
    system: str
    user: str
    temperature: float
    max_tokens: int
    model: str


@dataclass
class FakeLLMClient:
    """Replays queued responses in order. A queued exception is raised."""

    responses: List[Union[str, LLMCompletion, Exception]] = field(default_factory=list)
    calls: List[RecordedCall] = field(default_factory=list)

    def queue(self, *responses: Union[str, Dict[str, Any], LLMCompletion, Exception]) -> "FakeLLMClient":
        for r in responses:
            self.responses.append(json.dumps(r) if isinstance(r, dict) else r)
        return self

    def complete(self, system, user, temperature, max_tokens, model) -> LLMCompletion:
        self.calls.append(RecordedCall(system, user, temperature, max_tokens, model))
        if not self.responses:
            raise AssertionError("FakeLLMClient called more times than scripted")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, LLMCompletion):
            return response
        return LLMCompletion(text=response, input_tokens=100, output_tokens=50, model=model)


# ---------------------------------------------------------------------------
# Canned model payloads
# ---------------------------------------------------------------------------

def make_program_payload(weeks: int = 2) -> Dict[str, Any]:
    return {
        "name": "Strength Foundations",
        "description": "Upper/lower split focused on compound lifts",
        "split_type": "Upper/Lower",
        "duration_weeks": weeks,
        "progression_notes": "Add 2.5kg when all sets are completed",
        "deload_strategy": "Reduce volume by 40% in the last week",
        "weeks": [
            {
                "week_number": n,
                "theme": "Volume phase" if n == 1 else "Intensity phase",
                "workouts": [
                    {
                        "day_of_week": "monday",
                        "name": "Upper A",
                        "workout_type": "Strength",
                        "exercises": [
                            {
                                "exercise_name": "Bench Press",
                                "expected_sets": 4,
                                "expected_reps": 8,
                                "recommended_weight": "70",
                                "rest_in_seconds": 120,
                                "rpe": 8,
                            },
                            {
                                "exercise_name": "Barbell Row",
                                "expected_sets": 3,
                                "expected_reps": 10,
                                "recommended_weight": None,
                                "rest_in_seconds": 90,
                                "rpe": 7,
                            },
                        ],
                    },
                    {
                        "day_of_week": "thursday",
                        "name": "Lower A",
                        "workout_type": "Strength",
                        "exercises": [
                            {
                                "exercise_name": "Squat",
                                "expected_sets": 5,
                                "expected_reps": 5,
                                "recommended_weight": "100",
                                "rest_in_seconds": 180,
                                "rpe": 8,
                            },
                        ],
                    },
                ],
            }
            for n in range(1, weeks + 1)
        ],
    }


def make_analysis_payload() -> Dict[str, Any]:
    return {
        "summary": "Solid session, every set completed as planned.",
        "performance_rating": "on_track",
        "highlights": [
            {"exercise_name": "Bench Press", "observation": "All reps at target load", "trend": "improving"},
        ],
        "watch_items": [],
        "coaching_tip": "Keep the same load next week and focus on bar speed.",
    }


def make_digest_payload() -> Dict[str, Any]:
    return {
        "week_summary": "Two strong sessions this week.",
        "overall_rating": "good",
        "workouts_completed": 2,
        "workouts_planned": 1,
        "key_achievements": ["Squat volume up"],
        "areas_to_improve": ["One missed session"],
        "recommendations": ["Schedule sessions earlier in the day"],
        "motivational_note": "Consistency is building.",
    }


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def seed_usage(db_session, user, count: int, function_name: str = "generate-program") -> None:
    """Add `count` usage-ledger rows stamped now, as if that many calls were accepted today."""
    for _ in range(count):
        db_session.add(AIUsageLog(
            user_id=user.id, function_name=function_name, model="test-model",
            input_tokens=1, output_tokens=1, estimated_cost_eur=0.0,
        ))
    db_session.commit()
