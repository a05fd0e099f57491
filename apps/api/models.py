from sqlalchemy import CheckConstraint, Column, Integer, Boolean, Float, Date, DateTime, ForeignKey, Numeric, Text, Index, UniqueConstraint, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB
from core.database import Base
import uuid
from datetime import datetime, timezone

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "app_user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    display_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    profile = relationship("AthleteProfile", back_populates="user", uselist=False)


class AthleteProfile(Base):
    """
    Onboarding profile that feeds every AI prompt.

    At most one row per user. ``language`` drives the RESPOND IN line and
    ``custom_coaching_prompt`` replaces the default system prompt.
    """

    __tablename__ = "athlete_profile"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, unique=True)

    language = Column(Text, default="fr", nullable=False)  # 'fr' | 'en'
    age = Column(Integer, nullable=True)
    weight_kg = Column(Numeric, nullable=True)
    height_cm = Column(Numeric, nullable=True)
    gender = Column(Text, nullable=True)

    weight_experience = Column(Text, nullable=True)  # beginner / intermediate / advanced
    current_frequency = Column(Integer, nullable=True)  # days per week
    current_split = Column(Text, nullable=True)
    injuries_limitations = Column(Text, nullable=True)

    goals_ranked = Column(JSONType, nullable=True)  # [{"goal": str, "priority": int}]
    goal_timeline = Column(Text, nullable=True)
    available_days = Column(JSONType, nullable=True)  # ["monday", ...]
    session_duration = Column(Integer, nullable=True)  # minutes
    equipment = Column(Text, nullable=True)
    sports_history = Column(JSONType, nullable=True)  # [{"sport", "years", "level"}]
    nutrition_context = Column(Text, nullable=True)
    additional_notes = Column(Text, nullable=True)
    custom_coaching_prompt = Column(Text, nullable=True)

    onboarding_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    user = relationship("User", back_populates="profile")


class Workout(Base):
    __tablename__ = "workout"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    workout_type = Column(Text, nullable=True)  # Strength / Cardio / Flexibility / Mixed
    status = Column(Text, default="planned", nullable=False)  # planned / done / archived
    notes = Column(Text, nullable=True)
    source = Column(Text, default="manual", nullable=False)  # manual / ai_generated / import
    ai_program_id = Column(Uuid(as_uuid=True), ForeignKey("ai_program.id", ondelete="SET NULL"), nullable=True)
    ai_week_number = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    exercises = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Exercise.position",
    )

    __table_args__ = (
        Index("ix_workout_user_date", "user_id", "date"),
        Index("ix_workout_user_status", "user_id", "status"),
    )


class Exercise(Base):
    __tablename__ = "exercise"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    workout_id = Column(Uuid(as_uuid=True), ForeignKey("workout.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    workout_name = Column(Text, nullable=True)
    exercise_name = Column(Text, nullable=False)

    expected_sets = Column(Integer, nullable=True)
    expected_reps = Column(Integer, nullable=True)
    recommended_weight = Column(Text, nullable=True)  # free text: "80", "bodyweight", "RPE 8"
    rest_in_seconds = Column(Integer, nullable=True)
    rpe = Column(Float, nullable=True)

    realized_sets = Column(Integer, nullable=True)
    realized_reps = Column(Integer, nullable=True)
    realized_weight = Column(Numeric, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    workout = relationship("Workout", back_populates="exercises")

    __table_args__ = (
        Index("ix_exercise_workout_id", "workout_id"),
    )


class AIProgram(Base):
    """
    Multi-week program proposed by the model.

    Lifecycle: proposed -> active | rejected, active -> archived.
    ``ai_response`` holds the validated model JSON verbatim and is the
    source of truth when the program is expanded onto the calendar.
    """

    __tablename__ = "ai_program"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    split_type = Column(Text, nullable=True)
    duration_weeks = Column(Integer, nullable=True)
    progression_notes = Column(Text, nullable=True)
    deload_strategy = Column(Text, nullable=True)
    status = Column(Text, default="proposed", nullable=False)
    ai_response = Column(JSONType, nullable=False)
    generation_prompt = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    weeks = relationship("AIProgramWeek", back_populates="program", order_by="AIProgramWeek.week_number")

    __table_args__ = (
        Index("ix_ai_program_user_status", "user_id", "status"),
        CheckConstraint(
            "status IN ('proposed', 'active', 'archived', 'rejected')",
            name="ck_ai_program_status",
        ),
    )


class AIProgramWeek(Base):
    __tablename__ = "ai_program_week"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id = Column(Uuid(as_uuid=True), ForeignKey("ai_program.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    week_number = Column(Integer, nullable=False)
    theme = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)

    program = relationship("AIProgram", back_populates="weeks")

    __table_args__ = (
        UniqueConstraint("program_id", "week_number", name="uq_ai_program_week_program_week"),
    )


class WorkoutAnalysis(Base):
    """Post-workout analysis. Append-only: every request creates a new row."""

    __tablename__ = "workout_analysis"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    workout_id = Column(Uuid(as_uuid=True), ForeignKey("workout.id", ondelete="CASCADE"), nullable=False)
    summary = Column(Text, nullable=False)
    performance_rating = Column(Text, nullable=False)
    highlights = Column(JSONType, nullable=False, default=list)
    watch_items = Column(JSONType, nullable=False, default=list)
    suggested_adjustments = Column(JSONType, nullable=False, default=list)
    coaching_tip = Column(Text, nullable=True)
    ai_response = Column(JSONType, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_workout_analysis_workout_id", "workout_id"),
    )


class AIUsageLog(Base):
    """
    One row per accepted AI call. Append-only.

    The quota guard counts today's rows (UTC) per user.
    """

    __tablename__ = "ai_usage_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    function_name = Column(Text, nullable=False)  # generate-program / analyze-workout / weekly-digest
    model = Column(Text, nullable=False)
    input_tokens = Column(Integer, default=0, nullable=False)
    output_tokens = Column(Integer, default=0, nullable=False)
    estimated_cost_eur = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ai_usage_log_user_created", "user_id", "created_at"),
    )


class AIRecommendation(Base):
    __tablename__ = "ai_recommendation"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    type = Column(Text, nullable=False)  # progression / ...
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    context = Column(JSONType, nullable=True)
    priority = Column(Text, default="medium", nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
