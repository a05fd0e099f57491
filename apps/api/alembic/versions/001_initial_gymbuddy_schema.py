"""Initial GymBuddy schema: users, profiles, workouts, AI programs, analyses, usage log

Revision ID: 001_initial_gymbuddy
Revises:
Create Date: 2026-02-01

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_gymbuddy'
down_revision = None
branch_labels = None
depends_on = None


def _uuid_pk():
    return sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False)


def _owner():
    return sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False)


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        'app_user',
        _uuid_pk(),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('display_name', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_app_user_email'),
    )

    op.create_table(
        'athlete_profile',
        _uuid_pk(),
        _owner(),
        sa.Column('language', sa.Text(), nullable=False, server_default='fr'),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('weight_kg', sa.Numeric(), nullable=True),
        sa.Column('height_cm', sa.Numeric(), nullable=True),
        sa.Column('gender', sa.Text(), nullable=True),
        sa.Column('weight_experience', sa.Text(), nullable=True),
        sa.Column('current_frequency', sa.Integer(), nullable=True),
        sa.Column('current_split', sa.Text(), nullable=True),
        sa.Column('injuries_limitations', sa.Text(), nullable=True),
        sa.Column('goals_ranked', postgresql.JSONB(), nullable=True),
        sa.Column('goal_timeline', sa.Text(), nullable=True),
        sa.Column('available_days', postgresql.JSONB(), nullable=True),
        sa.Column('session_duration', sa.Integer(), nullable=True),
        sa.Column('equipment', sa.Text(), nullable=True),
        sa.Column('sports_history', postgresql.JSONB(), nullable=True),
        sa.Column('nutrition_context', sa.Text(), nullable=True),
        sa.Column('additional_notes', sa.Text(), nullable=True),
        sa.Column('custom_coaching_prompt', sa.Text(), nullable=True),
        sa.Column('onboarding_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_athlete_profile_user_id'),
    )

    op.create_table(
        'ai_program',
        _uuid_pk(),
        _owner(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('split_type', sa.Text(), nullable=True),
        sa.Column('duration_weeks', sa.Integer(), nullable=True),
        sa.Column('progression_notes', sa.Text(), nullable=True),
        sa.Column('deload_strategy', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='proposed'),
        sa.Column('ai_response', postgresql.JSONB(), nullable=False),
        sa.Column('generation_prompt', sa.Text(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "status IN ('proposed', 'active', 'archived', 'rejected')",
            name='ck_ai_program_status',
        ),
    )
    op.create_index('ix_ai_program_user_status', 'ai_program', ['user_id', 'status'])

    op.create_table(
        'ai_program_week',
        _uuid_pk(),
        sa.Column('program_id', postgresql.UUID(as_uuid=True), nullable=False),
        _owner(),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('theme', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['program_id'], ['ai_program.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('program_id', 'week_number', name='uq_ai_program_week_program_week'),
    )

    op.create_table(
        'workout',
        _uuid_pk(),
        _owner(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('workout_type', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='planned'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('source', sa.Text(), nullable=False, server_default='manual'),
        sa.Column('ai_program_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('ai_week_number', sa.Integer(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ai_program_id'], ['ai_program.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_workout_user_date', 'workout', ['user_id', 'date'])
    op.create_index('ix_workout_user_status', 'workout', ['user_id', 'status'])

    op.create_table(
        'exercise',
        _uuid_pk(),
        _owner(),
        sa.Column('workout_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('workout_name', sa.Text(), nullable=True),
        sa.Column('exercise_name', sa.Text(), nullable=False),
        sa.Column('expected_sets', sa.Integer(), nullable=True),
        sa.Column('expected_reps', sa.Integer(), nullable=True),
        sa.Column('recommended_weight', sa.Text(), nullable=True),
        sa.Column('rest_in_seconds', sa.Integer(), nullable=True),
        sa.Column('rpe', sa.Float(), nullable=True),
        sa.Column('realized_sets', sa.Integer(), nullable=True),
        sa.Column('realized_reps', sa.Integer(), nullable=True),
        sa.Column('realized_weight', sa.Numeric(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workout.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_exercise_workout_id', 'exercise', ['workout_id'])

    op.create_table(
        'workout_analysis',
        _uuid_pk(),
        _owner(),
        sa.Column('workout_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('performance_rating', sa.Text(), nullable=False),
        sa.Column('highlights', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('watch_items', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('suggested_adjustments', postgresql.JSONB(), nullable=False, server_default='[]'),
        sa.Column('coaching_tip', sa.Text(), nullable=True),
        sa.Column('ai_response', postgresql.JSONB(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workout.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_workout_analysis_workout_id', 'workout_analysis', ['workout_id'])

    # Append-only ledger; the quota guard counts today's rows per user
    op.create_table(
        'ai_usage_log',
        _uuid_pk(),
        _owner(),
        sa.Column('function_name', sa.Text(), nullable=False),
        sa.Column('model', sa.Text(), nullable=False),
        sa.Column('input_tokens', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('output_tokens', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('estimated_cost_eur', sa.Float(), nullable=False, server_default='0'),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_usage_log_user_created', 'ai_usage_log', ['user_id', 'created_at'])

    op.create_table(
        'ai_recommendation',
        _uuid_pk(),
        _owner(),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('context', postgresql.JSONB(), nullable=True),
        sa.Column('priority', sa.Text(), nullable=False, server_default='medium'),
        _created_at(),
        sa.ForeignKeyConstraint(['user_id'], ['app_user.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('ai_recommendation')
    op.drop_index('ix_ai_usage_log_user_created', table_name='ai_usage_log')
    op.drop_table('ai_usage_log')
    op.drop_index('ix_workout_analysis_workout_id', table_name='workout_analysis')
    op.drop_table('workout_analysis')
    op.drop_index('ix_exercise_workout_id', table_name='exercise')
    op.drop_table('exercise')
    op.drop_index('ix_workout_user_status', table_name='workout')
    op.drop_index('ix_workout_user_date', table_name='workout')
    op.drop_table('workout')
    op.drop_table('ai_program_week')
    op.drop_index('ix_ai_program_user_status', table_name='ai_program')
    op.drop_table('ai_program')
    op.drop_table('athlete_profile')
    op.drop_table('app_user')
