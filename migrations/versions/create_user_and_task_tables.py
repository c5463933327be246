"""Create users, trainee profiles, tasks and task submissions

Revision ID: create_user_and_task_tables

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_user_and_task_tables'
down_revision = None
branch_labels = None
depends_on = None

ENUM_TYPES = (
    'submission_status',
    'task_frequency',
    'task_status',
    'task_priority',
    'task_type',
    'user_role',
)


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(50), nullable=True),
        sa.Column('last_name', sa.String(50), nullable=True),
        sa.Column('role', sa.Enum('coach', 'trainee', 'admin', name='user_role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)

    op.create_table(
        'trainee_profiles',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('fitness_level', sa.String(20), nullable=True),
        sa.Column('goals', sa.JSON(), nullable=True),
        sa.Column('weight_kg', sa.DECIMAL(6, 2), nullable=True),
        sa.Column('height_cm', sa.DECIMAL(6, 2), nullable=True),
        sa.Column('equipment', sa.JSON(), nullable=True),
        sa.Column('dietary_restrictions', sa.JSON(), nullable=True),
        sa.Column('minutes_per_day', sa.Integer(), nullable=True),
        sa.Column('days_per_week', sa.Integer(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_trainee_profiles_id'), 'trainee_profiles', ['id'], unique=False)

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'task_type',
            sa.Enum(
                'workout', 'meal_log', 'weight_check', 'progress_photo', 'measurement',
                'habit_tracking', 'reflection', 'education', 'goal_setting', 'custom',
                name='task_type',
            ),
            nullable=False,
        ),
        sa.Column('coach_id', sa.String(36), nullable=False),
        sa.Column('trainee_id', sa.String(36), nullable=False),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', 'urgent', name='task_priority'), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'in_progress', 'completed', 'overdue', 'cancelled', name='task_status'),
            nullable=False,
        ),
        sa.Column(
            'frequency',
            sa.Enum('once', 'daily', 'weekly', 'monthly', 'custom', name='task_frequency'),
            nullable=False,
        ),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('estimated_minutes', sa.Integer(), nullable=True),
        sa.Column('task_config', sa.JSON(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('is_visible', sa.Boolean(), nullable=False),
        sa.Column('requires_approval', sa.Boolean(), nullable=False),
        sa.Column('max_submissions', sa.Integer(), nullable=False),
        sa.Column('allow_late_submission', sa.Boolean(), nullable=False),
        sa.Column('reminder_settings', sa.JSON(), nullable=True),
        sa.Column('recurrence_pattern', sa.JSON(), nullable=True),
        sa.Column('completion_data', sa.JSON(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('parent_task_id', sa.String(36), nullable=True),
        sa.Column('sequence_number', sa.Integer(), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['coach_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['trainee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_task_id'], ['tasks.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'title', 'task_type', 'coach_id', 'trainee_id', 'priority', 'status', 'due_date', 'parent_task_id'):
        op.create_index(op.f(f'ix_tasks_{column}'), 'tasks', [column], unique=False)

    op.create_table(
        'task_submissions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('task_id', sa.String(36), nullable=False),
        sa.Column('submitted_by_id', sa.String(36), nullable=False),
        sa.Column(
            'status',
            sa.Enum('submitted', 'approved', 'rejected', 'needs_revision', name='submission_status'),
            nullable=False,
        ),
        sa.Column('submission_data', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('attachments', sa.JSON(), nullable=True),
        sa.Column('time_taken', sa.Integer(), nullable=True),
        sa.Column('difficulty_rating', sa.Integer(), nullable=True),
        sa.Column('satisfaction_rating', sa.Integer(), nullable=True),
        sa.Column('reviewed_by_id', sa.String(36), nullable=True),
        sa.Column('coach_feedback', sa.Text(), nullable=True),
        sa.Column('coach_rating', sa.Integer(), nullable=True),
        sa.Column('points_awarded', sa.Integer(), nullable=False),
        sa.Column('is_latest', sa.Boolean(), nullable=False),
        sa.Column('submission_number', sa.Integer(), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['submitted_by_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reviewed_by_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'task_id', 'submitted_by_id', 'status'):
        op.create_index(op.f(f'ix_task_submissions_{column}'), 'task_submissions', [column], unique=False)


def downgrade() -> None:
    op.drop_table('task_submissions')
    op.drop_table('tasks')
    op.drop_table('trainee_profiles')
    op.drop_table('users')
    bind = op.get_bind()
    for name in ENUM_TYPES:
        sa.Enum(name=name).drop(bind, checkfirst=True)
