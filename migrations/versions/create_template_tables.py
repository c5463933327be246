"""Create templates, template assignments and template recommendations

Revision ID: create_template_tables

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_template_tables'
down_revision = 'create_user_and_task_tables'
branch_labels = None
depends_on = None

ENUM_TYPES = ('assignment_status', 'difficulty_level', 'template_status', 'template_type')


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'templates',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'template_type',
            sa.Enum(
                'weight_loss', 'muscle_gain', 'strength_building', 'endurance', 'general_fitness',
                'cutting', 'bulking', 'maintenance', 'rehabilitation', 'beginner_program',
                'intermediate_program', 'advanced_program',
                name='template_type',
            ),
            nullable=False,
        ),
        sa.Column('coach_id', sa.String(36), nullable=False),
        sa.Column(
            'status',
            sa.Enum('draft', 'active', 'archived', 'published', name='template_status'),
            nullable=False,
        ),
        sa.Column('duration_weeks', sa.Integer(), nullable=False),
        sa.Column(
            'difficulty',
            sa.Enum('beginner', 'intermediate', 'advanced', name='difficulty_level'),
            nullable=False,
        ),
        sa.Column('schedule', sa.JSON(), nullable=False),
        sa.Column('target_criteria', sa.JSON(), nullable=False),
        sa.Column('nutrition_targets', sa.JSON(), nullable=False),
        sa.Column('fitness_targets', sa.JSON(), nullable=False),
        sa.Column('equipment_required', sa.JSON(), nullable=True),
        sa.Column('prerequisites', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('usage_count', sa.Integer(), nullable=False),
        sa.Column('average_rating', sa.DECIMAL(3, 2), nullable=False),
        sa.Column('rating_count', sa.Integer(), nullable=False),
        sa.Column('estimated_weekly_cost', sa.DECIMAL(8, 2), nullable=True),
        sa.Column('success_rate', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['coach_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'name', 'template_type', 'coach_id', 'status', 'difficulty'):
        op.create_index(op.f(f'ix_templates_{column}'), 'templates', [column], unique=False)

    op.create_table(
        'template_assignments',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('template_id', sa.String(36), nullable=False),
        sa.Column('trainee_id', sa.String(36), nullable=False),
        sa.Column('coach_id', sa.String(36), nullable=False),
        sa.Column(
            'status',
            sa.Enum('scheduled', 'active', 'paused', 'completed', 'cancelled', name='assignment_status'),
            nullable=False,
        ),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('customizations', sa.JSON(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('progress', sa.JSON(), nullable=True),
        sa.Column('auto_adjustments', sa.JSON(), nullable=True),
        sa.Column('actual_start_date', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['template_id'], ['templates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['trainee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['coach_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'template_id', 'trainee_id', 'coach_id', 'status', 'start_date'):
        op.create_index(op.f(f'ix_template_assignments_{column}'), 'template_assignments', [column], unique=False)

    op.create_table(
        'template_recommendations',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('template_id', sa.String(36), nullable=False),
        sa.Column('trainee_id', sa.String(36), nullable=False),
        sa.Column('coach_id', sa.String(36), nullable=False),
        sa.Column('score', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('confidence', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('matching_details', sa.JSON(), nullable=False),
        sa.Column('viewed', sa.Boolean(), nullable=False),
        sa.Column('accepted', sa.Boolean(), nullable=False),
        sa.Column('dismissed', sa.Boolean(), nullable=False),
        sa.Column('coach_feedback', sa.Text(), nullable=True),
        sa.Column('is_auto_generated', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('viewed_at', sa.DateTime(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('dismissed_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['template_id'], ['templates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['trainee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['coach_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('id', 'template_id', 'trainee_id', 'coach_id'):
        op.create_index(
            op.f(f'ix_template_recommendations_{column}'), 'template_recommendations', [column], unique=False
        )


def downgrade() -> None:
    op.drop_table('template_recommendations')
    op.drop_table('template_assignments')
    op.drop_table('templates')
    bind = op.get_bind()
    for name in ENUM_TYPES:
        sa.Enum(name=name).drop(bind, checkfirst=True)
