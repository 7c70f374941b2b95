"""initial_survey_schema

Revision ID: 3b1f0c9d2a47
Revises:
Create Date: 2026-03-02 10:14:52.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f0c9d2a47'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_teams_id', 'teams', ['id'])
    op.create_index('ix_teams_is_active', 'teams', ['is_active'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'MEMBER', 'VIEWER', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_team_id', 'users', ['team_id'])

    op.create_table(
        'survey_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('version', sa.String(length=20), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'ARCHIVED', name='templatestatus'), nullable=False),
        sa.Column('category', sa.Enum('STUDENT', 'CUSTOMER', 'EMPLOYEE', 'MARKET', 'OTHER', name='templatecategory'), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('created_by_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_survey_templates_id', 'survey_templates', ['id'])
    op.create_index('ix_survey_templates_status', 'survey_templates', ['status'])
    op.create_index('ix_survey_templates_category', 'survey_templates', ['category'])
    op.create_index('ix_survey_templates_team_id', 'survey_templates', ['team_id'])
    op.create_index('ix_survey_templates_created_by_id', 'survey_templates', ['created_by_id'])

    op.create_table(
        'survey_responses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('collected_by_id', sa.Integer(), nullable=True),
        sa.Column('client_id', sa.String(length=64), nullable=True),
        sa.Column('device_id', sa.String(length=64), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completion_time_seconds', sa.Float(), nullable=True),
        sa.Column('sections_completed', sa.JSON(), nullable=False),
        sa.Column('device_info', sa.JSON(), nullable=True),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('contact_info', sa.JSON(), nullable=True),
        sa.Column('request_metadata', sa.JSON(), nullable=True),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('top_ranked', sa.JSON(), nullable=False),
        sa.Column('sync_status', sa.Enum('PENDING', 'SYNCED', 'FAILED', name='syncstatus'), nullable=False),
        sa.Column('sync_history', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['template_id'], ['survey_templates.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['collected_by_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('device_id', 'start_time', name='uq_survey_responses_natural_key'),
    )
    op.create_index('ix_survey_responses_id', 'survey_responses', ['id'])
    op.create_index('ix_survey_responses_collected_by_id', 'survey_responses', ['collected_by_id'])
    op.create_index('ix_survey_responses_device_id', 'survey_responses', ['device_id'])
    op.create_index('ix_survey_responses_template_created', 'survey_responses', ['template_id', 'created_at'])
    op.create_index('ix_survey_responses_team_status', 'survey_responses', ['team_id', 'sync_status'])


def downgrade() -> None:
    op.drop_table('survey_responses')
    op.drop_table('survey_templates')
    op.drop_table('users')
    op.drop_table('teams')
    # Postgres keeps enum types after their tables are gone
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('syncstatus', 'templatecategory', 'templatestatus', 'userrole'):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
