"""create stage lifecycle schema

Revision ID: 3f2a9c1d7e41
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


APPLICATION_STATUSES = ('active', 'on_hold', 'rejected', 'offer', 'archived')
STAGE_STATUSES = ('pending', 'active', 'completed', 'skipped', 'cancelled')


def _in_list(column: str, values: Sequence[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'companies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_companies_user_id', 'companies', ['user_id'])
    op.create_index('ix_companies_name', 'companies', ['name'])

    op.create_table(
        'jobs',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('company_id', UUID(as_uuid=True), sa.ForeignKey('companies.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('source', sa.String(length=255), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_jobs_user_id', 'jobs', ['user_id'])
    op.create_index('ix_jobs_company_id', 'jobs', ['company_id'])
    op.create_index('ix_jobs_title', 'jobs', ['title'])

    op.create_table(
        'resumes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_resumes_user_id', 'resumes', ['user_id'])

    op.create_table(
        'stage_templates',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_stage_templates_user_id', 'stage_templates', ['user_id'])
    op.create_index('ix_stage_templates_order', 'stage_templates', ['order'])

    op.create_table(
        'applications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('job_id', UUID(as_uuid=True), nullable=False),
        sa.Column('resume_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('current_stage_id', UUID(as_uuid=True), nullable=True),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(_in_list('status', APPLICATION_STATUSES), name='ck_applications_status'),
    )
    op.create_index('ix_applications_user_id', 'applications', ['user_id'])
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_resume_id', 'applications', ['resume_id'])
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index('ix_applications_applied_at', 'applications', ['applied_at'])
    op.create_index('ix_applications_created_at', 'applications', ['created_at'])

    op.create_table(
        'application_stages',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('application_id', UUID(as_uuid=True), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('stage_template_id', UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(_in_list('status', STAGE_STATUSES), name='ck_application_stages_status'),
    )
    op.create_index('ix_application_stages_application_id', 'application_stages', ['application_id'])
    op.create_index('ix_application_stages_stage_template_id', 'application_stages', ['stage_template_id'])
    op.create_index('ix_application_stages_status', 'application_stages', ['status'])
    op.create_index('ix_application_stages_created_at', 'application_stages', ['created_at'])
    op.create_index(
        'ix_application_stages_application_order',
        'application_stages',
        ['application_id', 'order', 'created_at']
    )

    # Added after both tables exist; the two tables reference each other
    op.create_foreign_key(
        'fk_applications_current_stage_id',
        'applications', 'application_stages',
        ['current_stage_id'], ['id'],
        ondelete='SET NULL'
    )

    op.create_table(
        'comments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('application_id', UUID(as_uuid=True), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('stage_id', UUID(as_uuid=True), sa.ForeignKey('application_stages.id', ondelete='SET NULL'), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])
    op.create_index('ix_comments_application_id', 'comments', ['application_id'])
    op.create_index('ix_comments_stage_id', 'comments', ['stage_id'])
    op.create_index('ix_comments_created_at', 'comments', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('comments')
    op.drop_constraint('fk_applications_current_stage_id', 'applications', type_='foreignkey')
    op.drop_table('application_stages')
    op.drop_table('applications')
    op.drop_table('stage_templates')
    op.drop_table('resumes')
    op.drop_table('jobs')
    op.drop_table('companies')
