"""create rate limit, question, consultation, milestone and md review event tables

Revision ID: 7e3a1f9c2b64
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7e3a1f9c2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('rate_limits'):
        op.create_table(
            'rate_limits',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('identifier', sa.String(length=255), nullable=False),
            sa.Column('platform', sa.String(length=20), nullable=False),
            sa.Column('window_start', sa.Date(), nullable=False),
            sa.Column('tier', sa.String(length=20), nullable=False),
            sa.Column('mode', sa.String(length=20), nullable=False),
            sa.Column('count', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint(
                'identifier', 'platform', 'window_start', name='uq_rate_limits_identifier_platform_day'
            ),
        )
        op.create_index(op.f('ix_rate_limits_id'), 'rate_limits', ['id'], unique=False)
        op.create_index(op.f('ix_rate_limits_identifier'), 'rate_limits', ['identifier'], unique=False)
        op.create_index(op.f('ix_rate_limits_window_start'), 'rate_limits', ['window_start'], unique=False)

    if not inspector.has_table('questions'):
        op.create_table(
            'questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('identifier', sa.String(length=255), nullable=False),
            sa.Column('platform', sa.String(length=20), nullable=False),
            sa.Column('mode', sa.String(length=20), nullable=False),
            sa.Column('question', sa.Text(), nullable=False),
            sa.Column('response', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_questions_id'), 'questions', ['id'], unique=False)
        op.create_index(op.f('ix_questions_identifier'), 'questions', ['identifier'], unique=False)
        op.create_index(op.f('ix_questions_created_at'), 'questions', ['created_at'], unique=False)

    if not inspector.has_table('consultations'):
        op.create_table(
            'consultations',
            sa.Column('consultation_id', sa.String(length=255), nullable=False),
            sa.Column('fid', sa.String(length=255), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=True),
            sa.Column('mode', sa.String(length=20), nullable=False),
            sa.Column('specialist_count', sa.Integer(), nullable=False),
            sa.Column('consensus_percentage', sa.Float(), nullable=True),
            sa.Column('participating_specialists', sa.JSON(), nullable=True),
            sa.Column('coordination_summary', sa.Text(), nullable=True),
            sa.Column('tier', sa.String(length=20), nullable=False),
            sa.Column('requires_md_review', sa.Boolean(), nullable=False),
            sa.Column('md_reviewed', sa.Boolean(), nullable=False),
            sa.Column('md_approved', sa.Boolean(), nullable=True),
            sa.Column('md_clinical_accuracy', sa.Integer(), nullable=True),
            sa.Column('md_reviewer_id', sa.String(length=255), nullable=True),
            sa.Column('md_feedback_notes', sa.Text(), nullable=True),
            sa.Column('md_reviewed_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('md_review_key', sa.String(length=128), nullable=True),
            sa.Column('is_private', sa.Boolean(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('consultation_id'),
        )
        op.create_index(op.f('ix_consultations_fid'), 'consultations', ['fid'], unique=False)
        op.create_index(op.f('ix_consultations_tier'), 'consultations', ['tier'], unique=False)
        op.create_index(op.f('ix_consultations_md_reviewed'), 'consultations', ['md_reviewed'], unique=False)
        op.create_index(op.f('ix_consultations_created_at'), 'consultations', ['created_at'], unique=False)

    if not inspector.has_table('feedback_milestones'):
        op.create_table(
            'feedback_milestones',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('milestone_id', sa.String(length=100), nullable=False),
            sa.Column('consultation_id', sa.String(length=255), nullable=False),
            sa.Column('patient_id', sa.String(length=255), nullable=False),
            sa.Column('milestone_day', sa.Integer(), nullable=False),
            sa.Column('pain_level', sa.Integer(), nullable=True),
            sa.Column('functional_score', sa.Integer(), nullable=True),
            sa.Column('adherence', sa.Float(), nullable=True),
            sa.Column('overall_progress', sa.String(length=50), nullable=True),
            sa.Column('satisfaction_so_far', sa.Integer(), nullable=True),
            sa.Column('difficulties_encountered', sa.Text(), nullable=True),
            sa.Column('concern_flags', sa.JSON(), nullable=True),
            sa.Column('milestone_achieved', sa.Boolean(), nullable=True),
            sa.Column('progress_status', sa.String(length=50), nullable=False),
            sa.Column('token_reward', sa.Float(), nullable=False),
            sa.Column('next_milestone_day', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.ForeignKeyConstraint(['consultation_id'], ['consultations.consultation_id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('milestone_id'),
            sa.UniqueConstraint('consultation_id', 'milestone_day', name='uq_feedback_milestones_consultation_day'),
        )
        op.create_index(op.f('ix_feedback_milestones_id'), 'feedback_milestones', ['id'], unique=False)
        op.create_index(
            op.f('ix_feedback_milestones_consultation_id'), 'feedback_milestones', ['consultation_id'], unique=False
        )
        op.create_index(op.f('ix_feedback_milestones_patient_id'), 'feedback_milestones', ['patient_id'], unique=False)

    if not inspector.has_table('md_review_events'):
        op.create_table(
            'md_review_events',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('consultation_id', sa.String(length=255), nullable=False),
            sa.Column('review_key', sa.String(length=128), nullable=False),
            sa.Column('reviewer_id', sa.String(length=255), nullable=False),
            sa.Column('approved', sa.Boolean(), nullable=False),
            sa.Column('clinical_accuracy', sa.Integer(), nullable=False),
            sa.Column('previous_tier', sa.String(length=20), nullable=False),
            sa.Column('new_tier', sa.String(length=20), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.ForeignKeyConstraint(['consultation_id'], ['consultations.consultation_id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('consultation_id', 'review_key', name='uq_md_review_events_consultation_key'),
        )
        op.create_index(op.f('ix_md_review_events_id'), 'md_review_events', ['id'], unique=False)
        op.create_index(
            op.f('ix_md_review_events_consultation_id'), 'md_review_events', ['consultation_id'], unique=False
        )


def downgrade() -> None:
    op.drop_index(op.f('ix_md_review_events_consultation_id'), table_name='md_review_events')
    op.drop_index(op.f('ix_md_review_events_id'), table_name='md_review_events')
    op.drop_table('md_review_events')

    op.drop_index(op.f('ix_feedback_milestones_patient_id'), table_name='feedback_milestones')
    op.drop_index(op.f('ix_feedback_milestones_consultation_id'), table_name='feedback_milestones')
    op.drop_index(op.f('ix_feedback_milestones_id'), table_name='feedback_milestones')
    op.drop_table('feedback_milestones')

    op.drop_index(op.f('ix_consultations_created_at'), table_name='consultations')
    op.drop_index(op.f('ix_consultations_md_reviewed'), table_name='consultations')
    op.drop_index(op.f('ix_consultations_tier'), table_name='consultations')
    op.drop_index(op.f('ix_consultations_fid'), table_name='consultations')
    op.drop_table('consultations')

    op.drop_index(op.f('ix_questions_created_at'), table_name='questions')
    op.drop_index(op.f('ix_questions_identifier'), table_name='questions')
    op.drop_index(op.f('ix_questions_id'), table_name='questions')
    op.drop_table('questions')

    op.drop_index(op.f('ix_rate_limits_window_start'), table_name='rate_limits')
    op.drop_index(op.f('ix_rate_limits_identifier'), table_name='rate_limits')
    op.drop_index(op.f('ix_rate_limits_id'), table_name='rate_limits')
    op.drop_table('rate_limits')
