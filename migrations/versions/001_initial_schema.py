"""Initial ScoreHub schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Users, activities (soft-deletable), participants, score records and
user/activity membership links.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === USERS ===
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('access_code', sa.String(6), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_access_code', 'users', ['access_code'], unique=True)

    # === ACTIVITIES ===
    op.create_table(
        'activities',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('pin', sa.String(6), nullable=False),
        sa.Column('owner_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted', sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_activities_pin', 'activities', ['pin'], unique=True)
    op.create_index('ix_activities_owner_id', 'activities', ['owner_id'])
    # (owner, name, description-or-empty) is unique among visible activities.
    op.create_index(
        'uq_activities_owner_name_description_visible',
        'activities',
        ['owner_id', 'name', sa.text("coalesce(description, '')")],
        unique=True,
        sqlite_where=sa.text('deleted = 0'),
        postgresql_where=sa.text('deleted IS false'),
    )

    # === PARTICIPANTS ===
    op.create_table(
        'participants',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('activity_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('name_key', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('activity_id', 'name_key', name='uq_participants_activity_name_key'),
    )
    op.create_index('ix_participants_activity_id', 'participants', ['activity_id'])
    op.create_index('ix_participants_activity_created', 'participants', ['activity_id', 'created_at'])

    # === SCORE RECORDS ===
    op.create_table(
        'score_records',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('participant_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('participants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('activity_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('points', sa.Integer, nullable=False),
        sa.Column('reason', sa.Text, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_score_records_participant_id', 'score_records', ['participant_id'])
    op.create_index('ix_score_records_activity_id', 'score_records', ['activity_id'])
    op.create_index('ix_score_records_activity_created', 'score_records', ['activity_id', 'created_at'])

    # === USER ACTIVITIES (membership) ===
    op.create_table(
        'user_activities',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('activity_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'activity_id', name='uq_user_activities_user_activity'),
    )
    op.create_index('ix_user_activities_user_id', 'user_activities', ['user_id'])
    op.create_index('ix_user_activities_activity_id', 'user_activities', ['activity_id'])


def downgrade() -> None:
    op.drop_table('user_activities')
    op.drop_table('score_records')
    op.drop_table('participants')
    op.drop_index('uq_activities_owner_name_description_visible', table_name='activities')
    op.drop_table('activities')
    op.drop_table('users')
