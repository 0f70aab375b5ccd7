"""create teachhub schema

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b9d2'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('email', sa.String(length=320), nullable=False),
    sa.Column('password_hash', sa.String(length=255), nullable=True),
    sa.Column('role', sa.String(length=20), nullable=False, server_default='student'),
    sa.Column('access_token', sa.String(length=255), nullable=True),
    *_timestamps(),
    sa.CheckConstraint("role IN ('student', 'admin')", name='ck_users_role'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email'),
    sa.UniqueConstraint('access_token')
    )
    op.create_index('idx_users_role', 'users', ['role'], unique=False)

    # Hierarchy tables carry no foreign keys; cascade delete is done by the application
    op.create_table('batches',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('thumbnail_url', sa.String(length=1024), nullable=True),
    sa.Column('thumbnail_storage_key', sa.String(length=512), nullable=True),
    sa.Column('instructor_id', sa.Uuid(), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_batches_instructor', 'batches', ['instructor_id'], unique=False)
    op.create_index('idx_batches_created_at', 'batches', ['created_at'], unique=False)

    op.create_table('sections',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('batch_id', sa.Uuid(), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_sections_batch_position', 'sections', ['batch_id', 'position'], unique=False)

    op.create_table('lessons',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('section_id', sa.Uuid(), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('duration', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('video_url', sa.String(length=1024), nullable=True),
    sa.Column('video_storage_key', sa.String(length=512), nullable=True),
    sa.Column('is_live_enabled', sa.Boolean(), nullable=False, server_default='false'),
    sa.Column('live_platform', sa.String(length=20), nullable=True),
    sa.Column('live_join_url', sa.String(length=1024), nullable=True),
    sa.Column('live_start_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('live_status', sa.String(length=20), nullable=True),
    *_timestamps(),
    sa.CheckConstraint('duration >= 0', name='ck_lessons_duration'),
    sa.CheckConstraint("live_platform IN ('zoom', 'youtube', 'other')", name='ck_lessons_live_platform'),
    sa.CheckConstraint("live_status IN ('scheduled', 'live', 'ended')", name='ck_lessons_live_status'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_lessons_section_position', 'lessons', ['section_id', 'position'], unique=False)
    op.create_index('idx_lessons_live_status', 'lessons', ['live_status'], unique=False)

    op.create_table('notes',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=False, server_default=''),
    sa.Column('file_url', sa.String(length=1024), nullable=False),
    sa.Column('storage_key', sa.String(length=512), nullable=False),
    sa.Column('lesson_id', sa.Uuid(), nullable=False),
    *_timestamps(),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_notes_lesson', 'notes', ['lesson_id'], unique=False)

    op.create_table('enrollments',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('user_id', sa.Uuid(), nullable=False),
    sa.Column('batch_id', sa.Uuid(), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
    *_timestamps(),
    sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_enrollments_status'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('user_id', 'batch_id', name='uq_enrollments_user_batch')
    )
    op.create_index('idx_enrollments_batch_status', 'enrollments', ['batch_id', 'status'], unique=False)
    op.create_index('idx_enrollments_status', 'enrollments', ['status'], unique=False)

    op.create_table('notifications',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('user_id', sa.Uuid(), nullable=False),
    sa.Column('type', sa.String(length=30), nullable=False),
    sa.Column('message', sa.Text(), nullable=False),
    sa.Column('batch_id', sa.Uuid(), nullable=True),
    sa.Column('lesson_id', sa.Uuid(), nullable=True),
    sa.Column('read', sa.Boolean(), nullable=False, server_default='false'),
    *_timestamps(),
    sa.CheckConstraint(
        "type IN ('lesson_uploaded', 'note_added', 'live_scheduled', 'live_started', 'recording_uploaded')",
        name='ck_notifications_type',
    ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'], unique=False)
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'read'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_notifications_user_read', table_name='notifications')
    op.drop_index('idx_notifications_user_created', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('idx_enrollments_status', table_name='enrollments')
    op.drop_index('idx_enrollments_batch_status', table_name='enrollments')
    op.drop_table('enrollments')

    op.drop_index('idx_notes_lesson', table_name='notes')
    op.drop_table('notes')

    op.drop_index('idx_lessons_live_status', table_name='lessons')
    op.drop_index('idx_lessons_section_position', table_name='lessons')
    op.drop_table('lessons')

    op.drop_index('idx_sections_batch_position', table_name='sections')
    op.drop_table('sections')

    op.drop_index('idx_batches_created_at', table_name='batches')
    op.drop_index('idx_batches_instructor', table_name='batches')
    op.drop_table('batches')

    op.drop_index('idx_users_role', table_name='users')
    op.drop_table('users')
