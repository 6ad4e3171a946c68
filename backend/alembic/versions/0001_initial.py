"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'competitions',
        sa.Column('id', sa.String(length=40), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('voting_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('voting_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('max_photos_per_user', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_competitions_status', 'competitions', ['status'])
    op.create_index('ix_competitions_start_date', 'competitions', ['start_date'])

    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=40), primary_key=True),
        sa.Column(
            'competition_id',
            sa.String(length=40),
            sa.ForeignKey('competitions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('max_photos_per_user', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_categories_competition_id', 'categories', ['competition_id'])

    op.create_table(
        'photos',
        sa.Column('id', sa.String(length=40), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column(
            'competition_id',
            sa.String(length=40),
            sa.ForeignKey('competitions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'category_id',
            sa.String(length=40),
            sa.ForeignKey('categories.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=32), nullable=False),
        sa.Column('date_taken', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('camera_info', sa.String(length=200), nullable=True),
        sa.Column('settings', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.String(length=64), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_by', sa.String(length=64), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('quota_slot', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'category_id', 'quota_slot', name='uq_photos_user_category_slot'),
    )
    op.create_index('ix_photos_user_id', 'photos', ['user_id'])
    op.create_index('ix_photos_competition_id', 'photos', ['competition_id'])
    op.create_index('ix_photos_category_id', 'photos', ['category_id'])
    op.create_index('ix_photos_status', 'photos', ['status'])
    op.create_index('ix_photos_user_id_category_id', 'photos', ['user_id', 'category_id'])

    op.create_table(
        'votes',
        sa.Column('id', sa.String(length=40), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('photo_id', sa.String(length=40), sa.ForeignKey('photos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'photo_id', name='uq_votes_user_photo'),
    )
    op.create_index('ix_votes_user_id', 'votes', ['user_id'])
    op.create_index('ix_votes_photo_id', 'votes', ['photo_id'])

    op.create_table(
        'reports',
        sa.Column('id', sa.String(length=40), primary_key=True),
        sa.Column('reporter_id', sa.String(length=64), nullable=False),
        sa.Column('photo_id', sa.String(length=40), sa.ForeignKey('photos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reason', sa.String(length=32), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('resolved_by', sa.String(length=64), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('reporter_id', 'photo_id', name='uq_reports_reporter_photo'),
    )
    op.create_index('ix_reports_reporter_id', 'reports', ['reporter_id'])
    op.create_index('ix_reports_photo_id', 'reports', ['photo_id'])
    op.create_index('ix_reports_status', 'reports', ['status'])


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('votes')
    op.drop_table('photos')
    op.drop_table('categories')
    op.drop_table('competitions')
