"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all database tables for the Game Progress Backend:
- students: Student profiles with cumulative statistics
- badges: Badges earned per student and game

Also creates indexes for the admin list and leaderboard queries.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('student_id', sa.String(64), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('class', sa.Text(), nullable=False),
        sa.Column('sessions', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('high_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('overall_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('time_spent', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'),
                  nullable=False, server_default='{}'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    # Indexes for the admin list (by name) and leaderboard (by high score)
    op.create_index('ix_students_name', 'students', ['name'])
    op.create_index('ix_students_high_score', 'students', ['high_score'])

    # ── Badges Table ──────────────────────────────────────────
    op.create_table(
        'badges',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.String(64),
                  sa.ForeignKey('students.student_id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('game', sa.Integer(), nullable=False),
        sa.Column('date', sa.String(10), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.UniqueConstraint('student_id', 'game', name='uq_badges_student_game'),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('badges')
    op.drop_index('ix_students_high_score', table_name='students')
    op.drop_index('ix_students_name', table_name='students')
    op.drop_table('students')
