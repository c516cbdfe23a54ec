"""create subjects and events tables

Revision ID: a7c1e5d2f903
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a7c1e5d2f903'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create subjects and events tables."""

    # 1. subjects (named categories with a canonical color)
    op.create_table(
        'subjects',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('color', sa.String(16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_subjects_name', 'subjects', ['name'])

    # 2. events (instants stored as naive UTC; subject_id has no FK, deletes do not cascade)
    op.create_table(
        'events',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start', sa.DateTime(), nullable=False),
        sa.Column('end', sa.DateTime(), nullable=False),
        sa.Column('all_day', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('color', sa.String(16), nullable=True),
        sa.Column('subject_id', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_events_subject_id', 'events', ['subject_id'])
    op.create_index('ix_events_start', 'events', ['start'])
    op.create_index('ix_events_end', 'events', ['end'])


def downgrade() -> None:
    op.drop_index('ix_events_end', table_name='events')
    op.drop_index('ix_events_start', table_name='events')
    op.drop_index('ix_events_subject_id', table_name='events')
    op.drop_table('events')
    op.drop_index('ix_subjects_name', table_name='subjects')
    op.drop_table('subjects')
