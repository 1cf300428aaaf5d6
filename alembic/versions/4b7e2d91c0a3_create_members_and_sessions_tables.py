"""create members and sessions tables

Revision ID: 4b7e2d91c0a3
Revises:
Create Date: 2025-01-06 09:00:00.000000

Initial schema for the database-backed stores:

- members: the team roster (SqlMemberRepository). AUTOINCREMENT on
  SQLite so a deleted row's id is never handed out again.
- sessions: server-side sessions (DatabaseSessionStore). The browser
  only holds the signed sid; user and OAuth tokens live in `data`.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2d91c0a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the members and sessions tables."""
    op.create_table(
        'members',
        # Primary key
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),

        # Member information
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('calendar_id', sa.String(length=320), nullable=False),

        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )

    op.create_table(
        'sessions',
        sa.Column('sid', sa.String(length=128), nullable=False),

        # SessionData as JSON: {"user": {...} | null}
        sa.Column('data', sa.JSON(), nullable=False),

        # Epoch seconds
        sa.Column('expires_at', sa.Float(), nullable=False),

        sa.PrimaryKeyConstraint('sid'),
    )

    # Index on expires_at for the startup purge of stale sessions
    op.create_index(
        op.f('ix_sessions_expires_at'),
        'sessions',
        ['expires_at'],
        unique=False
    )


def downgrade() -> None:
    """Drop the sessions and members tables."""
    op.drop_index(op.f('ix_sessions_expires_at'), table_name='sessions')
    op.drop_table('sessions')
    op.drop_table('members')
