"""Create users table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:01:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users table."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('state', sa.String(64), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True),
        sa.Column('billing_address', sa.Text, nullable=True),
        sa.Column('billing_city', sa.String(255), nullable=True),
        sa.Column('billing_state', sa.String(64), nullable=True),
        sa.Column('billing_zip_code', sa.String(10), nullable=True),
        sa.Column('same_as_shipping', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('date_of_birth', sa.String(10), nullable=True),
        sa.Column('sex_at_birth', sa.String(32), nullable=True),
        sa.Column('profile_completed', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('allergies', sa.JSON, nullable=True),
        sa.Column('allergies_verified', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('username', name='users_username_unique'),
        sa.UniqueConstraint('email', name='users_email_unique'),
        sa.CheckConstraint("role IN ('user', 'admin')", name='users_role_check'),
    )


def downgrade() -> None:
    """Drop users table."""
    op.drop_table('users')
