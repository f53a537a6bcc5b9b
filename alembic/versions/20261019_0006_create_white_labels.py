"""Create white_labels table

Revision ID: 20261019_0006
Revises: 20261019_0005
Create Date: 2026-10-19 00:06:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0006'
down_revision: str | None = '20261019_0005'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create white_labels table."""
    op.create_table(
        'white_labels',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(32), nullable=True),
        sa.Column('logo', sa.Text, nullable=True),
        sa.Column('favicon', sa.Text, nullable=True),
        sa.Column('primary_color', sa.String(7), nullable=True),
        sa.Column('secondary_color', sa.String(7), nullable=True),
        sa.Column('accent_color', sa.String(7), nullable=True),
        sa.Column('font_family', sa.String(255), nullable=True),
        sa.Column('border_radius', sa.String(16), nullable=True, server_default='0.5rem'),
        sa.Column('tagline', sa.Text, nullable=True),
        sa.Column('custom_css', sa.Text, nullable=True),
        sa.Column('custom_header', sa.Text, nullable=True),
        sa.Column('custom_footer', sa.Text, nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('terms_url', sa.Text, nullable=True),
        sa.Column('privacy_url', sa.Text, nullable=True),
        sa.Column('allow_guest_cart', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('name', name='white_labels_name_unique'),
    )


def downgrade() -> None:
    """Drop white_labels table."""
    op.drop_table('white_labels')
