"""Create categories and medications tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:02:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0002'
down_revision: str | None = '20261019_0001'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create categories and medications tables."""
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('icon', sa.String(64), nullable=True),
        sa.UniqueConstraint('name', name='categories_name_unique'),
    )

    op.create_table(
        'medications',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('generic_name', sa.String(255), nullable=True),
        sa.Column('brand_name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('uses', sa.Text, nullable=True),
        sa.Column('side_effects', sa.Text, nullable=True),
        sa.Column('dosage', sa.Text, nullable=True),
        sa.Column('price', sa.Float, nullable=False),
        sa.Column('retail_price', sa.Float, nullable=True),
        sa.Column('requires_prescription', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('in_stock', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('category', sa.String(255), nullable=True),
        sa.Column('image_url', sa.Text, nullable=True),
        sa.Column('popularity', sa.Integer, nullable=False, server_default='0'),
    )

    # Category listing and popular medication queries
    op.create_index('idx_medications_category', 'medications', ['category'])
    op.create_index('idx_medications_popularity', 'medications', ['popularity'])


def downgrade() -> None:
    """Drop categories and medications tables."""
    op.drop_index('idx_medications_popularity', table_name='medications')
    op.drop_index('idx_medications_category', table_name='medications')
    op.drop_table('medications')
    op.drop_table('categories')
