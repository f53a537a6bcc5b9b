"""Create insurance, insurance_providers, user_medications and payment_methods tables

Revision ID: 20261019_0004
Revises: 20261019_0003
Create Date: 2026-10-19 00:04:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0004'
down_revision: str | None = '20261019_0003'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create patient record tables."""
    op.create_table(
        'insurance',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer,
            sa.ForeignKey('users.id', ondelete='CASCADE', name='insurance_user_id_users_id_fk'),
            nullable=False,
        ),
        sa.Column('provider', sa.String(255), nullable=False),
        sa.Column('member_id', sa.String(64), nullable=False),
        sa.Column('group_number', sa.String(64), nullable=True),
        sa.Column('phone_number', sa.String(32), nullable=True),
        sa.Column('is_primary', sa.Boolean, nullable=False, server_default='0'),
    )
    op.create_index('ix_insurance_user_id', 'insurance', ['user_id'])

    op.create_table(
        'insurance_providers',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('website', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('name', name='insurance_providers_name_unique'),
    )

    op.create_table(
        'user_medications',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer,
            sa.ForeignKey('users.id', ondelete='CASCADE', name='user_medications_user_id_users_id_fk'),
            nullable=False,
        ),
        sa.Column(
            'medication_id',
            sa.Integer,
            sa.ForeignKey('medications.id', name='user_medications_medication_id_medications_id_fk'),
            nullable=False,
        ),
        sa.Column('dosage', sa.String(255), nullable=True),
        sa.Column('frequency', sa.String(255), nullable=True),
        sa.Column('instructions', sa.Text, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('active', sa.Boolean, nullable=False, server_default='1'),
        sa.Column('source', sa.String(20), nullable=False, server_default='manual'),
        sa.Column('start_date', sa.String(10), nullable=True),
        sa.Column('end_date', sa.String(10), nullable=True),
        sa.Column(
            'prescription_id',
            sa.Integer,
            sa.ForeignKey('prescriptions.id', name='user_medications_prescription_id_prescriptions_id_fk'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_user_medications_user', 'user_medications', ['user_id', 'active'])

    op.create_table(
        'payment_methods',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer,
            sa.ForeignKey('users.id', ondelete='CASCADE', name='payment_methods_user_id_users_id_fk'),
            nullable=False,
        ),
        sa.Column('card_holder', sa.String(255), nullable=False),
        sa.Column('brand', sa.String(32), nullable=False),
        sa.Column('last4', sa.String(4), nullable=False),
        sa.Column('expiry_month', sa.Integer, nullable=False),
        sa.Column('expiry_year', sa.Integer, nullable=False),
        sa.Column('is_default', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_payment_methods_user_id', 'payment_methods', ['user_id'])


def downgrade() -> None:
    """Drop patient record tables."""
    op.drop_index('ix_payment_methods_user_id', table_name='payment_methods')
    op.drop_table('payment_methods')
    op.drop_index('idx_user_medications_user', table_name='user_medications')
    op.drop_table('user_medications')
    op.drop_table('insurance_providers')
    op.drop_index('ix_insurance_user_id', table_name='insurance')
    op.drop_table('insurance')
