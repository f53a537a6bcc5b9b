"""Create prescriptions, orders, order_items and cart tables

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:03:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0003'
down_revision: str | None = '20261019_0002'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create prescriptions, orders, order_items and cart tables."""
    op.create_table(
        'prescriptions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', name='prescriptions_user_id_users_id_fk'), nullable=False),
        sa.Column('doctor_name', sa.String(255), nullable=True),
        sa.Column('doctor_phone', sa.String(32), nullable=True),
        sa.Column('upload_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('file_url', sa.Text, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('verification_status', sa.String(20), nullable=False, server_default='unverified'),
        sa.Column('verified_by', sa.Integer, sa.ForeignKey('users.id', name='prescriptions_verified_by_users_id_fk'), nullable=True),
        sa.Column('verification_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verification_method', sa.String(64), nullable=True),
        sa.Column('verification_notes', sa.Text, nullable=True),
        sa.Column('security_code', sa.String(16), nullable=True),
        sa.Column('revoked', sa.Boolean, nullable=False, server_default='0'),
        sa.Column('revoked_reason', sa.Text, nullable=True),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='prescriptions_status_check'),
        sa.CheckConstraint(
            "verification_status IN ('unverified', 'verified', 'failed')",
            name='prescriptions_verification_status_check',
        ),
    )
    op.create_index('ix_prescriptions_user_id', 'prescriptions', ['user_id'])
    op.create_index('idx_prescriptions_verification', 'prescriptions', ['verification_status', 'upload_date'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', name='orders_user_id_users_id_fk'), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('shipping_method', sa.String(64), nullable=False),
        sa.Column('shipping_cost', sa.Float, nullable=False),
        sa.Column('total', sa.Float, nullable=False),
        sa.Column('shipping_address', sa.Text, nullable=True),
        sa.Column('tracking_number', sa.String(64), nullable=True),
        sa.Column('carrier', sa.String(32), nullable=True),
        sa.Column(
            'prescription_id',
            sa.Integer,
            sa.ForeignKey('prescriptions.id', name='orders_prescription_id_prescriptions_id_fk'),
            nullable=True,
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'verified', 'shipped', 'delivered', 'cancelled', 'revoked')",
            name='orders_status_check',
        ),
    )

    # Order history per user and admin status filter
    op.create_index('idx_user_orders', 'orders', ['user_id', 'order_date'])
    op.create_index('idx_order_status', 'orders', ['status', 'order_date'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'order_id',
            sa.Integer,
            sa.ForeignKey('orders.id', ondelete='CASCADE', name='order_items_order_id_orders_id_fk'),
            nullable=False,
        ),
        sa.Column(
            'medication_id',
            sa.Integer,
            sa.ForeignKey('medications.id', name='order_items_medication_id_medications_id_fk'),
            nullable=False,
        ),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('price', sa.Float, nullable=False),
        sa.CheckConstraint('quantity > 0', name='order_items_quantity_positive_check'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'cart',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer,
            sa.ForeignKey('users.id', ondelete='CASCADE', name='cart_user_id_users_id_fk'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('items', sa.JSON, nullable=False),
        sa.UniqueConstraint('user_id', name='cart_user_id_unique'),
    )


def downgrade() -> None:
    """Drop prescriptions, orders, order_items and cart tables."""
    op.drop_table('cart')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('idx_order_status', table_name='orders')
    op.drop_index('idx_user_orders', table_name='orders')
    op.drop_table('orders')
    op.drop_index('idx_prescriptions_verification', table_name='prescriptions')
    op.drop_index('ix_prescriptions_user_id', table_name='prescriptions')
    op.drop_table('prescriptions')
