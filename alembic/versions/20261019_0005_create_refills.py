"""Create refill_requests and refill_notifications tables

Revision ID: 20261019_0005
Revises: 20261019_0004
Create Date: 2026-10-19 00:05:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '20261019_0005'
down_revision: str | None = '20261019_0004'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create refill tables."""
    op.create_table(
        'refill_requests',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', name='refill_requests_user_id_users_id_fk'), nullable=False),
        sa.Column(
            'prescription_id',
            sa.Integer,
            sa.ForeignKey('prescriptions.id', name='refill_requests_prescription_id_prescriptions_id_fk'),
            nullable=False,
        ),
        sa.Column(
            'medication_id',
            sa.Integer,
            sa.ForeignKey('medications.id', name='refill_requests_medication_id_medications_id_fk'),
            nullable=True,
        ),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text, nullable=True),
    )
    op.create_index('ix_refill_requests_user_id', 'refill_requests', ['user_id'])
    op.create_index('ix_refill_requests_prescription_id', 'refill_requests', ['prescription_id'])

    op.create_table(
        'refill_notifications',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', name='refill_notifications_user_id_users_id_fk'), nullable=False),
        sa.Column(
            'refill_request_id',
            sa.Integer,
            sa.ForeignKey('refill_requests.id', name='refill_notifications_refill_request_id_refill_requests_id_fk'),
            nullable=False,
        ),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('sent_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('read', sa.Boolean, nullable=False, server_default='0'),
    )
    op.create_index('ix_refill_notifications_user_id', 'refill_notifications', ['user_id'])


def downgrade() -> None:
    """Drop refill tables."""
    op.drop_index('ix_refill_notifications_user_id', table_name='refill_notifications')
    op.drop_table('refill_notifications')
    op.drop_index('ix_refill_requests_prescription_id', table_name='refill_requests')
    op.drop_index('ix_refill_requests_user_id', table_name='refill_requests')
    op.drop_table('refill_requests')
