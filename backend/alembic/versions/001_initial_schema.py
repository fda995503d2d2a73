"""Initial schema: medicines, notification settings and logs

Revision ID: 001
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'medicines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('expiry_date', sa.DateTime(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('batch_number', sa.String(), nullable=True),
        sa.Column('notified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_notification_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.CheckConstraint('quantity > 0', name='ck_medicines_quantity_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_medicines_expiry_date', 'medicines', ['expiry_date'])

    op.create_table(
        'notification_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('enable_daily_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_weekly_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_monthly_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_email_notifications', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('enable_push_notifications', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('endpoint', sa.Text(), nullable=True),
        sa.Column('p256dh', sa.String(), nullable=True),
        sa.Column('auth', sa.String(), nullable=True),
        sa.Column('notification_time', sa.String(length=5), nullable=False, server_default='09:00'),
        sa.Column('updated_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'notification_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('medicine_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('channel', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['medicine_id'], ['medicines.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_logs_medicine_id', 'notification_logs', ['medicine_id'])
    op.create_index('ix_notification_logs_sent_at', 'notification_logs', ['sent_at'])


def downgrade() -> None:
    op.drop_index('ix_notification_logs_sent_at', table_name='notification_logs')
    op.drop_index('ix_notification_logs_medicine_id', table_name='notification_logs')
    op.drop_table('notification_logs')
    op.drop_table('notification_settings')
    op.drop_index('ix_medicines_expiry_date', table_name='medicines')
    op.drop_table('medicines')
