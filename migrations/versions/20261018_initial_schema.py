"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create clubs, club_settings, reservations and payments"""

    # Clubs table
    op.create_table(
        'clubs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_clubs_id'), 'clubs', ['id'], unique=False)
    op.create_index(op.f('ix_clubs_name'), 'clubs', ['name'], unique=False)
    op.create_index(op.f('ix_clubs_code'), 'clubs', ['code'], unique=True)

    # Club settings table
    op.create_table(
        'club_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('pricing_model', sa.String(length=20), nullable=False, server_default='variable'),
        sa.Column('peak_hour_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='150'),
        sa.Column('off_peak_hour_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='100'),
        sa.Column('fixed_hourly_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='125'),
        sa.Column('fixed_daily_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='500'),
        sa.Column('guest_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='70'),
        sa.Column('peak_hours', sa.JSON(), nullable=False),
        sa.Column('operating_start', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('operating_end', sa.Integer(), nullable=False, server_default='22'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='PHP'),
        sa.Column('annual_membership_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='1000'),
        sa.Column('updated_by', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('peak_hour_fee >= 0', name='ck_club_settings_peak_fee'),
        sa.CheckConstraint('off_peak_hour_fee >= 0', name='ck_club_settings_off_peak_fee'),
        sa.CheckConstraint('fixed_hourly_fee >= 0', name='ck_club_settings_hourly_fee'),
        sa.CheckConstraint('fixed_daily_fee >= 0', name='ck_club_settings_daily_fee'),
        sa.CheckConstraint('guest_fee >= 0', name='ck_club_settings_guest_fee'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_club_settings_id'), 'club_settings', ['id'], unique=False)
    op.create_index(op.f('ix_club_settings_club_id'), 'club_settings', ['club_id'], unique=True)

    # Reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slot', sa.Integer(), nullable=False),
        sa.Column('end_time_slot', sa.Integer(), nullable=False),
        sa.Column('players', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='unpaid'),
        sa.Column('total_fee', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('end_time_slot > time_slot', name='ck_reservations_slot_range'),
        sa.CheckConstraint('total_fee >= 0', name='ck_reservations_total_fee'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reservations_id'), 'reservations', ['id'], unique=False)
    op.create_index(op.f('ix_reservations_club_id'), 'reservations', ['club_id'], unique=False)
    op.create_index(op.f('ix_reservations_user_id'), 'reservations', ['user_id'], unique=False)
    op.create_index(op.f('ix_reservations_date'), 'reservations', ['date'], unique=False)
    op.create_index(op.f('ix_reservations_status'), 'reservations', ['status'], unique=False)
    op.create_index(op.f('ix_reservations_payment_status'), 'reservations', ['payment_status'], unique=False)

    # Payments table
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=True),
        sa.Column('payment_type', sa.String(length=20), nullable=False, server_default='court_usage'),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='PHP'),
        sa.Column('payment_method', sa.String(length=20), nullable=False, server_default='cash'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('description', sa.String(length=300), nullable=True),
        sa.Column('reference', sa.String(length=200), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('membership_year', sa.Integer(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('approved_by', sa.String(length=100), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('recorded_by', sa.String(length=100), nullable=True),
        sa.Column('recorded_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_by', sa.String(length=100), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('correction_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_payments_amount_non_negative'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payments_id'), 'payments', ['id'], unique=False)
    op.create_index(op.f('ix_payments_club_id'), 'payments', ['club_id'], unique=False)
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'], unique=False)
    op.create_index(op.f('ix_payments_reservation_id'), 'payments', ['reservation_id'], unique=False)
    op.create_index(op.f('ix_payments_payment_type'), 'payments', ['payment_type'], unique=False)
    op.create_index(op.f('ix_payments_status'), 'payments', ['status'], unique=False)
    op.create_index(op.f('ix_payments_paid_date'), 'payments', ['paid_date'], unique=False)


def downgrade() -> None:
    """Drop all tables"""
    op.drop_table('payments')
    op.drop_table('reservations')
    op.drop_table('club_settings')
    op.drop_table('clubs')
