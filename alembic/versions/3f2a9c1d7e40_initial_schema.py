"""initial schema: profiles, services, bookings, user_errors, error_logs, email_logs

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-19 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('nombre_completo', sa.String(length=255), nullable=True),
        sa.Column('telefono', sa.String(length=20), nullable=True),
        sa.Column('pais_codigo', sa.String(length=2), nullable=True,
                  comment='ISO country code, e.g. ES'),
        sa.Column('pais_nombre', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False,
                  server_default='cliente', comment='cliente|admin|super'),
        sa.Column('preferred_language', sa.String(length=5), nullable=True, comment='ca|es|en'),
        sa.Column('email_notifications', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)

    op.create_table(
        'services',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('duracion_minutos', sa.Integer(), nullable=False),
        sa.Column('precio', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_services_id'), 'services', ['id'], unique=False)

    op.create_table(
        'bookings',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('service_id', sa.UUID(), nullable=True),
        sa.Column('fecha_hora', sa.DateTime(), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False,
                  comment='pendiente|confirmada|completada|cancelada'),
        sa.Column('pet_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_fecha_hora'), 'bookings', ['fecha_hora'], unique=False)

    op.create_table(
        'user_errors',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('user_role', sa.String(length=20), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('error_context', postgresql.JSON(astext_type=sa.Text()), nullable=True,
                  comment='page, timestamp, language + caller keys'),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False,
                  server_default='pending', comment='pending|valid|needs_review'),
        sa.Column('reviewed_by', sa.UUID(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_errors_id'), 'user_errors', ['id'], unique=False)
    op.create_index(op.f('ix_user_errors_user_id'), 'user_errors', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_errors_user_email'), 'user_errors', ['user_email'], unique=False)
    op.create_index(op.f('ix_user_errors_user_role'), 'user_errors', ['user_role'], unique=False)
    op.create_index(op.f('ix_user_errors_status'), 'user_errors', ['status'], unique=False)
    op.create_index(op.f('ix_user_errors_created_at'), 'user_errors', ['created_at'], unique=False)

    op.create_table(
        'error_logs',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('error_type', sa.String(length=50), nullable=False, comment='e.g. DATABASE_ERROR'),
        sa.Column('error_code', sa.String(length=50), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('component', sa.String(length=255), nullable=True),
        sa.Column('stack_trace', sa.Text(), nullable=True),
        sa.Column('additional_data', postgresql.JSON(astext_type=sa.Text()), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_error_logs_created_at'), 'error_logs', ['created_at'], unique=False)
    op.create_index(op.f('ix_error_logs_user_id'), 'error_logs', ['user_id'], unique=False)
    op.create_index(op.f('ix_error_logs_user_email'), 'error_logs', ['user_email'], unique=False)
    op.create_index(op.f('ix_error_logs_error_type'), 'error_logs', ['error_type'], unique=False)
    op.create_index(op.f('ix_error_logs_error_code'), 'error_logs', ['error_code'], unique=False)

    op.create_table(
        'email_logs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email_type', sa.String(length=50), nullable=False,
                  comment='welcome|booking_created|reminder_24h|booking_cancelled|...'),
        sa.Column('status', sa.String(length=20), nullable=False, comment='sent|failed|pending'),
        sa.Column('recipient_email', sa.String(length=255), nullable=False),
        sa.Column('recipient_name', sa.String(length=255), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=True),
        sa.Column('booking_id', sa.UUID(), nullable=True),
        sa.Column('user_id', sa.UUID(), nullable=True),
        sa.Column('language', sa.String(length=5), nullable=True),
        sa.Column('email_data', postgresql.JSON(astext_type=sa.Text()), nullable=True,
                  comment='Template variables used for the send'),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_email_logs_id'), 'email_logs', ['id'], unique=False)
    op.create_index(op.f('ix_email_logs_email_type'), 'email_logs', ['email_type'], unique=False)
    op.create_index(op.f('ix_email_logs_status'), 'email_logs', ['status'], unique=False)
    op.create_index(op.f('ix_email_logs_recipient_email'), 'email_logs', ['recipient_email'], unique=False)
    op.create_index(op.f('ix_email_logs_booking_id'), 'email_logs', ['booking_id'], unique=False)
    op.create_index(op.f('ix_email_logs_user_id'), 'email_logs', ['user_id'], unique=False)
    op.create_index(op.f('ix_email_logs_created_at'), 'email_logs', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('email_logs')
    op.drop_table('error_logs')
    op.drop_table('user_errors')
    op.drop_table('bookings')
    op.drop_table('services')
    op.drop_table('profiles')
