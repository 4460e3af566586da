"""events and registrations

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

EVENT_CATEGORIES = ('workshop', 'seminar', 'conference', 'training', 'webinar')
EVENT_STATUSES = ('upcoming', 'ongoing', 'completed', 'cancelled')
REGISTRATION_STATUSES = ('pending', 'confirmed', 'cancelled')


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.Enum(*EVENT_CATEGORIES, name='eventcategory'), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=False),
        sa.Column('max_participants', sa.Integer(), nullable=False),
        sa.Column('current_participants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('speaker', sa.String(length=200), nullable=False),
        sa.Column('price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.Enum(*EVENT_STATUSES, name='eventstatus'), nullable=False, server_default='upcoming'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('max_participants >= 1', name='ck_event_max_participants'),
        sa.CheckConstraint('current_participants >= 0', name='ck_event_current_participants'),
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('idx_event_date', 'events', ['date'])
    op.create_index('idx_event_category_date', 'events', ['category', 'date'])
    op.create_index('idx_event_status_date', 'events', ['status', 'date'])

    op.create_table(
        'registrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('participant_name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('organization', sa.String(length=200), nullable=True),
        sa.Column('status', sa.Enum(*REGISTRATION_STATUSES, name='registrationstatus'), nullable=False, server_default='confirmed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_registrations_id', 'registrations', ['id'])
    op.create_index('ix_registrations_event_id', 'registrations', ['event_id'])
    op.create_index('idx_registration_event_status', 'registrations', ['event_id', 'status'])
    op.create_index('idx_registration_email', 'registrations', ['email'])


def downgrade() -> None:
    op.drop_table('registrations')
    op.drop_table('events')
    sa.Enum(name='registrationstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='eventstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='eventcategory').drop(op.get_bind(), checkfirst=True)
