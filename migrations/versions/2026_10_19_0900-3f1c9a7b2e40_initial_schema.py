"""Initial schema - users, events, the records attached to events and revoked tokens

Revision ID: 3f1c9a7b2e40
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Union

from alembic import op
import sqlalchemy as sa
import sqlalchemy_utils

# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, None] = None
depends_on: Union[str, None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False),
    ]


def _uuid() -> sqlalchemy_utils.UUIDType:
    return sqlalchemy_utils.UUIDType()


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('email_confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirmation_token', sa.String(64), nullable=True),
        sa.Column('confirmation_sent_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_confirmation_token', 'users', ['confirmation_token'], unique=True)

    op.create_table(
        'events',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('owner_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('type', sa.Enum('birthday', 'wedding', name='event_type_enum'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('primary_color', sa.String(7), nullable=False),
        sa.Column('secondary_color', sa.String(7), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_events_owner_id', 'events', ['owner_id'])

    # Dependent rows go with their event even when the application could not clear them
    op.create_table(
        'guests',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('event_id', _uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('confirmed', sa.Boolean(), nullable=False),
        sa.Column('plus_one', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_guests_event_id', 'guests', ['event_id'])
    op.create_index('ix_guests_name', 'guests', ['name'])

    op.create_table(
        'gifts',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('event_id', _uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('purchased', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_gifts_event_id', 'gifts', ['event_id'])

    op.create_table(
        'gift_reservations',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('event_id', _uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('gift_id', _uuid(), sa.ForeignKey('gifts.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('reserved_by', sa.String(255), nullable=False),
        sa.Column('reserved_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_gift_reservations_event_id', 'gift_reservations', ['event_id'])

    op.create_table(
        'guest_messages',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('event_id', _uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('guest_id', _uuid(), sa.ForeignKey('guests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('author_name', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
    )
    op.create_index('ix_guest_messages_event_id', 'guest_messages', ['event_id'])

    op.create_table(
        'revoked_tokens',
        sa.Column('id', _uuid(), primary_key=True),
        *_timestamps(),
        sa.Column('jti', sa.String(64), nullable=False),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)
    op.create_index('ix_revoked_tokens_expires_at', 'revoked_tokens', ['expires_at'])


def downgrade() -> None:
    op.drop_table('revoked_tokens')
    op.drop_table('guest_messages')
    op.drop_table('gift_reservations')
    op.drop_table('gifts')
    op.drop_table('guests')
    op.drop_table('events')
    sa.Enum(name="event_type_enum").drop(op.get_bind(), checkfirst=True)
    op.drop_table('users')
