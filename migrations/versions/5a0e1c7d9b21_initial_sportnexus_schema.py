"""initial sportnexus schema

Revision ID: 5a0e1c7d9b21
Revises: 
Create Date: 2026-02-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a0e1c7d9b21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=True),
        sa.Column('full_name', sa.String(length=120), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_sessions_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_sessions_token_hash'), ['token_hash'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=80), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'venues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=160), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('amenities', sa.JSON(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('hourly_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('half_day_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('full_day_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('sport_type', sa.String(length=50), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('hourly_price >= 0', name='ck_venue_hourly_price'),
        sa.CheckConstraint('capacity IS NULL OR capacity > 0', name='ck_venue_capacity'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('venues', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_venues_owner_id'), ['owner_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_venues_sport_type'), ['sport_type'], unique=False)

    op.create_table(
        'venue_availability',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('venue_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('venue_availability', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_venue_availability_venue_id'), ['venue_id'], unique=False)

    op.create_table(
        'venue_bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('venue_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('payment_id', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('start_time < end_time', name='ck_booking_time_range'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('venue_bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_venue_bookings_venue_id'), ['venue_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_venue_bookings_user_id'), ['user_id'], unique=False)
        batch_op.create_index('ix_venue_bookings_venue_date', ['venue_id', 'booking_date'], unique=False)

    op.create_table(
        'equipment',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('brand', sa.String(length=80), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('daily_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('weekly_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('monthly_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('total_quantity', sa.Integer(), nullable=False),
        sa.Column('available_quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('available_quantity >= 0', name='ck_equipment_available_nonneg'),
        sa.CheckConstraint('available_quantity <= total_quantity', name='ck_equipment_available_le_total'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('equipment', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_equipment_owner_id'), ['owner_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_equipment_category'), ['category'], unique=False)

    op.create_table(
        'equipment_rentals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('equipment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('payment_id', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_rental_quantity_positive'),
        sa.CheckConstraint('end_date >= start_date', name='ck_rental_date_range'),
        sa.ForeignKeyConstraint(['equipment_id'], ['equipment.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('equipment_rentals', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_equipment_rentals_equipment_id'), ['equipment_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_equipment_rentals_user_id'), ['user_id'], unique=False)

    op.create_table(
        'tutorials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sport_category', sa.String(length=50), nullable=False),
        sa.Column('difficulty', sa.String(length=20), nullable=False),
        sa.Column('instructor_id', sa.Integer(), nullable=True),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('thumbnail', sa.String(length=500), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('tutorials', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_tutorials_sport_category'), ['sport_category'], unique=False)

    op.create_table(
        'tutorial_lessons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tutorial_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=160), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('sequence_order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tutorial_id'], ['tutorials.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tutorial_id', 'sequence_order', name='uq_lesson_sequence')
    )
    with op.batch_alter_table('tutorial_lessons', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_tutorial_lessons_tutorial_id'), ['tutorial_id'], unique=False)

    op.create_table(
        'user_tutorial_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tutorial_id', sa.Integer(), nullable=False),
        sa.Column('current_lesson_id', sa.Integer(), nullable=True),
        sa.Column('progress', sa.String(length=20), nullable=False),
        sa.Column('completed_lessons', sa.Integer(), nullable=False),
        sa.Column('total_lessons', sa.Integer(), nullable=False),
        sa.Column('last_accessed', sa.DateTime(), nullable=False),
        sa.Column('completion_date', sa.DateTime(), nullable=True),
        sa.Column('certificate_issued', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['current_lesson_id'], ['tutorial_lessons.id'], ),
        sa.ForeignKeyConstraint(['tutorial_id'], ['tutorials.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'tutorial_id', name='uq_progress_user_tutorial')
    )
    with op.batch_alter_table('user_tutorial_progress', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_tutorial_progress_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_tutorial_progress_tutorial_id'), ['tutorial_id'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=160), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('type', sa.String(length=40), nullable=True),
        sa.Column('entity_type', sa.String(length=40), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_notifications_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_notifications_created_at'), ['created_at'], unique=False)


def downgrade():
    op.drop_table('notifications')
    op.drop_table('user_tutorial_progress')
    op.drop_table('tutorial_lessons')
    op.drop_table('tutorials')
    op.drop_table('equipment_rentals')
    op.drop_table('equipment')
    op.drop_table('venue_bookings')
    op.drop_table('venue_availability')
    op.drop_table('venues')
    op.drop_table('audit_logs')
    op.drop_table('sessions')
    op.drop_table('users')
