"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

LIVE_ENROLLMENT_PREDICATE = sa.text("deleted_at IS NULL AND status IN ('active', 'paused')")


def upgrade():
    op.create_table(
        'facilities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('time_zone', sa.String(length=50), nullable=False, server_default='America/New_York'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('facility_id', sa.Integer(), sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False, unique=True),
        sa.Column('email', sa.String(length=120), nullable=True, unique=True),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_facility_id', 'users', ['facility_id'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('facility_id', sa.Integer(), sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('skill_level', sa.String(length=20), nullable=False, server_default='beginner'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_students_facility_id', 'students', ['facility_id'])
    op.create_index('ix_students_first_name', 'students', ['first_name'])
    op.create_index('ix_students_last_name', 'students', ['last_name'])

    op.create_table(
        'classes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('facility_id', sa.Integer(), sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('skill_level', sa.String(length=20), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('min_age_months', sa.Integer(), nullable=True),
        sa.Column('max_age_months', sa.Integer(), nullable=True),
        sa.Column('coach_ids', sa.JSON(), nullable=False),
        sa.Column('price_per_month', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_classes_facility_id', 'classes', ['facility_id'])

    op.create_table(
        'class_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.String(length=10), nullable=False),
        sa.Column('end_time', sa.String(length=10), nullable=False),
        sa.Column('recurrence_rule', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_class_schedules_class_id', 'class_schedules', ['class_id'])

    op.create_table(
        'schedule_exceptions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_schedule_id', sa.Integer(),
                  sa.ForeignKey('class_schedules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('exception_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(length=200), nullable=True),
        sa.Column('is_cancelled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_schedule_exceptions_class_schedule_id', 'schedule_exceptions', ['class_schedule_id'])
    op.create_index('ix_schedule_exceptions_exception_date', 'schedule_exceptions', ['exception_date'])

    op.create_table(
        'class_instances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_schedule_id', sa.Integer(),
                  sa.ForeignKey('class_schedules.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_date_time', sa.DateTime(), nullable=False),
        sa.Column('end_date_time', sa.DateTime(), nullable=False),
        sa.Column('actual_start_date_time', sa.DateTime(), nullable=True),
        sa.Column('actual_end_date_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='scheduled'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('class_schedule_id', 'start_date_time', name='uq_class_instances_schedule_start'),
    )
    op.create_index('ix_class_instances_class_schedule_id', 'class_instances', ['class_schedule_id'])
    op.create_index('ix_class_instances_start_date_time', 'class_instances', ['start_date_time'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrollment_date', sa.DateTime(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('is_waitlisted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_enrollments_class_id', 'enrollments', ['class_id'])
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])
    op.create_index(
        'uq_enrollments_live_class_student',
        'enrollments',
        ['class_id', 'student_id'],
        unique=True,
        postgresql_where=LIVE_ENROLLMENT_PREDICATE,
        sqlite_where=LIVE_ENROLLMENT_PREDICATE,
    )

    op.create_table(
        'class_templates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('facility_id', sa.Integer(), sa.ForeignKey('facilities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('schedules', sa.JSON(), nullable=False),
        sa.Column('skill_level', sa.String(length=20), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('coach_ids', sa.JSON(), nullable=False),
        sa.Column('price_per_month', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_class_templates_facility_id', 'class_templates', ['facility_id'])


def downgrade():
    op.drop_table('class_templates')
    op.drop_index('uq_enrollments_live_class_student', table_name='enrollments')
    op.drop_table('enrollments')
    op.drop_table('class_instances')
    op.drop_table('schedule_exceptions')
    op.drop_table('class_schedules')
    op.drop_table('classes')
    op.drop_table('students')
    op.drop_table('users')
    op.drop_table('facilities')
