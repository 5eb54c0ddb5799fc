"""Initial academic records schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('updated_by', sa.Uuid(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_audit_columns(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(7), nullable=False),
        sa.Column('status', sa.String(9), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20)),
        sa.Column('date_of_birth', sa.Date()),
        sa.Column('address', sa.Text()),
        sa.Column('last_login', sa.TIMESTAMP(timezone=True)),
        sa.Column('is_first_login', sa.Boolean()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'])

    op.create_table(
        'careers',
        *_audit_columns(),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('code', sa.String(20), nullable=True, unique=True),
        sa.Column('description', sa.Text()),
        sa.Column('total_cycles', sa.SmallInteger(), nullable=False),
        sa.CheckConstraint('total_cycles > 0', name='careers_total_cycles_check'),
    )

    op.create_table(
        'specialities',
        *_audit_columns(),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text()),
    )

    op.create_table(
        'cycles',
        *_audit_columns(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('period', sa.SmallInteger(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.UniqueConstraint('year', 'period', name='uq_cycle_year_period'),
        sa.CheckConstraint('start_date <= end_date', name='cycles_date_range_check'),
    )

    op.create_table(
        'subjects',
        *_audit_columns(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('code', sa.String(20), nullable=True, unique=True),
        sa.Column('credits', sa.SmallInteger(), nullable=False),
        sa.Column('career_id', sa.Uuid(), sa.ForeignKey('careers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('cycle_id', sa.Uuid(), sa.ForeignKey('cycles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('max_quota', sa.Integer(), nullable=False),
        sa.Column('available_quota', sa.Integer(), nullable=False),
        sa.CheckConstraint('max_quota >= 0', name='subjects_max_quota_check'),
        sa.CheckConstraint('available_quota >= 0', name='subjects_available_quota_check'),
        sa.CheckConstraint('available_quota <= max_quota', name='subjects_quota_range_check'),
    )

    op.create_table(
        'student_profiles',
        *_audit_columns(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('career_id', sa.Uuid(), sa.ForeignKey('careers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('current_cycle', sa.SmallInteger(), nullable=False),
        sa.CheckConstraint('current_cycle > 0', name='student_profiles_current_cycle_check'),
    )

    op.create_table(
        'teacher_profiles',
        *_audit_columns(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('speciality_id', sa.Uuid(), sa.ForeignKey('specialities.id', ondelete='SET NULL'), nullable=True),
        sa.Column('career_id', sa.Uuid(), sa.ForeignKey('careers.id', ondelete='SET NULL'), nullable=True),
    )

    op.create_table(
        'subject_assignments',
        *_audit_columns(),
        sa.Column('teacher_profile_id', sa.Uuid(), sa.ForeignKey('teacher_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', sa.Uuid(), sa.ForeignKey('subjects.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('teacher_profile_id', 'subject_id', name='uq_teacher_subject_assignment'),
    )

    op.create_table(
        'student_subjects',
        *_audit_columns(),
        sa.Column('student_profile_id', sa.Uuid(), sa.ForeignKey('student_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subject_id', sa.Uuid(), sa.ForeignKey('subjects.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.String(9), nullable=False),
        sa.Column('grade', sa.DECIMAL(4, 2), nullable=True),
        sa.Column('enrolled_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('student_profile_id', 'subject_id', name='uq_student_subject_enrollment'),
        sa.CheckConstraint('grade IS NULL OR grade BETWEEN 0 AND 20', name='student_subjects_grade_check'),
    )

    op.create_table(
        'audit_logs',
        *_audit_columns(),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('action', sa.String(6), nullable=False),
        sa.Column('table_name', sa.String(100), nullable=False),
        sa.Column('record_id', sa.Uuid(), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('success', sa.Boolean()),
        sa.Column('error_message', sa.Text(), nullable=True),
    )


def downgrade() -> None:
    for table in (
        'audit_logs', 'student_subjects', 'subject_assignments', 'teacher_profiles',
        'student_profiles', 'subjects', 'cycles', 'specialities', 'careers',
    ):
        op.drop_table(table)
    op.drop_index('ix_users_phone', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
