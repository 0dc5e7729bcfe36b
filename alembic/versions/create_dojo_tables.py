"""create dojo tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


belt_level = sa.Enum('white', 'yellow', 'orange', 'green', 'blue', 'brown', 'black', name='belt_level')
membership_plan = sa.Enum('2classes', '3classes', '4classes', name='membership_plan')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('gender', sa.Enum('male', 'female', 'other', name='gender'), nullable=False),
        sa.Column('profile_photo', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('student', 'instructor', name='user_role'), nullable=False),
        sa.Column('belt_level', belt_level, nullable=False),
        sa.Column('membership_plan', membership_plan, nullable=True),
        sa.Column('is_blocked', sa.Boolean(), nullable=False),
        sa.Column('instructor_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_is_blocked', 'users', ['is_blocked'])
    op.create_index('ix_users_instructor_id', 'users', ['instructor_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('instructor_id', sa.Uuid(), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.Enum('pending', 'paid', 'overdue', name='payment_status'), nullable=False),
        sa.Column('membership_plan', membership_plan, nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payments_student_id', 'payments', ['student_id'])
    op.create_index('ix_payments_instructor_id', 'payments', ['instructor_id'])
    op.create_index('ix_payments_status_due_date', 'payments', ['status', 'due_date'])

    op.create_table(
        'exams',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('instructor_id', sa.Uuid(), nullable=False),
        sa.Column('exam_date', sa.DateTime(), nullable=False),
        sa.Column('max_registrants', sa.Integer(), nullable=False),
        sa.Column('target_belt', belt_level, nullable=False),
        sa.Column('minimum_belt', belt_level, nullable=False),
        sa.Column('minimum_training_months', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('upcoming', 'ongoing', 'completed', 'cancelled', name='exam_status'),
            nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_exams_instructor_id', 'exams', ['instructor_id'])
    op.create_index('ix_exams_status', 'exams', ['status'])

    op.create_table(
        'exam_registrations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('exam_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('registered_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['exam_id'], ['exams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exam_id', 'student_id', name='uq_exam_registrations_exam_student'),
    )
    op.create_index('ix_exam_registrations_student_id', 'exam_registrations', ['student_id'])

    op.create_table(
        'exam_results',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('exam_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('passed', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('graded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['exam_id'], ['exams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_exam_results_student_id', 'exam_results', ['student_id'])


def downgrade() -> None:
    op.drop_index('ix_exam_results_student_id', table_name='exam_results')
    op.drop_table('exam_results')
    op.drop_index('ix_exam_registrations_student_id', table_name='exam_registrations')
    op.drop_table('exam_registrations')
    op.drop_index('ix_exams_status', table_name='exams')
    op.drop_index('ix_exams_instructor_id', table_name='exams')
    op.drop_table('exams')
    op.drop_index('ix_payments_status_due_date', table_name='payments')
    op.drop_index('ix_payments_instructor_id', table_name='payments')
    op.drop_index('ix_payments_student_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_users_instructor_id', table_name='users')
    op.drop_index('ix_users_is_blocked', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for name in ('exam_status', 'payment_status', 'user_role', 'gender', 'membership_plan', 'belt_level'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
