"""Initial report engine schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

Creates schools and students, grading scales with their grade and
division bands, exams with subjects and student profiles, report
configurations with weighted sources, published reports and the
audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


schoolstatus = sa.Enum('ACTIVE', 'SUSPENDED', name='schoolstatus')
studentstatus = sa.Enum('ACTIVE', 'INACTIVE', name='studentstatus')
auditaction = sa.Enum(
    'MARKS_RECORDED', 'REPORTS_PUBLISHED',
    name='auditaction',
)


def timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def school_fk() -> sa.Column:
    return sa.Column(
        'school_id', sa.BigInteger(),
        sa.ForeignKey('schools.id', ondelete='CASCADE'), nullable=False, index=True,
    )


def upgrade() -> None:
    """Create all report engine tables."""
    op.create_table(
        'schools',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('status', schoolstatus, nullable=False),
        *timestamps(),
    )
    op.create_index('ix_schools_slug', 'schools', ['slug'], unique=True)

    op.create_table(
        'students',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('registration_number', sa.String(50), nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('class_name', sa.String(50), nullable=False),
        sa.Column('section', sa.String(50), nullable=True),
        sa.Column('guardian_phone', sa.String(50), nullable=True),
        sa.Column('status', studentstatus, nullable=False, index=True),
        *timestamps(),
        sa.UniqueConstraint('school_id', 'registration_number', name='uq_student_registration_number'),
    )

    # Grading scales
    op.create_table(
        'grading_scales',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('fail_value', sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_table(
        'grading_scale_grades',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('scale_id', sa.BigInteger(), sa.ForeignKey('grading_scales.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(20), nullable=False),
        sa.Column('lower_bound', sa.Float(), nullable=False),
        sa.Column('upper_bound', sa.Float(), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
    )
    op.create_table(
        'grading_scale_divisions',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('scale_id', sa.BigInteger(), sa.ForeignKey('grading_scales.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('min_aggregate', sa.Integer(), nullable=False),
        sa.Column('max_aggregate', sa.Integer(), nullable=False),
    )

    # Exams
    op.create_table(
        'exams',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('term', sa.String(50), nullable=False),
        sa.Column('academic_year', sa.String(20), nullable=False, index=True),
        sa.Column('default_grading_scale_id', sa.BigInteger(), sa.ForeignKey('grading_scales.id', ondelete='RESTRICT'), nullable=False),
        *timestamps(),
    )
    op.create_table(
        'exam_subjects',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('exam_id', sa.BigInteger(), sa.ForeignKey('exams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('subject_id', sa.String(50), nullable=False),
        sa.Column('subject_name', sa.String(100), nullable=False),
        sa.Column('max_score', sa.DECIMAL(10, 2), nullable=False),
        sa.Column('is_core_subject', sa.Boolean(), nullable=False, server_default=sa.false()),
        *timestamps(),
        sa.UniqueConstraint('exam_id', 'subject_id', name='uq_exam_subject'),
    )
    op.create_table(
        'student_exam_profiles',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('exam_id', sa.BigInteger(), sa.ForeignKey('exams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('student_id', sa.BigInteger(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('aggregate', sa.Integer(), nullable=True),
        sa.Column('division', postgresql.JSONB(), nullable=True),
        *timestamps(),
        sa.UniqueConstraint('exam_id', 'student_id', name='uq_exam_student_profile'),
    )
    op.create_table(
        'student_paper_scores',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('profile_id', sa.BigInteger(), sa.ForeignKey('student_exam_profiles.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exam_subject_id', sa.BigInteger(), sa.ForeignKey('exam_subjects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.DECIMAL(10, 2), nullable=True),
        sa.Column('grade', sa.String(20), nullable=True),
        sa.Column('grade_value', sa.Integer(), nullable=True),
        sa.UniqueConstraint('profile_id', 'exam_subject_id', name='uq_profile_paper'),
    )

    # Report configurations
    op.create_table(
        'report_configurations',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('term', sa.String(50), nullable=False),
        sa.Column('academic_year', sa.String(20), nullable=False),
        sa.Column('grading_scale_id', sa.BigInteger(), sa.ForeignKey('grading_scales.id', ondelete='RESTRICT'), nullable=False),
        *timestamps(),
    )
    op.create_table(
        'report_sources',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('config_id', sa.BigInteger(), sa.ForeignKey('report_configurations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('exam_id', sa.BigInteger(), sa.ForeignKey('exams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('weight', sa.DECIMAL(5, 2), nullable=False),
        sa.CheckConstraint('weight >= 0 AND weight <= 100', name='ck_report_source_weight'),
        sa.UniqueConstraint('config_id', 'exam_id', name='uq_report_source_exam'),
    )

    # Published reports
    op.create_table(
        'published_reports',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        school_fk(),
        sa.Column('student_id', sa.BigInteger(), sa.ForeignKey('students.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('student_name', sa.String(255), nullable=False),
        sa.Column('student_reg_no', sa.String(50), nullable=False),
        sa.Column('config_id', sa.BigInteger(), sa.ForeignKey('report_configurations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('config_name', sa.String(255), nullable=False),
        sa.Column('scores', postgresql.JSONB(), nullable=False),
        sa.Column('aggregate', sa.Integer(), nullable=True),
        sa.Column('division', postgresql.JSONB(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('total_marks', sa.Integer(), nullable=False),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('school_id', 'student_reg_no', 'config_id', name='uq_published_report_key'),
    )

    # Audit log
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('school_id', sa.BigInteger(), sa.ForeignKey('schools.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('action', auditaction, nullable=False, index=True),
        sa.Column('resource_type', sa.String(100), nullable=False),
        sa.Column('resource_id', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('extra_data', postgresql.JSONB(), nullable=True),
        sa.Column('ip_address', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )


def downgrade() -> None:
    """Drop all report engine tables."""
    op.drop_table('audit_logs')
    op.drop_table('published_reports')
    op.drop_table('report_sources')
    op.drop_table('report_configurations')
    op.drop_table('student_paper_scores')
    op.drop_table('student_exam_profiles')
    op.drop_table('exam_subjects')
    op.drop_table('exams')
    op.drop_table('grading_scale_divisions')
    op.drop_table('grading_scale_grades')
    op.drop_table('grading_scales')
    op.drop_index('ix_schools_slug', table_name='schools')
    op.drop_table('students')
    op.drop_table('schools')

    auditaction.drop(op.get_bind(), checkfirst=True)
    studentstatus.drop(op.get_bind(), checkfirst=True)
    schoolstatus.drop(op.get_bind(), checkfirst=True)
