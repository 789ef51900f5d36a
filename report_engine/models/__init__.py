"""Database models package."""

from report_engine.models.audit import AuditAction, AuditLog
from report_engine.models.exam import Exam, ExamSubject, StudentExamProfile, StudentPaperScore
from report_engine.models.grading_scale import GradingScale, ScaleDivision, ScaleGrade
from report_engine.models.report import PublishedReport, ReportConfiguration, ReportSource
from report_engine.models.school import School, SchoolStatus
from report_engine.models.student import Student, StudentStatus

__all__ = [
    # School
    "School",
    "SchoolStatus",
    # Student
    "Student",
    "StudentStatus",
    # Grading
    "GradingScale",
    "ScaleGrade",
    "ScaleDivision",
    # Exam
    "Exam",
    "ExamSubject",
    "StudentExamProfile",
    "StudentPaperScore",
    # Reports
    "ReportConfiguration",
    "ReportSource",
    "PublishedReport",
    # Audit
    "AuditLog",
    "AuditAction",
]
