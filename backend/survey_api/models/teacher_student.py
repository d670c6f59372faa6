"""Teacher/student roster link model."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from survey_api.database import Base
from survey_api.models.survey import utcnow


class TeacherStudent(Base):
    __tablename__ = "teacher_students"

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    added_at = Column(DateTime, nullable=False, default=utcnow)
    # Survey through which the student was linked, if any.
    survey_id = Column(String(32), ForeignKey("surveys.survey_id", ondelete="SET NULL"), nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    survey = relationship("Survey")

    __table_args__ = (
        UniqueConstraint("teacher_id", "student_id", name="uq_teacher_student"),
        Index("idx_teacher_students_teacher", "teacher_id"),
        Index("idx_teacher_students_student", "student_id"),
    )
