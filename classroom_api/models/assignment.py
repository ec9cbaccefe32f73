from sqlalchemy import CheckConstraint, Column, Integer, String, Text, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship

from classroom_api.db.base_class import Base

class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    text = Column(Text, nullable=False)
    marks = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("marks >= 0 AND marks <= 1000", name="ck_assignments_marks_range"),
    )

    classroom = relationship("Classroom", back_populates="assignments")
    created_by = relationship("User", back_populates="assignments")

    submissions = relationship(
        "Submission", back_populates="assignment", cascade="all, delete-orphan", passive_deletes=True
    )
