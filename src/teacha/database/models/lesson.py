"""
Lesson model - ordered content unit of a course.
"""

import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class Lesson(Base):
    """Lesson within a course, listed by ``order``."""

    __tablename__ = "lessons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=False, default="")
    video_url = Column(String(500), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    duration = Column(Integer, nullable=True)  # minutes

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    course = relationship("Course", back_populates="lessons")

    __table_args__ = (
        Index("ix_lessons_course_order", "course_id", "order"),
    )

    def __repr__(self):
        return f"<Lesson(id={self.id}, course_id={self.course_id}, order={self.order})>"
