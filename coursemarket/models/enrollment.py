from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship
from coursemarket.database import Base
from datetime import datetime
import enum

class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    progress = Column(Integer, default=0, nullable=False)  # Процент завершения
    payment_status = Column(String, default=PaymentStatus.PENDING.value, nullable=False)
    payment_amount = Column(Numeric(10, 2), nullable=True)
    payment_id = Column(String, nullable=True)
    # Сумма от провайдера не совпала с ценой курса
    payment_flagged = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Отношения
    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")

class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)
    last_position = Column(Integer, default=0, nullable=False)  # Позиция видео в секундах
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="progress")
    lesson = relationship("Lesson", back_populates="progress")
