from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from coursemarket.schemas.course import CourseResponse, SubjectResponse
from coursemarket.schemas.user import UserSummary

class EnrollmentCreate(BaseModel):
    course_id: int
    payment_id: Optional[str] = None
    payment_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)

class EnrollmentResponse(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    completed: bool
    completed_at: Optional[datetime] = None
    progress: int
    payment_status: str
    payment_amount: Optional[Decimal] = None
    payment_id: Optional[str] = None
    payment_flagged: bool = False
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class EnrollmentCourse(CourseResponse):
    subject: Optional[SubjectResponse] = None
    instructor: Optional[UserSummary] = None

class EnrollmentWithProgress(EnrollmentResponse):
    course: EnrollmentCourse
    total_lessons: int
    completed_lessons: int

class LessonProgressUpdate(BaseModel):
    lesson_id: int
    completed: Optional[bool] = None
    last_position: Optional[int] = Field(default=None, ge=0)

class LessonProgressResponse(BaseModel):
    id: Optional[int] = None
    user_id: int
    lesson_id: int
    completed: bool = False
    last_position: int = 0
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
