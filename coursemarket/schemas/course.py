from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from coursemarket.schemas.user import UserSummary, InstructorSummary

class SubjectSummary(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True

class SubjectResponse(SubjectSummary):
    image_url: Optional[str] = None
    grade_level: Optional[str] = None
    created_at: datetime

class RatingSummary(BaseModel):
    average: float = 0
    count: int = 0

# Создание / обновление (кабинет преподавателя)
class CourseBase(BaseModel):
    title: str = Field(min_length=5)
    description: str = Field(min_length=20)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    level: str
    duration: int = Field(gt=0)
    grade_level: Optional[str] = None
    subject_id: int
    featured: bool = False
    best_seller: bool = False
    is_new: bool = False
    published_at: Optional[datetime] = None

class CourseCreate(CourseBase):
    pass

class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5)
    description: Optional[str] = Field(default=None, min_length=20)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    level: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0)
    grade_level: Optional[str] = None
    subject_id: Optional[int] = None
    featured: Optional[bool] = None
    best_seller: Optional[bool] = None
    is_new: Optional[bool] = None
    published_at: Optional[datetime] = None

class ModuleCreate(BaseModel):
    title: str = Field(min_length=3)
    description: Optional[str] = None
    order_index: int = Field(ge=0)

class LessonCreate(BaseModel):
    title: str = Field(min_length=3)
    description: Optional[str] = None
    content: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    order_index: int = Field(ge=0)

# Ответы
class LessonResponse(BaseModel):
    id: int
    module_id: int
    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    content_html: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = None
    order_index: int

    class Config:
        from_attributes = True

class ModuleResponse(BaseModel):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    order_index: int
    lessons: List[LessonResponse] = []

    class Config:
        from_attributes = True

class CourseResponse(BaseModel):
    id: int
    title: str
    description: str
    price: Decimal
    image_url: Optional[str] = None
    level: str
    duration: int
    grade_level: Optional[str] = None
    subject_id: int
    instructor_id: int
    featured: bool = False
    best_seller: bool = False
    is_new: bool = False
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator('featured', 'best_seller', 'is_new', mode='before')
    @classmethod
    def null_flags(cls, v):
        return bool(v)

class CourseListItem(CourseResponse):
    instructor: Optional[UserSummary] = None
    subject: Optional[SubjectSummary] = None
    ratings: RatingSummary = RatingSummary()

class Pagination(BaseModel):
    page: int
    limit: int
    total_courses: int
    total_pages: int

class CourseListResponse(BaseModel):
    courses: List[CourseListItem]
    pagination: Pagination

class CourseReview(BaseModel):
    id: int
    user_id: int
    course_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class CourseDetailResponse(CourseResponse):
    instructor: Optional[InstructorSummary] = None
    subject: Optional[SubjectResponse] = None
    modules: List[ModuleResponse] = []
    ratings: RatingSummary = RatingSummary()
    reviews: List[CourseReview] = []
