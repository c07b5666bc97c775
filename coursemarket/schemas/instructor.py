from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from coursemarket.schemas.course import CourseResponse, SubjectResponse

class InstructorCourseResponse(CourseResponse):
    subject: Optional[SubjectResponse] = None
    total_enrollments: int = 0
    average_rating: Optional[float] = None
    review_count: int = 0

class RecentActivity(BaseModel):
    type: str  # enrollment / review
    title: str
    time: str
    data: Dict[str, Any]

class InstructorStats(BaseModel):
    total_students: int
    total_revenue: float
    average_rating: float
    recent_activities: List[RecentActivity]
