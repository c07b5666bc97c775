from fastapi import APIRouter, Depends, status
from typing import List

from coursemarket.api.dependencies import get_instructor_service, require_role
from coursemarket.models.user import User, UserRole
from coursemarket.schemas.course import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    LessonCreate,
    LessonResponse,
    ModuleCreate,
    ModuleResponse,
)
from coursemarket.schemas.instructor import InstructorCourseResponse, InstructorStats
from coursemarket.services.instructor_service import InstructorService

router = APIRouter()

require_instructor = require_role(UserRole.INSTRUCTOR)

@router.get("/courses", response_model=List[InstructorCourseResponse])
async def read_instructor_courses(
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    """Курсы преподавателя со статистикой записей и отзывов"""
    return service.list_courses(current_user.id)

@router.get("/stats", response_model=InstructorStats)
async def read_instructor_stats(
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    return service.get_stats(current_user.id)

@router.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    course: CourseCreate,
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    return service.create_course(current_user.id, course)

@router.put("/courses/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    course_update: CourseUpdate,
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    """Обновить свой курс"""
    return service.update_course(current_user.id, course_id, course_update)

@router.post("/courses/{course_id}/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
async def add_module(
    course_id: int,
    module: ModuleCreate,
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    return service.add_module(current_user.id, course_id, module)

@router.post("/modules/{module_id}/lessons", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def add_lesson(
    module_id: int,
    lesson: LessonCreate,
    current_user: User = Depends(require_instructor),
    service: InstructorService = Depends(get_instructor_service)
):
    return service.add_lesson(current_user.id, module_id, lesson)
