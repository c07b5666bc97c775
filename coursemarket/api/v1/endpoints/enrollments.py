from fastapi import APIRouter, Depends, status
from typing import List

from coursemarket.api.dependencies import get_current_user, get_enrollment_service
from coursemarket.models.user import User
from coursemarket.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentWithProgress,
    LessonProgressResponse,
    LessonProgressUpdate,
)
from coursemarket.services.enrollment_service import EnrollmentService

router = APIRouter()

@router.post("/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    enrollment: EnrollmentCreate,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Записаться на курс (повторная запись - 409)"""
    return service.create_enrollment(current_user.id, enrollment)

@router.get("/enrollments", response_model=List[EnrollmentWithProgress])
async def read_my_enrollments(
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    return service.list_enrollments(current_user.id)

@router.post("/lesson-progress", response_model=LessonProgressResponse)
async def report_lesson_progress(
    progress: LessonProgressUpdate,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    """Сохранить прогресс по уроку"""
    return service.report_lesson_progress(current_user.id, progress)

@router.get("/lesson-progress/{lesson_id}", response_model=LessonProgressResponse)
async def read_lesson_progress(
    lesson_id: int,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    return service.get_lesson_progress(current_user.id, lesson_id)
