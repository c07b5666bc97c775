from fastapi import APIRouter, Depends, status

from coursemarket.api.dependencies import get_current_user, get_review_service
from coursemarket.models.user import User
from coursemarket.schemas.course import CourseReview
from coursemarket.schemas.review import ReviewCreate
from coursemarket.services.review_service import ReviewService

router = APIRouter()

@router.post("/reviews", response_model=CourseReview, status_code=status.HTTP_201_CREATED)
async def submit_review(
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    """Оставить или обновить отзыв о курсе"""
    return service.submit_review(current_user.id, review)
