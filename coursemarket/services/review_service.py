import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursemarket.core.exceptions import ConflictException, CourseNotFoundException, ForbiddenException
from coursemarket.crud import course as crud_course
from coursemarket.crud import enrollment as crud_enrollment
from coursemarket.crud import review as crud_review
from coursemarket.models.review import Review
from coursemarket.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)

class ReviewService:
    def __init__(self, db: Session):
        self.db = db

    def submit_review(self, user_id: int, data: ReviewCreate) -> Review:
        """Один отзыв на пару (пользователь, курс): повторная отправка обновляет"""
        course = crud_course.get_course(self.db, course_id=data.course_id)
        if not course:
            raise CourseNotFoundException()

        if not crud_enrollment.get_enrollment(self.db, user_id=user_id, course_id=course.id):
            raise ForbiddenException("You must be enrolled in this course to review it")

        existing = crud_review.get_review(self.db, user_id=user_id, course_id=course.id)
        if existing:
            return crud_review.update_review(self.db, existing, rating=data.rating, comment=data.comment)

        review = Review(
            user_id=user_id,
            course_id=course.id,
            rating=data.rating,
            comment=data.comment
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("Review was submitted concurrently")

        self.db.refresh(review)
        logger.info("User %s reviewed course %s with %s stars", user_id, course.id, data.rating)
        return review
