from datetime import datetime

from sqlalchemy.orm import Session, joinedload
from coursemarket.models.review import Review

def get_review(db: Session, user_id: int, course_id: int):
    return db.query(Review).filter(
        Review.user_id == user_id,
        Review.course_id == course_id
    ).first()

def get_course_reviews(db: Session, course_id: int):
    """Отзывы курса, сначала новые"""
    return db.query(Review).options(
        joinedload(Review.user)
    ).filter(
        Review.course_id == course_id
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()

def update_review(db: Session, review: Review, rating: int, comment):
    review.rating = rating
    review.comment = comment
    review.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(review)
    return review
