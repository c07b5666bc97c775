from sqlalchemy.orm import Session, joinedload
from coursemarket.models.course import Course
from coursemarket.models.enrollment import Enrollment, LessonProgress
from typing import List

def get_enrollment(db: Session, user_id: int, course_id: int):
    return db.query(Enrollment).filter(
        Enrollment.user_id == user_id,
        Enrollment.course_id == course_id
    ).first()

def get_user_enrollments(db: Session, user_id: int):
    return db.query(Enrollment).filter(
        Enrollment.user_id == user_id
    ).options(
        joinedload(Enrollment.course).joinedload(Course.subject),
        joinedload(Enrollment.course).joinedload(Course.instructor)
    ).order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc()).all()

def get_lesson_progress(db: Session, user_id: int, lesson_id: int):
    return db.query(LessonProgress).filter(
        LessonProgress.user_id == user_id,
        LessonProgress.lesson_id == lesson_id
    ).first()

def count_completed_lessons(db: Session, user_id: int, lesson_ids: List[int]) -> int:
    if not lesson_ids:
        return 0
    return db.query(LessonProgress).filter(
        LessonProgress.user_id == user_id,
        LessonProgress.completed.is_(True),
        LessonProgress.lesson_id.in_(lesson_ids)
    ).count()
