import logging
from typing import List

from sqlalchemy import distinct, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursemarket.core.exceptions import (
    ConflictException,
    CourseNotFoundException,
    ForbiddenException,
    ModuleNotFoundException,
    NotFoundException,
)
from coursemarket.crud import course as crud_course
from coursemarket.models.course import Course, Lesson, Module
from coursemarket.models.enrollment import Enrollment, PaymentStatus
from coursemarket.models.review import Review
from coursemarket.models.user import User
from coursemarket.schemas.course import CourseCreate, CourseUpdate, LessonCreate, ModuleCreate
from coursemarket.schemas.instructor import InstructorCourseResponse, InstructorStats, RecentActivity

logger = logging.getLogger(__name__)

RECENT_ENROLLMENTS_LIMIT = 10
RECENT_REVIEWS_LIMIT = 5
RECENT_ACTIVITIES_LIMIT = 10

class InstructorService:
    def __init__(self, db: Session):
        self.db = db

    # === Дашборд ===
    def list_courses(self, instructor_id: int) -> List[InstructorCourseResponse]:
        courses = crud_course.get_instructor_courses(self.db, instructor_id=instructor_id)
        course_ids = [course.id for course in courses]

        enrollment_counts = dict(
            self.db.query(Enrollment.course_id, func.count(Enrollment.id)).filter(
                Enrollment.course_id.in_(course_ids)
            ).group_by(Enrollment.course_id).all()
        ) if course_ids else {}
        rating_stats = crud_course.get_rating_stats(self.db, course_ids)

        result = []
        for course in courses:
            average, count = rating_stats.get(course.id, (None, 0))
            item = InstructorCourseResponse.model_validate(course)
            item.total_enrollments = enrollment_counts.get(course.id, 0)
            item.average_rating = round(average, 1) if average is not None else None
            item.review_count = count
            result.append(item)
        return result

    def get_stats(self, instructor_id: int) -> InstructorStats:
        total_students = self.db.query(func.count(distinct(Enrollment.user_id))).join(
            Course, Enrollment.course_id == Course.id
        ).filter(Course.instructor_id == instructor_id).scalar() or 0

        total_revenue = self.db.query(func.sum(Enrollment.payment_amount)).join(
            Course, Enrollment.course_id == Course.id
        ).filter(
            Course.instructor_id == instructor_id,
            Enrollment.payment_status == PaymentStatus.COMPLETED.value
        ).scalar()

        average_rating = self.db.query(func.avg(Review.rating)).join(
            Course, Review.course_id == Course.id
        ).filter(Course.instructor_id == instructor_id).scalar()

        return InstructorStats(
            total_students=total_students,
            total_revenue=round(float(total_revenue), 2) if total_revenue else 0,
            average_rating=round(float(average_rating), 1) if average_rating else 0,
            recent_activities=self._recent_activities(instructor_id)
        )

    def _recent_activities(self, instructor_id: int) -> List[RecentActivity]:
        enrollments = self.db.query(
            Enrollment.id, Enrollment.enrolled_at, Course.id, Course.title, Enrollment.user_id
        ).join(
            Course, Enrollment.course_id == Course.id
        ).filter(
            Course.instructor_id == instructor_id
        ).order_by(Enrollment.enrolled_at.desc()).limit(RECENT_ENROLLMENTS_LIMIT).all()

        reviews = self.db.query(
            Review.id, Review.rating, Review.comment, Review.created_at,
            Course.id, Course.title, Review.user_id, User.full_name
        ).join(
            Course, Review.course_id == Course.id
        ).join(
            User, Review.user_id == User.id
        ).filter(
            Course.instructor_id == instructor_id
        ).order_by(Review.created_at.desc()).limit(RECENT_REVIEWS_LIMIT).all()

        activities = []
        for enrollment_id, enrolled_at, course_id, course_title, user_id in enrollments:
            activities.append((enrolled_at, RecentActivity(
                type="enrollment",
                title=f'New enrollment in "{course_title}"',
                time=enrolled_at.date().isoformat(),
                data={
                    "enrollment_id": enrollment_id,
                    "enrolled_at": enrolled_at.isoformat(),
                    "course_id": course_id,
                    "course_title": course_title,
                    "user_id": user_id
                }
            )))

        for review_id, rating, comment, created_at, course_id, course_title, user_id, user_name in reviews:
            activities.append((created_at, RecentActivity(
                type="review",
                title=f'New {rating}-star review for "{course_title}"',
                time=created_at.date().isoformat(),
                data={
                    "review_id": review_id,
                    "rating": rating,
                    "comment": comment,
                    "created_at": created_at.isoformat(),
                    "course_id": course_id,
                    "course_title": course_title,
                    "user_id": user_id,
                    "user_name": user_name
                }
            )))

        activities.sort(key=lambda pair: pair[0], reverse=True)
        return [activity for _, activity in activities[:RECENT_ACTIVITIES_LIMIT]]

    # === Управление курсами ===
    def create_course(self, instructor_id: int, data: CourseCreate) -> Course:
        if not crud_course.get_subject(self.db, subject_id=data.subject_id):
            raise NotFoundException("Subject not found")
        course = crud_course.create_course(self.db, course=data, instructor_id=instructor_id)
        logger.info("Instructor %s created course %s", instructor_id, course.id)
        return course

    def update_course(self, instructor_id: int, course_id: int, data: CourseUpdate) -> Course:
        self._get_owned_course(instructor_id, course_id)
        if data.subject_id is not None and not crud_course.get_subject(self.db, subject_id=data.subject_id):
            raise NotFoundException("Subject not found")
        return crud_course.update_course(self.db, course_id=course_id, course_update=data)

    def add_module(self, instructor_id: int, course_id: int, data: ModuleCreate) -> Module:
        self._get_owned_course(instructor_id, course_id)
        try:
            return crud_course.create_module(self.db, course_id=course_id, module=data)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"Module with order index {data.order_index} already exists")

    def add_lesson(self, instructor_id: int, module_id: int, data: LessonCreate) -> Lesson:
        module = crud_course.get_module(self.db, module_id=module_id)
        if not module:
            raise ModuleNotFoundException()
        self._get_owned_course(instructor_id, module.course_id)
        try:
            return crud_course.create_lesson(self.db, module_id=module_id, lesson=data)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"Lesson with order index {data.order_index} already exists")

    def _get_owned_course(self, instructor_id: int, course_id: int) -> Course:
        course = crud_course.get_course(self.db, course_id=course_id)
        if not course:
            raise CourseNotFoundException()
        if course.instructor_id != instructor_id:
            raise ForbiddenException("Not authorized to modify this course")
        return course
