"""Зачисления, прогресс по урокам и сверка платежей от провайдеров.

Статус оплаты и прогресс независимы: оплата меняется только через
создание зачисления или событие провайдера, прогресс только через
пересчет по урокам.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coursemarket.core.exceptions import (
    ConflictException,
    CourseNotFoundException,
    ForbiddenException,
    LessonNotFoundException,
    UserNotFoundException,
)
from coursemarket.crud import course as crud_course
from coursemarket.crud import enrollment as crud_enrollment
from coursemarket.crud import user as crud_user
from coursemarket.models.course import Course
from coursemarket.models.enrollment import Enrollment, LessonProgress, PaymentStatus
from coursemarket.schemas.enrollment import EnrollmentCreate, LessonProgressUpdate
from coursemarket.utils.validators import to_money

logger = logging.getLogger(__name__)

def calculate_progress(completed_lessons: int, total_lessons: int) -> int:
    """Процент завершения, округление половины вверх; 0 для курса без уроков"""
    if total_lessons <= 0:
        return 0
    return (200 * completed_lessons + total_lessons) // (2 * total_lessons)

@dataclass(frozen=True)
class PaymentConfirmation:
    """Событие провайдера, приведенное к общему виду"""
    provider: str
    provider_payment_id: str
    course_id: int
    user_id: Optional[int]  # None - гостевая покупка
    amount: Decimal
    event_type: str

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

class EnrollmentService:
    def __init__(self, db: Session):
        self.db = db

    # === Прямое зачисление ===
    def create_enrollment(self, user_id: int, data: EnrollmentCreate) -> Enrollment:
        course = crud_course.get_course(self.db, course_id=data.course_id)
        if not course:
            raise CourseNotFoundException()

        if crud_enrollment.get_enrollment(self.db, user_id=user_id, course_id=course.id):
            raise ConflictException("You are already enrolled in this course")

        enrollment = Enrollment(
            user_id=user_id,
            course_id=course.id,
            payment_status=(
                PaymentStatus.COMPLETED.value if data.payment_id else PaymentStatus.PENDING.value
            ),
            payment_id=data.payment_id or None,
            payment_amount=(
                data.payment_amount if data.payment_amount is not None else course.price
            ),
            progress=0
        )
        self.db.add(enrollment)
        self._commit_or_conflict("You are already enrolled in this course")
        self.db.refresh(enrollment)

        logger.info(
            "User %s enrolled in course %s (payment %s)",
            user_id, course.id, enrollment.payment_status
        )
        return enrollment

    # === Сверка платежа ===
    def reconcile_payment(self, confirmation: PaymentConfirmation) -> Optional[Enrollment]:
        """Идемпотентный upsert зачисления по подтвержденному платежу.

        Гостевые покупки только логируются: привязать их к пользователю
        сейчас нечем.
        """
        if confirmation.is_guest:
            logger.info(
                "Guest purchase for course %s completed with %s payment %s",
                confirmation.course_id, confirmation.provider, confirmation.provider_payment_id
            )
            return None

        course = crud_course.get_course(self.db, course_id=confirmation.course_id)
        if not course:
            logger.error(
                "%s payment %s references unknown course %s",
                confirmation.provider, confirmation.provider_payment_id, confirmation.course_id
            )
            raise CourseNotFoundException(confirmation.course_id)

        if not crud_user.get_user(self.db, user_id=confirmation.user_id):
            logger.error(
                "%s payment %s references unknown user %s",
                confirmation.provider, confirmation.provider_payment_id, confirmation.user_id
            )
            raise UserNotFoundException(confirmation.user_id)

        amount = to_money(confirmation.amount)
        flagged = self._amount_mismatch(course, amount, confirmation)

        enrollment = crud_enrollment.get_enrollment(
            self.db, user_id=confirmation.user_id, course_id=course.id
        )
        if enrollment:
            enrollment.payment_status = PaymentStatus.COMPLETED.value
            enrollment.payment_id = confirmation.provider_payment_id
            enrollment.payment_amount = amount
            enrollment.payment_flagged = flagged
            enrollment.updated_at = datetime.utcnow()
        else:
            enrollment = Enrollment(
                user_id=confirmation.user_id,
                course_id=course.id,
                payment_status=PaymentStatus.COMPLETED.value,
                payment_id=confirmation.provider_payment_id,
                payment_amount=amount,
                payment_flagged=flagged,
                progress=0
            )
            self.db.add(enrollment)

        self._commit_or_conflict("Enrollment was modified concurrently")
        self.db.refresh(enrollment)

        logger.info(
            "Successfully enrolled user %s in course %s via %s",
            confirmation.user_id, course.id, confirmation.provider
        )
        return enrollment

    def mark_payment_failed(self, confirmation: PaymentConfirmation) -> Optional[Enrollment]:
        """Переводит ожидающее оплаты зачисление в failed"""
        if confirmation.is_guest:
            logger.info(
                "Guest payment %s for course %s failed",
                confirmation.provider_payment_id, confirmation.course_id
            )
            return None

        enrollment = crud_enrollment.get_enrollment(
            self.db, user_id=confirmation.user_id, course_id=confirmation.course_id
        )
        if not enrollment:
            logger.info(
                "No enrollment to fail for user %s, course %s",
                confirmation.user_id, confirmation.course_id
            )
            return None

        # Оплаченное зачисление не откатываем
        if enrollment.payment_status != PaymentStatus.PENDING.value:
            return enrollment

        enrollment.payment_status = PaymentStatus.FAILED.value
        enrollment.payment_id = confirmation.provider_payment_id
        enrollment.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(enrollment)

        logger.warning(
            "%s payment %s failed for user %s, course %s",
            confirmation.provider, confirmation.provider_payment_id,
            confirmation.user_id, confirmation.course_id
        )
        return enrollment

    # === Прогресс по урокам ===
    def report_lesson_progress(self, user_id: int, data: LessonProgressUpdate) -> LessonProgress:
        lesson = crud_course.get_lesson(self.db, lesson_id=data.lesson_id)
        if not lesson:
            raise LessonNotFoundException()

        course_id = lesson.module.course_id
        enrollment = crud_enrollment.get_enrollment(self.db, user_id=user_id, course_id=course_id)
        if not enrollment:
            raise ForbiddenException("You must be enrolled in this course to track progress")

        progress = crud_enrollment.get_lesson_progress(self.db, user_id=user_id, lesson_id=lesson.id)
        if progress:
            # Обновляем только переданные поля
            if data.completed is not None:
                progress.completed = data.completed
            if data.last_position is not None:
                progress.last_position = data.last_position
            progress.updated_at = datetime.utcnow()
        else:
            progress = LessonProgress(
                user_id=user_id,
                lesson_id=lesson.id,
                completed=data.completed if data.completed is not None else False,
                last_position=data.last_position if data.last_position is not None else 0
            )
            self.db.add(progress)

        self._commit_or_conflict("Lesson progress was modified concurrently")
        self.db.refresh(progress)

        # Снятие отметки о завершении прогресс курса не пересчитывает
        if data.completed:
            self.recalculate_course_progress(enrollment)

        return progress

    def get_lesson_progress(self, user_id: int, lesson_id: int) -> Dict:
        progress = crud_enrollment.get_lesson_progress(self.db, user_id=user_id, lesson_id=lesson_id)
        if not progress:
            return {
                "user_id": user_id,
                "lesson_id": lesson_id,
                "completed": False,
                "last_position": 0
            }
        return progress

    def recalculate_course_progress(self, enrollment: Enrollment) -> Enrollment:
        lesson_ids = crud_course.get_course_lesson_ids(self.db, course_id=enrollment.course_id)
        completed_count = crud_enrollment.count_completed_lessons(
            self.db, user_id=enrollment.user_id, lesson_ids=lesson_ids
        )
        percentage = calculate_progress(completed_count, len(lesson_ids))

        enrollment.progress = percentage
        if percentage == 100:
            enrollment.completed = True
            if enrollment.completed_at is None:
                enrollment.completed_at = datetime.utcnow()
        else:
            enrollment.completed = False
            enrollment.completed_at = None

        self.db.commit()
        self.db.refresh(enrollment)

        logger.debug(
            "Course %s progress for user %s: %s/%s lessons, %s%%",
            enrollment.course_id, enrollment.user_id, completed_count, len(lesson_ids), percentage
        )
        return enrollment

    # === Список зачислений ===
    def list_enrollments(self, user_id: int) -> List[Dict]:
        """Зачисления пользователя с прогрессом, посчитанным заново по урокам"""
        result = []
        for enrollment in crud_enrollment.get_user_enrollments(self.db, user_id=user_id):
            lesson_ids = crud_course.get_course_lesson_ids(self.db, course_id=enrollment.course_id)
            completed_count = crud_enrollment.count_completed_lessons(
                self.db, user_id=user_id, lesson_ids=lesson_ids
            )
            result.append({
                "id": enrollment.id,
                "user_id": enrollment.user_id,
                "course_id": enrollment.course_id,
                "enrolled_at": enrollment.enrolled_at,
                "completed": enrollment.completed,
                "completed_at": enrollment.completed_at,
                "progress": calculate_progress(completed_count, len(lesson_ids)),
                "payment_status": enrollment.payment_status,
                "payment_amount": enrollment.payment_amount,
                "payment_id": enrollment.payment_id,
                "payment_flagged": enrollment.payment_flagged,
                "updated_at": enrollment.updated_at,
                "course": enrollment.course,
                "total_lessons": len(lesson_ids),
                "completed_lessons": completed_count
            })
        return result

    # === Вспомогательное ===
    def _amount_mismatch(
        self, course: Course, amount: Decimal, confirmation: PaymentConfirmation
    ) -> bool:
        expected = to_money(course.price)
        if amount != expected:
            logger.warning(
                "%s payment %s amount %s does not match course %s price %s",
                confirmation.provider, confirmation.provider_payment_id,
                amount, course.id, expected
            )
            return True
        return False

    def _commit_or_conflict(self, detail: str):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Unique constraint violated: %s", detail)
            raise ConflictException(detail)
