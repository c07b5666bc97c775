import math
from typing import Optional

from sqlalchemy.orm import Session

from coursemarket.core.exceptions import CourseNotFoundException, ValidationException
from coursemarket.crud import course as crud_course
from coursemarket.crud import review as crud_review
from coursemarket.schemas.course import (
    CourseDetailResponse,
    CourseListItem,
    CourseListResponse,
    CourseResponse,
    CourseReview,
    InstructorSummary,
    LessonResponse,
    ModuleResponse,
    Pagination,
    RatingSummary,
    SubjectResponse,
)
from coursemarket.services.markdown_service import MarkdownService
from coursemarket.utils.validators import parse_int

ALL = "all"

class CatalogService:
    def __init__(self, db: Session, markdown_service: Optional[MarkdownService] = None):
        self.db = db
        self.markdown_service = markdown_service or MarkdownService()

    def list_subjects(self):
        return crud_course.get_subjects(self.db)

    def list_courses(
        self,
        page: int = 1,
        limit: int = 12,
        subject: Optional[str] = None,
        level: Optional[str] = None,
        search: Optional[str] = None,
        featured: bool = False
    ) -> CourseListResponse:
        """Страница каталога, сначала новые курсы"""
        subject_id = None
        if subject and subject != ALL:
            subject_id = parse_int(subject)
            if subject_id is None:
                raise ValidationException("language must be a subject id or 'all'")

        courses, total = crud_course.get_courses(
            self.db,
            skip=(page - 1) * limit,
            limit=limit,
            subject_id=subject_id,
            level=level if level and level != ALL else None,
            search=search or None,
            featured=featured
        )

        stats = crud_course.get_rating_stats(self.db, [course.id for course in courses])

        items = []
        for course in courses:
            item = CourseListItem.model_validate(course)
            average, count = stats.get(course.id, (0, 0))
            item.ratings = RatingSummary(average=average, count=count)
            items.append(item)

        return CourseListResponse(
            courses=items,
            pagination=Pagination(
                page=page,
                limit=limit,
                total_courses=total,
                total_pages=math.ceil(total / limit)
            )
        )

    def get_course_detail(self, course_id: int) -> CourseDetailResponse:
        course = crud_course.get_course_with_tree(self.db, course_id=course_id)
        if not course:
            raise CourseNotFoundException()

        average, count = crud_course.get_rating_stats(self.db, [course.id]).get(course.id, (0, 0))

        return CourseDetailResponse(
            **CourseResponse.model_validate(course).model_dump(),
            instructor=InstructorSummary.model_validate(course.instructor) if course.instructor else None,
            subject=SubjectResponse.model_validate(course.subject) if course.subject else None,
            modules=[self._module_response(module) for module in course.modules],
            ratings=RatingSummary(average=average, count=count),
            reviews=[
                CourseReview.model_validate(review)
                for review in crud_review.get_course_reviews(self.db, course_id=course.id)
            ]
        )

    def _module_response(self, module) -> ModuleResponse:
        lessons = []
        for lesson in module.lessons:
            response = LessonResponse.model_validate(lesson)
            response.content_html = self.markdown_service.convert_to_html(lesson.content)
            lessons.append(response)

        return ModuleResponse(
            id=module.id,
            course_id=module.course_id,
            title=module.title,
            description=module.description,
            order_index=module.order_index,
            lessons=lessons
        )
