from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload
from coursemarket.models.course import Subject, Course, Module, Lesson
from coursemarket.models.review import Review
from coursemarket.schemas.course import CourseCreate, CourseUpdate, ModuleCreate, LessonCreate
from typing import Dict, List, Optional, Tuple

def get_subjects(db: Session):
    return db.query(Subject).order_by(Subject.name).all()

def get_subject(db: Session, subject_id: int):
    return db.query(Subject).filter(Subject.id == subject_id).first()

def get_course(db: Session, course_id: int):
    return db.query(Course).filter(Course.id == course_id).first()

def get_course_with_tree(db: Session, course_id: int):
    """Курс вместе с предметом, преподавателем и деревом модулей/уроков"""
    return db.query(Course).options(
        joinedload(Course.subject),
        joinedload(Course.instructor),
        selectinload(Course.modules).selectinload(Module.lessons)
    ).filter(Course.id == course_id).first()

def get_courses(
    db: Session,
    skip: int = 0,
    limit: int = 12,
    subject_id: Optional[int] = None,
    level: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None
) -> Tuple[List[Course], int]:
    query = db.query(Course)

    if subject_id is not None:
        query = query.filter(Course.subject_id == subject_id)

    if level:
        query = query.filter(Course.level == level)

    if featured:
        query = query.filter(Course.featured.is_(True))

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(Course.title.ilike(pattern), Course.description.ilike(pattern))
        )

    total = query.with_entities(func.count(Course.id)).scalar() or 0

    courses = query.options(
        joinedload(Course.subject),
        joinedload(Course.instructor)
    ).order_by(
        Course.created_at.desc(), Course.id.desc()
    ).offset(skip).limit(limit).all()

    return courses, total

def get_instructor_courses(db: Session, instructor_id: int):
    return db.query(Course).options(
        joinedload(Course.subject)
    ).filter(
        Course.instructor_id == instructor_id
    ).order_by(Course.created_at.desc(), Course.id.desc()).all()

def get_rating_stats(db: Session, course_ids: List[int]) -> Dict[int, Tuple[float, int]]:
    """Средняя оценка и число отзывов, сгруппированные по курсу"""
    if not course_ids:
        return {}

    rows = db.query(
        Review.course_id,
        func.avg(Review.rating),
        func.count(Review.id)
    ).filter(
        Review.course_id.in_(course_ids)
    ).group_by(Review.course_id).all()

    return {course_id: (float(avg), int(count)) for course_id, avg, count in rows}

def create_course(db: Session, course: CourseCreate, instructor_id: int):
    db_course = Course(**course.model_dump(), instructor_id=instructor_id)
    db.add(db_course)
    db.commit()
    db.refresh(db_course)
    return db_course

def update_course(db: Session, course_id: int, course_update: CourseUpdate):
    db_course = get_course(db, course_id)
    if not db_course:
        return None

    update_data = course_update.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(db_course, field, value)

    db.commit()
    db.refresh(db_course)
    return db_course

def get_module(db: Session, module_id: int):
    return db.query(Module).filter(Module.id == module_id).first()

def create_module(db: Session, course_id: int, module: ModuleCreate):
    db_module = Module(**module.model_dump(), course_id=course_id)
    db.add(db_module)
    db.commit()
    db.refresh(db_module)
    return db_module

def get_lesson(db: Session, lesson_id: int):
    return db.query(Lesson).options(
        joinedload(Lesson.module)
    ).filter(Lesson.id == lesson_id).first()

def create_lesson(db: Session, module_id: int, lesson: LessonCreate):
    db_lesson = Lesson(**lesson.model_dump(), module_id=module_id)
    db.add(db_lesson)
    db.commit()
    db.refresh(db_lesson)
    return db_lesson

def get_course_lesson_ids(db: Session, course_id: int) -> List[int]:
    """Все уроки во всех модулях курса"""
    rows = db.query(Lesson.id).join(Module, Lesson.module_id == Module.id).filter(
        Module.course_id == course_id
    ).all()
    return [row[0] for row in rows]
