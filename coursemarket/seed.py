"""Начальные данные каталога.

Запуск: python -m coursemarket.seed
Повторный запуск ничего не дублирует: существующие записи ищутся по естественному ключу.
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from coursemarket import models  # noqa: F401
from coursemarket.config import get_settings
from coursemarket.core.security import get_password_hash
from coursemarket.database import Base, build_engine, build_session_factory
from coursemarket.models.course import Course, Lesson, Module, Subject
from coursemarket.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

SUBJECTS = [
    {"name": "Spanish", "code": "es", "grade_level": "middle"},
    {"name": "French", "code": "fr", "grade_level": "middle"},
    {"name": "German", "code": "de", "grade_level": "high"},
    {"name": "Japanese", "code": "ja", "grade_level": "high"},
    {"name": "Mandarin", "code": "zh", "grade_level": "high"},
    {"name": "Italian", "code": "it", "grade_level": "middle"},
]

INSTRUCTORS = [
    {
        "username": "maria.rodriguez",
        "email": "maria@example.com",
        "full_name": "Maria Rodriguez",
        "bio": "Spanish language teacher with over 10 years of experience in language education."
    },
    {
        "username": "pierre.dupont",
        "email": "pierre@example.com",
        "full_name": "Pierre Dupont",
        "bio": "Native French speaker with a passion for teaching French literature and conversation."
    },
    {
        "username": "yuki.tanaka",
        "email": "yuki@example.com",
        "full_name": "Yuki Tanaka",
        "bio": "Experienced Japanese teacher specializing in teaching non-native speakers."
    },
]

STUDENTS = [
    {"username": "john.doe", "email": "john@example.com", "full_name": "John Doe"},
    {"username": "sarah.johnson", "email": "sarah@example.com", "full_name": "Sarah Johnson"},
    {"username": "michael.chen", "email": "michael@example.com", "full_name": "Michael Chen"},
]

COURSES = [
    {
        "title": "Spanish for Beginners: Complete Course",
        "description": "Master Spanish fundamentals with our comprehensive beginner course designed for quick progress.",
        "price": Decimal("59.99"),
        "level": "beginner",
        "duration": 6,
        "subject": "es",
        "instructor": "maria.rodriguez",
        "featured": True,
        "best_seller": True,
        "modules": [
            {
                "title": "Introduction to Spanish",
                "description": "Learn the basics of Spanish pronunciation and greetings",
                "lessons": [
                    ("Spanish Alphabet and Pronunciation", 720,
                     "# The Spanish alphabet\n\nSpanish has **27 letters**. Listen and repeat each one."),
                    ("Basic Greetings", 540,
                     "# Greetings\n\n- Hola\n- Buenos días\n- Buenas noches"),
                    ("Introducing Yourself", 660,
                     "# Introductions\n\n*Me llamo* ... and *Soy de* ..."),
                ]
            },
            {"title": "Essential Vocabulary", "description": "Build your Spanish vocabulary with common words and phrases", "lessons": []},
            {"title": "Basic Grammar", "description": "Learn fundamental Spanish grammar rules", "lessons": []},
            {"title": "Everyday Conversations", "description": "Practice common conversations in Spanish", "lessons": []},
        ]
    },
    {
        "title": "French Conversation and Culture",
        "description": "Take your French skills to the next level with focus on conversation and cultural understanding.",
        "price": Decimal("79.99"),
        "level": "intermediate",
        "duration": 8,
        "subject": "fr",
        "instructor": "pierre.dupont",
        "featured": True,
        "modules": []
    },
    {
        "title": "Japanese Essentials: Speaking & Writing",
        "description": "Learn the fundamentals of Japanese language including hiragana, katakana, and basic kanji.",
        "price": Decimal("89.99"),
        "level": "beginner",
        "duration": 10,
        "subject": "ja",
        "instructor": "yuki.tanaka",
        "featured": True,
        "is_new": True,
        "modules": []
    },
    {
        "title": "German for Business: Professional Communication",
        "description": "Master business German vocabulary and professional communication for international careers.",
        "price": Decimal("129.99"),
        "level": "intermediate",
        "duration": 12,
        "subject": "de",
        "instructor": "pierre.dupont",
        "modules": []
    },
]

def _seed_subjects(db: Session) -> dict:
    subjects = {}
    for data in SUBJECTS:
        subject = db.query(Subject).filter(Subject.code == data["code"]).first()
        if subject:
            logger.info("Subject %s already exists", data["name"])
        else:
            subject = Subject(**data)
            db.add(subject)
            db.flush()
            logger.info("Created subject: %s", data["name"])
        subjects[subject.code] = subject
    return subjects

def _seed_users(db: Session, users: list, role: UserRole) -> dict:
    result = {}
    for data in users:
        user = db.query(User).filter(User.email == data["email"]).first()
        if user:
            logger.info("User %s already exists", data["email"])
        else:
            user = User(**data, role=role, hashed_password=get_password_hash(DEMO_PASSWORD))
            db.add(user)
            db.flush()
            logger.info("Created %s: %s", role.value, data["full_name"])
        result[user.username] = user
    return result

def _seed_course_tree(db: Session, course: Course, modules: list):
    for module_index, module_data in enumerate(modules):
        module = db.query(Module).filter(
            Module.course_id == course.id,
            Module.order_index == module_index
        ).first()
        if not module:
            module = Module(
                title=module_data["title"],
                description=module_data["description"],
                order_index=module_index,
                course_id=course.id
            )
            db.add(module)
            db.flush()
            logger.info("Created module: %s", module.title)

        for lesson_index, (title, duration, content) in enumerate(module_data["lessons"]):
            exists = db.query(Lesson).filter(
                Lesson.module_id == module.id,
                Lesson.order_index == lesson_index
            ).first()
            if exists:
                continue
            db.add(Lesson(
                title=title,
                content=content,
                duration=duration,
                order_index=lesson_index,
                module_id=module.id
            ))
            logger.info("Created lesson: %s", title)

def seed(db: Session):
    """Заполняет базу демонстрационными данными"""
    subjects = _seed_subjects(db)
    instructors = _seed_users(db, INSTRUCTORS, UserRole.INSTRUCTOR)
    _seed_users(db, STUDENTS, UserRole.STUDENT)

    for data in COURSES:
        data = dict(data)
        modules = data.pop("modules")
        subject = subjects[data.pop("subject")]
        instructor = instructors[data.pop("instructor")]

        course = db.query(Course).filter(Course.title == data["title"]).first()
        if course:
            logger.info("Course %s already exists", data["title"])
        else:
            course = Course(**data, subject_id=subject.id, instructor_id=instructor.id)
            db.add(course)
            db.flush()
            logger.info("Created course: %s", data["title"])
        _seed_course_tree(db, course, modules)

    db.commit()

def main():
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")

    engine = build_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()
    try:
        seed(db)
        logger.info("Seeding completed")
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    main()
