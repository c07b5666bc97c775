"""Pytest configuration."""
import os
from decimal import Decimal

# Модуль coursemarket.main собирает приложение при импорте
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from coursemarket.config import Settings
from coursemarket.core.security import create_access_token, get_password_hash
from coursemarket.main import create_app
from coursemarket.models.course import Course, Lesson, Module, Subject
from coursemarket.models.enrollment import Enrollment, PaymentStatus
from coursemarket.models.user import User, UserRole

PASSWORD = "password123"
PASSWORD_HASH = get_password_hash(PASSWORD)

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET="",
        PAYPAL_CLIENT_ID="paypal-client",
        PAYPAL_CLIENT_SECRET="paypal-secret",
        PAYPAL_BASE_URL="https://paypal.test",
        PAYPAL_WEBHOOK_ID="",
        ALLOW_UNSIGNED_WEBHOOKS=True,
    )

@pytest.fixture
def app(settings):
    return create_app(settings)

@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=UserRole.STUDENT, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=kwargs.pop("username", f"user{n}"),
            email=kwargs.pop("email", f"user{n}@example.com"),
            full_name=kwargs.pop("full_name", f"Test User {n}"),
            hashed_password=PASSWORD_HASH,
            role=role,
            **kwargs
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user

@pytest.fixture
def make_subject(db):
    counter = {"n": 0}

    def _make_subject(name=None, code=None):
        counter["n"] += 1
        n = counter["n"]
        subject = Subject(name=name or f"Subject {n}", code=code or f"s{n}")
        db.add(subject)
        db.commit()
        db.refresh(subject)
        return subject

    return _make_subject

@pytest.fixture
def make_course(db, make_user, make_subject):
    """Курс с одним модулем и заданным числом уроков"""
    def _make_course(instructor=None, subject=None, lessons=0, price="59.99", **kwargs):
        instructor = instructor or make_user(role=UserRole.INSTRUCTOR)
        subject = subject or make_subject()
        course = Course(
            title=kwargs.pop("title", "Spanish for Beginners"),
            description=kwargs.pop("description", "Master Spanish fundamentals step by step."),
            price=Decimal(price),
            level=kwargs.pop("level", "beginner"),
            duration=kwargs.pop("duration", 6),
            subject_id=subject.id,
            instructor_id=instructor.id,
            **kwargs
        )
        db.add(course)
        db.commit()

        if lessons:
            module = Module(title="Introduction", order_index=0, course_id=course.id)
            db.add(module)
            db.commit()
            for index in range(lessons):
                db.add(Lesson(
                    title=f"Lesson {index + 1}",
                    content=f"# Lesson {index + 1}\n\nSome **bold** text.",
                    duration=600,
                    order_index=index,
                    module_id=module.id
                ))
            db.commit()

        db.refresh(course)
        return course

    return _make_course

@pytest.fixture
def enroll(db):
    def _enroll(user, course, status=PaymentStatus.COMPLETED, amount=None):
        enrollment = Enrollment(
            user_id=user.id,
            course_id=course.id,
            payment_status=status.value,
            payment_amount=amount if amount is not None else course.price,
            progress=0
        )
        db.add(enrollment)
        db.commit()
        db.refresh(enrollment)
        return enrollment

    return _enroll

@pytest.fixture
def auth_headers(settings):
    def _auth_headers(user):
        token = create_access_token(user.id, settings)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers

@pytest.fixture
def lesson_ids(db):
    def _lesson_ids(course):
        db.refresh(course)
        return [lesson.id for module in course.modules for lesson in module.lessons]

    return _lesson_ids
