import pytest

from coursemarket.models.enrollment import Enrollment, LessonProgress
from coursemarket.services.enrollment_service import calculate_progress

PROGRESS_URL = "/api/v1/lesson-progress"

@pytest.mark.parametrize("completed,total,expected", [
    (0, 0, 0),
    (0, 3, 0),
    (1, 3, 33),
    (2, 3, 67),
    (3, 3, 100),
    (1, 8, 13),
    (1, 200, 1),
    (1, 201, 0),
])
def test_calculate_progress_rounds_half_up(completed, total, expected):
    assert calculate_progress(completed, total) == expected

def _enrollment(db, user, course):
    db.expire_all()
    return db.query(Enrollment).filter(
        Enrollment.user_id == user.id, Enrollment.course_id == course.id
    ).one()

def test_progress_requires_enrollment(client, make_course, make_user, auth_headers, lesson_ids):
    course = make_course(lessons=2)

    response = client.post(
        PROGRESS_URL,
        json={"lesson_id": lesson_ids(course)[0], "completed": True},
        headers=auth_headers(make_user())
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "You must be enrolled in this course to track progress"

def test_progress_unknown_lesson(client, make_user, auth_headers):
    response = client.post(PROGRESS_URL, json={"lesson_id": 9999, "completed": True}, headers=auth_headers(make_user()))
    assert response.status_code == 404

def test_completing_lessons_updates_course_progress(
    client, db, make_course, make_user, enroll, auth_headers, lesson_ids
):
    course = make_course(lessons=3)
    student = make_user()
    enroll(student, course)
    headers = auth_headers(student)
    lessons = lesson_ids(course)

    for done, lesson_id in enumerate(lessons, start=1):
        response = client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "completed": True}, headers=headers)
        assert response.status_code == 200

        enrollment = _enrollment(db, student, course)
        assert enrollment.progress == round(100 * done / len(lessons))

        # Чтение пересчитывает прогресс тем же способом
        listed = client.get("/api/v1/enrollments", headers=headers).json()[0]
        assert listed["progress"] == enrollment.progress

    enrollment = _enrollment(db, student, course)
    assert enrollment.progress == 100
    assert enrollment.completed is True
    assert enrollment.completed_at is not None

def test_payment_status_untouched_by_progress(
    client, db, make_course, make_user, enroll, auth_headers, lesson_ids
):
    course = make_course(lessons=1)
    student = make_user()
    enroll(student, course)

    client.post(PROGRESS_URL, json={"lesson_id": lesson_ids(course)[0], "completed": True}, headers=auth_headers(student))

    enrollment = _enrollment(db, student, course)
    assert enrollment.payment_status == "completed"
    assert enrollment.payment_amount is not None

def test_partial_update_keeps_other_fields(
    client, db, make_course, make_user, enroll, auth_headers, lesson_ids
):
    course = make_course(lessons=2)
    student = make_user()
    enroll(student, course)
    headers = auth_headers(student)
    lesson_id = lesson_ids(course)[0]

    first = client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "last_position": 120}, headers=headers).json()
    assert first["completed"] is False
    assert first["last_position"] == 120

    second = client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "completed": True}, headers=headers).json()
    assert second["id"] == first["id"]
    assert second["completed"] is True
    assert second["last_position"] == 120

    assert db.query(LessonProgress).filter(LessonProgress.user_id == student.id).count() == 1

def test_unmarking_lesson_keeps_course_progress(
    client, db, make_course, make_user, enroll, auth_headers, lesson_ids
):
    course = make_course(lessons=2)
    student = make_user()
    enroll(student, course)
    headers = auth_headers(student)
    lesson_id = lesson_ids(course)[0]

    client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "completed": True}, headers=headers)
    assert _enrollment(db, student, course).progress == 50

    # Снятие отметки хранится в уроке, но процент курса не пересчитывается
    response = client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "completed": False}, headers=headers)
    assert response.json()["completed"] is False
    assert _enrollment(db, student, course).progress == 50

def test_negative_position_rejected(client, make_course, make_user, enroll, auth_headers, lesson_ids):
    course = make_course(lessons=1)
    student = make_user()
    enroll(student, course)

    response = client.post(
        PROGRESS_URL,
        json={"lesson_id": lesson_ids(course)[0], "last_position": -1},
        headers=auth_headers(student)
    )
    assert response.status_code == 400

def test_read_lesson_progress(client, make_course, make_user, enroll, auth_headers, lesson_ids):
    course = make_course(lessons=1)
    student = make_user()
    enroll(student, course)
    headers = auth_headers(student)
    lesson_id = lesson_ids(course)[0]

    empty = client.get(f"{PROGRESS_URL}/{lesson_id}", headers=headers).json()
    assert empty["id"] is None
    assert empty["completed"] is False
    assert empty["last_position"] == 0

    client.post(PROGRESS_URL, json={"lesson_id": lesson_id, "last_position": 30}, headers=headers)
    stored = client.get(f"{PROGRESS_URL}/{lesson_id}", headers=headers).json()
    assert stored["id"] is not None
    assert stored["last_position"] == 30
