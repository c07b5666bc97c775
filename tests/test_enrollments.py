from coursemarket.models.enrollment import Enrollment, PaymentStatus

ENROLLMENTS_URL = "/api/v1/enrollments"

def test_direct_enrollment_without_payment_is_pending(client, make_course, make_user, auth_headers):
    course = make_course(price="59.99")
    student = make_user()

    response = client.post(ENROLLMENTS_URL, json={"course_id": course.id}, headers=auth_headers(student))

    assert response.status_code == 201
    body = response.json()
    assert body["payment_status"] == "pending"
    assert body["payment_amount"] == "59.99"
    assert body["progress"] == 0
    assert body["completed"] is False

def test_direct_enrollment_with_payment_id_is_completed(client, make_course, make_user, auth_headers):
    course = make_course()
    student = make_user()

    response = client.post(
        ENROLLMENTS_URL,
        json={"course_id": course.id, "payment_id": "pi_123", "payment_amount": "49.99"},
        headers=auth_headers(student)
    )

    assert response.status_code == 201
    body = response.json()
    assert body["payment_status"] == "completed"
    assert body["payment_id"] == "pi_123"
    assert body["payment_amount"] == "49.99"

def test_second_enrollment_conflicts(client, make_course, make_user, auth_headers, db):
    course = make_course()
    student = make_user()
    headers = auth_headers(student)

    assert client.post(ENROLLMENTS_URL, json={"course_id": course.id}, headers=headers).status_code == 201
    response = client.post(ENROLLMENTS_URL, json={"course_id": course.id}, headers=headers)

    assert response.status_code == 409
    assert response.json()["detail"] == "You are already enrolled in this course"
    assert db.query(Enrollment).filter(Enrollment.user_id == student.id).count() == 1

def test_enrollment_unknown_course(client, make_user, auth_headers):
    response = client.post(ENROLLMENTS_URL, json={"course_id": 9999}, headers=auth_headers(make_user()))
    assert response.status_code == 404

def test_enrollment_requires_authentication(client, make_course):
    course = make_course()
    assert client.post(ENROLLMENTS_URL, json={"course_id": course.id}).status_code == 401

def test_list_enrollments_with_course_and_progress(
    client, make_course, make_user, enroll, auth_headers, lesson_ids
):
    course = make_course(lessons=4)
    other = make_course(title="Another course")
    student = make_user()
    enroll(student, course)
    enroll(make_user(), other)
    headers = auth_headers(student)

    first_lesson = lesson_ids(course)[0]
    client.post("/api/v1/lesson-progress", json={"lesson_id": first_lesson, "completed": True}, headers=headers)

    response = client.get(ENROLLMENTS_URL, headers=headers)
    assert response.status_code == 200
    body = response.json()

    assert len(body) == 1
    assert body[0]["course"]["id"] == course.id
    assert body[0]["course"]["instructor"]["id"] == course.instructor_id
    assert body[0]["course"]["subject"]["id"] == course.subject_id
    assert body[0]["total_lessons"] == 4
    assert body[0]["completed_lessons"] == 1
    assert body[0]["progress"] == 25
    assert body[0]["payment_status"] == PaymentStatus.COMPLETED.value
