from coursemarket.models.enrollment import PaymentStatus
from coursemarket.models.review import Review
from coursemarket.models.user import UserRole

BASE_URL = "/api/v1/instructor"

def _course_payload(subject_id, **overrides):
    data = {
        "title": "Algebra for Middle School",
        "description": "Linear equations, inequalities and graphs for grades 7 and 8.",
        "price": "39.50",
        "level": "beginner",
        "duration": 8,
        "grade_level": "7",
        "subject_id": subject_id,
    }
    data.update(overrides)
    return data

def test_student_cannot_use_dashboard(client, make_user, auth_headers):
    headers = auth_headers(make_user(role=UserRole.STUDENT))

    for response in (
        client.get(f"{BASE_URL}/courses", headers=headers),
        client.get(f"{BASE_URL}/stats", headers=headers),
    ):
        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied. Instructor role required."

def test_dashboard_requires_authentication(client):
    assert client.get(f"{BASE_URL}/stats").status_code == 401

def test_create_and_list_courses(client, make_user, make_subject, auth_headers):
    instructor = make_user(role=UserRole.INSTRUCTOR)
    subject = make_subject()
    headers = auth_headers(instructor)

    created = client.post(f"{BASE_URL}/courses", json=_course_payload(subject.id), headers=headers)
    assert created.status_code == 201
    assert created.json()["instructor_id"] == instructor.id
    assert created.json()["price"] == "39.50"

    listed = client.get(f"{BASE_URL}/courses", headers=headers).json()
    assert [c["id"] for c in listed] == [created.json()["id"]]
    assert listed[0]["total_enrollments"] == 0
    assert listed[0]["average_rating"] is None
    assert listed[0]["subject"]["id"] == subject.id

def test_create_course_validation(client, make_user, make_subject, auth_headers):
    headers = auth_headers(make_user(role=UserRole.INSTRUCTOR))
    subject = make_subject()

    assert client.post(f"{BASE_URL}/courses", json=_course_payload(subject.id, price="0"), headers=headers).status_code == 400
    assert client.post(f"{BASE_URL}/courses", json=_course_payload(subject.id, title="Alg"), headers=headers).status_code == 400

    missing = client.post(f"{BASE_URL}/courses", json=_course_payload(9999), headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Subject not found"

def test_update_own_course_only(client, make_user, make_course, auth_headers):
    owner = make_user(role=UserRole.INSTRUCTOR)
    other = make_user(role=UserRole.INSTRUCTOR)
    course = make_course(instructor=owner)

    forbidden = client.put(f"{BASE_URL}/courses/{course.id}", json={"title": "Stolen course"}, headers=auth_headers(other))
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"] == "Not authorized to modify this course"

    updated = client.put(
        f"{BASE_URL}/courses/{course.id}",
        json={"title": "Spanish, revised edition", "featured": True},
        headers=auth_headers(owner)
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Spanish, revised edition"
    assert updated.json()["featured"] is True
    assert updated.json()["description"] == course.description

    assert client.put(f"{BASE_URL}/courses/9999", json={"title": "Nothing here"}, headers=auth_headers(owner)).status_code == 404

def test_authoring_modules_and_lessons(client, make_user, make_course, auth_headers):
    instructor = make_user(role=UserRole.INSTRUCTOR)
    course = make_course(instructor=instructor)
    headers = auth_headers(instructor)

    module = client.post(
        f"{BASE_URL}/courses/{course.id}/modules",
        json={"title": "Numbers", "order_index": 0},
        headers=headers
    )
    assert module.status_code == 201
    module_id = module.json()["id"]

    duplicate_module = client.post(
        f"{BASE_URL}/courses/{course.id}/modules",
        json={"title": "Numbers again", "order_index": 0},
        headers=headers
    )
    assert duplicate_module.status_code == 409

    lesson = client.post(
        f"{BASE_URL}/modules/{module_id}/lessons",
        json={"title": "Counting to ten", "content": "Uno, dos, tres", "order_index": 0, "duration": 300},
        headers=headers
    )
    assert lesson.status_code == 201
    assert lesson.json()["module_id"] == module_id

    duplicate_lesson = client.post(
        f"{BASE_URL}/modules/{module_id}/lessons",
        json={"title": "Counting again", "order_index": 0},
        headers=headers
    )
    assert duplicate_lesson.status_code == 409

    assert client.post(
        f"{BASE_URL}/modules/9999/lessons", json={"title": "Orphan", "order_index": 0}, headers=headers
    ).status_code == 404

    detail = client.get(f"/api/v1/courses/{course.id}").json()
    assert [m["title"] for m in detail["modules"]] == ["Numbers"]
    assert [lesson["title"] for lesson in detail["modules"][0]["lessons"]] == ["Counting to ten"]

def test_cannot_author_in_foreign_course(client, make_user, make_course, auth_headers):
    course = make_course()
    stranger = make_user(role=UserRole.INSTRUCTOR)

    response = client.post(
        f"{BASE_URL}/courses/{course.id}/modules",
        json={"title": "Numbers", "order_index": 0},
        headers=auth_headers(stranger)
    )
    assert response.status_code == 403

def test_stats(client, db, make_user, make_course, enroll, auth_headers):
    instructor = make_user(role=UserRole.INSTRUCTOR)
    first = make_course(instructor=instructor, price="59.99", title="First course")
    second = make_course(instructor=instructor, price="20.00", title="Second course")
    make_course(price="500.00", title="Someone else's course")

    alice, bob, carol = make_user(), make_user(), make_user()
    enroll(alice, first)
    enroll(alice, second)
    enroll(bob, first)
    enroll(carol, second, status=PaymentStatus.PENDING)

    db.add(Review(user_id=alice.id, course_id=first.id, rating=5, comment="Loved it"))
    db.add(Review(user_id=bob.id, course_id=first.id, rating=4))
    db.commit()

    response = client.get(f"{BASE_URL}/stats", headers=auth_headers(instructor))
    assert response.status_code == 200
    stats = response.json()

    assert stats["total_students"] == 3
    assert stats["total_revenue"] == 139.98
    assert stats["average_rating"] == 4.5

    activities = stats["recent_activities"]
    assert len(activities) == 6
    assert {a["type"] for a in activities} == {"enrollment", "review"}
    review_titles = [a["title"] for a in activities if a["type"] == "review"]
    assert 'New 5-star review for "First course"' in review_titles

    listed = {c["title"]: c for c in client.get(f"{BASE_URL}/courses", headers=auth_headers(instructor)).json()}
    assert listed["First course"]["total_enrollments"] == 2
    assert listed["First course"]["average_rating"] == 4.5
    assert listed["First course"]["review_count"] == 2
    assert listed["Second course"]["total_enrollments"] == 2

def test_stats_for_new_instructor(client, make_user, auth_headers):
    stats = client.get(f"{BASE_URL}/stats", headers=auth_headers(make_user(role=UserRole.INSTRUCTOR))).json()

    assert stats == {"total_students": 0, "total_revenue": 0, "average_rating": 0, "recent_activities": []}
