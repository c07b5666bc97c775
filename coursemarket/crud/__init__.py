from .user import (
    get_user,
    get_user_by_email,
    get_user_by_username,
    get_user_by_email_or_username,
    authenticate_user,
    create_user,
    create_session,
    get_active_session,
    delete_session
)

from .course import (
    get_subjects,
    get_course,
    get_course_with_tree,
    get_courses,
    get_instructor_courses,
    get_rating_stats,
    create_course,
    update_course,
    get_module,
    create_module,
    get_lesson,
    create_lesson,
    get_course_lesson_ids
)

from .enrollment import (
    get_enrollment,
    get_user_enrollments,
    get_lesson_progress,
    count_completed_lessons
)

from .review import (
    get_review,
    get_course_reviews,
    update_review
)
