from .user import (
    UserBase,
    UserCreate,
    LoginRequest,
    UserResponse,
    UserSummary,
    InstructorSummary,
    AuthResponse
)

from .course import (
    SubjectSummary,
    SubjectResponse,
    RatingSummary,
    CourseCreate,
    CourseUpdate,
    ModuleCreate,
    LessonCreate,
    LessonResponse,
    ModuleResponse,
    CourseResponse,
    CourseListItem,
    Pagination,
    CourseListResponse,
    CourseReview,
    CourseDetailResponse
)

from .enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentWithProgress,
    LessonProgressUpdate,
    LessonProgressResponse
)

from .review import ReviewCreate

from .payment import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    PayPalSetupResponse,
    PayPalOrderRequest,
    PayPalOrderResponse,
    WebhookAck
)

from .instructor import (
    InstructorCourseResponse,
    RecentActivity,
    InstructorStats
)
