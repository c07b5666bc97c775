from .user import User, UserRole, UserSession
from .course import Subject, Course, Module, Lesson
from .enrollment import Enrollment, LessonProgress, PaymentStatus
from .review import Review
