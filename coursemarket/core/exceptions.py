from typing import Optional

from fastapi import HTTPException, status

class CustomHTTPException(HTTPException):
    def __init__(self, detail: str, status_code: int = 400, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class ValidationException(CustomHTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)

class UnauthorizedException(CustomHTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(CustomHTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)

class NotFoundException(CustomHTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)

class UserNotFoundException(NotFoundException):
    def __init__(self, user_id: int = None):
        detail = f"User with id {user_id} not found" if user_id else "User not found"
        super().__init__(detail=detail)

class CourseNotFoundException(NotFoundException):
    def __init__(self, course_id: int = None):
        detail = f"Course with id {course_id} not found" if course_id else "Course not found"
        super().__init__(detail=detail)

class ModuleNotFoundException(NotFoundException):
    def __init__(self, module_id: int = None):
        detail = f"Module with id {module_id} not found" if module_id else "Module not found"
        super().__init__(detail=detail)

class LessonNotFoundException(NotFoundException):
    def __init__(self, lesson_id: int = None):
        detail = f"Lesson with id {lesson_id} not found" if lesson_id else "Lesson not found"
        super().__init__(detail=detail)

class ConflictException(CustomHTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)

class PaymentProviderException(CustomHTTPException):
    def __init__(self, provider: str, detail: str = "Payment provider request failed"):
        self.provider = provider
        super().__init__(detail=detail, status_code=status.HTTP_502_BAD_GATEWAY)
