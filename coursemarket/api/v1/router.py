from fastapi import APIRouter
from coursemarket.api.v1.endpoints import auth, courses, enrollments, reviews, payments, paypal, instructor

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(courses.router, tags=["Courses"])
api_router.include_router(enrollments.router, tags=["Enrollments"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(payments.router, tags=["Stripe"])
api_router.include_router(paypal.router, prefix="/paypal", tags=["PayPal"])
api_router.include_router(instructor.router, prefix="/instructor", tags=["Instructor"])
