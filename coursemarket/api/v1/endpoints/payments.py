import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from coursemarket.api.dependencies import get_enrollment_service, get_optional_user_id, get_stripe_service
from coursemarket.core.exceptions import ConflictException, CourseNotFoundException
from coursemarket.crud import course as crud_course
from coursemarket.crud import enrollment as crud_enrollment
from coursemarket.database import get_db
from coursemarket.models.enrollment import PaymentStatus
from coursemarket.schemas.payment import PaymentIntentRequest, PaymentIntentResponse, WebhookAck
from coursemarket.services import stripe_service
from coursemarket.services.enrollment_service import EnrollmentService
from coursemarket.services.stripe_service import StripeService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    payment: PaymentIntentRequest,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
    stripe: StripeService = Depends(get_stripe_service)
):
    """Публичный endpoint: гость тоже может оплатить курс"""
    course = crud_course.get_course(db, course_id=payment.course_id)
    if not course:
        raise CourseNotFoundException()

    if user_id:
        existing = crud_enrollment.get_enrollment(db, user_id=user_id, course_id=course.id)
        if existing and existing.payment_status == PaymentStatus.COMPLETED.value:
            raise ConflictException("You are already enrolled in this course")

    intent = await stripe.create_payment_intent(course, user_id)
    return {
        "client_secret": intent.client_secret,
        "course_id": course.id,
        "price": course.price
    }

@router.post("/webhook", response_model=WebhookAck, response_model_exclude_none=True)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    stripe: StripeService = Depends(get_stripe_service),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    payload = await request.body()
    event = stripe.parse_event(payload, stripe_signature)
    event_type = event.get("type")

    if event_type == stripe_service.PAYMENT_SUCCEEDED:
        confirmation = stripe.to_confirmation(event)
        service.reconcile_payment(confirmation)
        if confirmation.is_guest:
            return WebhookAck(status="guest_purchase")
    elif event_type == stripe_service.PAYMENT_FAILED:
        service.mark_payment_failed(stripe.to_confirmation(event))
    else:
        logger.debug("Ignoring Stripe event %s", event_type)

    return WebhookAck()
