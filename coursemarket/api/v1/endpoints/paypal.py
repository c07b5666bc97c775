import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from coursemarket.api.dependencies import get_enrollment_service, get_optional_user_id, get_paypal_service
from coursemarket.core.exceptions import CourseNotFoundException, ValidationException
from coursemarket.crud import course as crud_course
from coursemarket.database import get_db
from coursemarket.schemas.payment import (
    PayPalOrderRequest,
    PayPalOrderResponse,
    PayPalSetupResponse,
    WebhookAck,
)
from coursemarket.services import paypal_service
from coursemarket.services.enrollment_service import EnrollmentService
from coursemarket.services.paypal_service import PayPalService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/setup", response_model=PayPalSetupResponse)
async def paypal_setup(paypal: PayPalService = Depends(get_paypal_service)):
    """Клиентский токен для PayPal SDK на фронтенде"""
    return {"client_token": await paypal.get_client_token()}

@router.post("/order", response_model=PayPalOrderResponse)
async def create_order(
    order: PayPalOrderRequest,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
    paypal: PayPalService = Depends(get_paypal_service)
):
    """Сумма заказа берется из цены курса, не из запроса"""
    course = crud_course.get_course(db, course_id=order.course_id)
    if not course:
        raise CourseNotFoundException()
    return await paypal.create_order(course, user_id, intent=order.intent, currency=order.currency)

@router.post("/order/{order_id}/capture")
async def capture_order(order_id: str, paypal: PayPalService = Depends(get_paypal_service)):
    return await paypal.capture_order(order_id)

@router.post("/webhook", response_model=WebhookAck, response_model_exclude_none=True)
async def paypal_webhook(
    request: Request,
    paypal: PayPalService = Depends(get_paypal_service),
    service: EnrollmentService = Depends(get_enrollment_service)
):
    try:
        event = json.loads(await request.body())
    except ValueError:
        raise ValidationException("Invalid webhook payload")

    await paypal.verify_webhook(request.headers, event)

    event_type = event.get("event_type")
    logger.info("PayPal webhook received: %s %s", event_type, event.get("id"))

    if event_type == paypal_service.CAPTURE_COMPLETED:
        confirmation = paypal_service.to_confirmation(event)
        if confirmation is None:
            return WebhookAck()
        service.reconcile_payment(confirmation)
        if confirmation.is_guest:
            return WebhookAck(status="guest_purchase")
    elif event_type == paypal_service.CAPTURE_DENIED:
        confirmation = paypal_service.to_confirmation(event)
        if confirmation is not None:
            service.mark_payment_failed(confirmation)

    return WebhookAck()
