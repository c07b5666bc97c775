import json
import logging
from typing import Optional

import stripe

from coursemarket.config import Settings
from coursemarket.core.exceptions import PaymentProviderException, ValidationException
from coursemarket.models.course import Course
from coursemarket.services.enrollment_service import PaymentConfirmation
from coursemarket.utils.validators import from_minor_units, parse_int, to_minor_units

logger = logging.getLogger(__name__)

PROVIDER = "stripe"
GUEST = "guest"

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"

class StripeService:
    """Адаптер Stripe: PaymentIntent и разбор webhook-событий"""

    def __init__(self, settings: Settings):
        self.api_key = settings.STRIPE_SECRET_KEY
        self.webhook_secret = settings.STRIPE_WEBHOOK_SECRET
        self.currency = settings.STRIPE_CURRENCY
        self.allow_unsigned = settings.ALLOW_UNSIGNED_WEBHOOKS

    async def create_payment_intent(self, course: Course, user_id: Optional[int]):
        try:
            return await stripe.PaymentIntent.create_async(
                amount=to_minor_units(course.price),
                currency=self.currency,
                metadata={
                    "courseId": str(course.id),
                    "userId": str(user_id) if user_id else GUEST,
                    "courseTitle": course.title
                },
                api_key=self.api_key
            )
        except stripe.StripeError as e:
            logger.error("Failed to create payment intent for course %s: %s", course.id, e)
            raise PaymentProviderException(PROVIDER, detail=str(e) or "Failed to create payment intent")

    def parse_event(self, payload: bytes, signature: Optional[str]) -> dict:
        """Проверяет подпись и возвращает событие как dict"""
        if self.webhook_secret:
            try:
                stripe.WebhookSignature.verify_header(
                    payload.decode("utf-8"), signature or "", self.webhook_secret
                )
            except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
                logger.error("Webhook signature verification failed: %s", e)
                raise ValidationException(f"Webhook Error: {e}")
        elif self.allow_unsigned:
            logger.warning("STRIPE_WEBHOOK_SECRET is not set, accepting unsigned webhook")
        else:
            logger.error("Rejected Stripe webhook: STRIPE_WEBHOOK_SECRET is not configured")
            raise ValidationException("Webhook Error: signature verification is not configured")

        try:
            return json.loads(payload)
        except ValueError as e:
            raise ValidationException(f"Webhook Error: invalid payload ({e})")

    def to_confirmation(self, event: dict) -> PaymentConfirmation:
        intent = event.get("data", {}).get("object", {})
        metadata = intent.get("metadata") or {}

        course_id = parse_int(metadata.get("courseId"))
        if course_id is None:
            logger.error("Missing courseId in payment metadata of %s", intent.get("id"))
            raise ValidationException("Missing metadata")

        amount = parse_int(intent.get("amount_received") or intent.get("amount") or 0)
        if amount is None:
            logger.error("Invalid amount in payment intent %s", intent.get("id"))
            raise ValidationException("Invalid amount")

        return PaymentConfirmation(
            provider=PROVIDER,
            provider_payment_id=intent.get("id", ""),
            course_id=course_id,
            # "guest" и любой нечисловой userId - гостевая покупка
            user_id=parse_int(metadata.get("userId")),
            amount=from_minor_units(amount),
            event_type=event.get("type", "")
        )
