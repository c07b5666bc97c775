"""PayPal Orders v2 через REST API.

Клиент создается на процесс; для тестов транспорт httpx подменяется.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

import httpx

from coursemarket.config import Settings
from coursemarket.core.exceptions import PaymentProviderException, ValidationException
from coursemarket.models.course import Course
from coursemarket.services.enrollment_service import PaymentConfirmation
from coursemarket.utils.validators import parse_int, to_money

logger = logging.getLogger(__name__)

PROVIDER = "paypal"
GUEST = "guest"

CAPTURE_COMPLETED = "PAYMENT.CAPTURE.COMPLETED"
CAPTURE_DENIED = "PAYMENT.CAPTURE.DENIED"

# Заголовки, нужные для verify-webhook-signature
SIGNATURE_HEADERS = {
    "auth_algo": "paypal-auth-algo",
    "cert_url": "paypal-cert-url",
    "transmission_id": "paypal-transmission-id",
    "transmission_sig": "paypal-transmission-sig",
    "transmission_time": "paypal-transmission-time",
}

class PayPalService:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = settings.PAYPAL_CLIENT_ID
        self.client_secret = settings.PAYPAL_CLIENT_SECRET
        self.webhook_id = settings.PAYPAL_WEBHOOK_ID
        self.allow_unverified = settings.ALLOW_UNSIGNED_WEBHOOKS
        self.client = httpx.AsyncClient(
            base_url=settings.PAYPAL_BASE_URL,
            timeout=settings.PAYPAL_TIMEOUT,
            transport=transport
        )

    async def aclose(self):
        await self.client.aclose()

    # === API ===
    async def get_client_token(self) -> str:
        data = await self._request("POST", "/v1/identity/generate-token")
        return _require(data, "client_token")

    async def create_order(
        self,
        course: Course,
        user_id: Optional[int],
        intent: str = "CAPTURE",
        currency: str = "USD"
    ) -> dict:
        amount = to_money(course.price)
        if amount <= 0:
            raise ValidationException("Invalid amount. Amount must be a positive number.")

        body = {
            "intent": intent,
            "purchase_units": [{
                "reference_id": str(course.id),
                "description": course.title,
                "custom_id": build_custom_id(course.id, user_id),
                "amount": {"currency_code": currency, "value": str(amount)}
            }]
        }
        order = await self._request("POST", "/v2/checkout/orders", json=body)
        logger.info("Created PayPal order %s for course %s", order.get("id"), course.id)
        return {"id": _require(order, "id"), "status": order.get("status", ""), "amount": amount}

    async def capture_order(self, order_id: str) -> dict:
        capture = await self._request("POST", f"/v2/checkout/orders/{order_id}/capture", json={})
        logger.info("Captured PayPal order %s with status %s", order_id, capture.get("status"))
        return capture

    async def verify_webhook(self, headers: Mapping[str, str], event: dict):
        if not self.webhook_id:
            if not self.allow_unverified:
                logger.error("Rejected PayPal webhook: PAYPAL_WEBHOOK_ID is not configured")
                raise ValidationException("Webhook signature verification is not configured")
            logger.warning("PAYPAL_WEBHOOK_ID is not set, accepting unverified webhook")
            return

        body = {name: headers.get(header) for name, header in SIGNATURE_HEADERS.items()}
        if not all(body.values()):
            raise ValidationException("Missing PayPal signature headers")

        body.update({"webhook_id": self.webhook_id, "webhook_event": event})
        result = await self._request("POST", "/v1/notifications/verify-webhook-signature", json=body)
        if result.get("verification_status") != "SUCCESS":
            logger.error("PayPal webhook signature verification failed for %s", event.get("id"))
            raise ValidationException("Webhook signature verification failed")

    # === Внутреннее ===
    async def _access_token(self) -> str:
        try:
            response = await self.client.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret)
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("PayPal authentication failed: %s", e)
            raise PaymentProviderException(PROVIDER, detail="PayPal authentication failed")
        return _require(_json(response), "access_token")

    async def _request(self, method: str, url: str, json: Optional[dict] = None) -> dict:
        token = await self._access_token()
        try:
            response = await self.client.request(
                method, url, json=json, headers={"Authorization": f"Bearer {token}"}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("PayPal %s %s failed with %s: %s", method, url, e.response.status_code, e.response.text)
            raise PaymentProviderException(PROVIDER, detail=f"PayPal request failed ({e.response.status_code})")
        except httpx.HTTPError as e:
            logger.error("PayPal %s %s failed: %s", method, url, e)
            raise PaymentProviderException(PROVIDER)
        return _json(response)

def _json(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        logger.error("PayPal returned a non-JSON body for %s", response.request.url)
        raise PaymentProviderException(PROVIDER, detail="Unexpected PayPal response")
    if not isinstance(data, dict):
        logger.error("PayPal returned %s instead of an object for %s", type(data).__name__, response.request.url)
        raise PaymentProviderException(PROVIDER, detail="Unexpected PayPal response")
    return data

def _require(data: dict, key: str):
    value = data.get(key)
    if not value:
        logger.error("PayPal response has no %s", key)
        raise PaymentProviderException(PROVIDER, detail=f"PayPal response is missing {key}")
    return value

def build_custom_id(course_id: int, user_id: Optional[int]) -> str:
    return f"{course_id}:{user_id if user_id else GUEST}"

def to_confirmation(event: dict) -> Optional[PaymentConfirmation]:
    """Событие захвата -> PaymentConfirmation; None если custom_id не передан"""
    resource = event.get("resource") or {}
    custom_id = resource.get("custom_id")
    if not custom_id:
        return None

    course_part, _, user_part = str(custom_id).partition(":")
    course_id = parse_int(course_part)
    if course_id is None:
        logger.error("Missing courseId in PayPal webhook data: %r", custom_id)
        raise ValidationException("Missing courseId")

    try:
        amount = Decimal(str((resource.get("amount") or {}).get("value", "0")))
    except InvalidOperation:
        raise ValidationException("Invalid amount")

    return PaymentConfirmation(
        provider=PROVIDER,
        provider_payment_id=resource.get("id", ""),
        course_id=course_id,
        user_id=parse_int(user_part),
        amount=amount,
        event_type=event.get("event_type", "")
    )
