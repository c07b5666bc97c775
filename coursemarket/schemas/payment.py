from pydantic import BaseModel, field_validator
from typing import Optional
from decimal import Decimal

class PaymentIntentRequest(BaseModel):
    course_id: int

class PaymentIntentResponse(BaseModel):
    client_secret: str
    course_id: int
    price: Decimal

class PayPalSetupResponse(BaseModel):
    client_token: str

class PayPalOrderRequest(BaseModel):
    course_id: int
    intent: str = "CAPTURE"
    currency: str = "USD"

    @field_validator('intent')
    @classmethod
    def known_intent(cls, v):
        v = v.upper()
        if v not in ("CAPTURE", "AUTHORIZE"):
            raise ValueError('Invalid intent. Intent must be CAPTURE or AUTHORIZE.')
        return v

    @field_validator('currency')
    @classmethod
    def currency_code(cls, v):
        if len(v) != 3 or not v.isalpha():
            raise ValueError('Invalid currency. Currency must be a 3-letter code.')
        return v.upper()

class PayPalOrderResponse(BaseModel):
    id: str
    status: str
    amount: Decimal

class WebhookAck(BaseModel):
    received: bool = True
    status: Optional[str] = None
