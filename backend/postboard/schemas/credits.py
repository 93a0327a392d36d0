from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"


class PaymentDetails(BaseModel):
    card_number: Optional[str] = None
    paypal_email: Optional[str] = None
    bank_account: Optional[str] = None


class PurchaseCreditsRequest(BaseModel):
    credits: int = Field(..., gt=0)
    payment_method: PaymentMethod
    payment_details: Optional[PaymentDetails] = None


class CreditPurchaseResponse(BaseModel):
    id: int
    user_id: int
    credits_purchased: int
    amount_paid: Decimal
    payment_method: PaymentMethod
    transaction_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    balance: int
