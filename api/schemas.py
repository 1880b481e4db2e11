"""
API Schemas Module

This module defines Pydantic models for request/response validation.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

from db.models import OrderStatus
from payments.gateway import PaymentMethod

__all__ = [
    "ClientTokenOut",
    "OrderOut",
    "PaymentMethod",
    "PaymentMethodCreate",
    "PaymentMethodDeleted",
    "PaymentProfileOut",
    "PurchaseRequest",
]


class PaymentProfileOut(BaseModel):
    user_id: int
    payment_profile: str
    created: bool


class ClientTokenOut(BaseModel):
    client_token: str


class PaymentMethodCreate(BaseModel):
    nonce: str


class PaymentMethodDeleted(BaseModel):
    token: str
    deleted: bool


class PurchaseRequest(BaseModel):
    """Either a fresh client nonce or a vaulted token; neither charges the default."""

    nonce: str | None = None
    token: str | None = None

    @model_validator(mode="after")
    def validate_single_source(self):
        if self.nonce and self.token:
            raise ValueError("Provide either nonce or token, not both")
        return self


class OrderOut(BaseModel):
    id: int
    user_id: int
    amount: Decimal
    description: str | None = None
    status: OrderStatus
    transaction_reference: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
