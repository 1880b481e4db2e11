"""
Payment profile and payment method routes.

Each route resolves the user, builds the configured gateway driver for them
and performs a single gateway operation.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.schemas import (
    ClientTokenOut,
    PaymentMethod,
    PaymentMethodCreate,
    PaymentMethodDeleted,
    PaymentProfileOut,
)
from core.dependencies import get_settings
from core.settings import Settings
from db.models import User
from db.session import get_db
from payments.gateway import PaymentGateway
from payments.registry import get_gateway

log = structlog.get_logger(__name__)

router = APIRouter()


def get_user(user_id: int, db: Session = Depends(get_db)) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_user_gateway(
    user: User = Depends(get_user), settings: Settings = Depends(get_settings)
) -> PaymentGateway:
    return get_gateway(user, settings)


@router.post("/{user_id}/payment-profile", response_model=PaymentProfileOut)
def sync_payment_profile(
    user: User = Depends(get_user),
    gateway: PaymentGateway = Depends(get_user_gateway),
    db: Session = Depends(get_db),
):
    """Create the user's gateway customer, or push current details to it."""
    if user.payment_profile:
        gateway.update_payment_profile()
        return PaymentProfileOut(
            user_id=user.id, payment_profile=user.payment_profile, created=False
        )

    user.payment_profile = gateway.create_payment_profile()
    db.commit()
    log.info("payment_profile.cached", user_id=user.id, profile=user.payment_profile)
    return PaymentProfileOut(
        user_id=user.id, payment_profile=user.payment_profile, created=True
    )


@router.get("/{user_id}/client-token", response_model=ClientTokenOut)
def get_client_token(gateway: PaymentGateway = Depends(get_user_gateway)):
    return ClientTokenOut(client_token=gateway.get_payment_token())


@router.get("/{user_id}/payment-methods", response_model=list[PaymentMethod])
def list_payment_methods(gateway: PaymentGateway = Depends(get_user_gateway)):
    return gateway.get_payment_methods()


@router.post("/{user_id}/payment-methods", response_model=PaymentMethod, status_code=201)
def create_payment_method(
    payload: PaymentMethodCreate, gateway: PaymentGateway = Depends(get_user_gateway)
):
    return gateway.create_payment_method(payload.nonce)


@router.put("/{user_id}/payment-methods/{token}/default", response_model=PaymentMethod)
def set_default_payment_method(
    token: str, gateway: PaymentGateway = Depends(get_user_gateway)
):
    return gateway.set_default_payment_method(token)


@router.delete("/{user_id}/payment-methods/{token}", response_model=PaymentMethodDeleted)
def delete_payment_method(
    token: str, gateway: PaymentGateway = Depends(get_user_gateway)
):
    deleted = gateway.delete_payment_method(token)
    if not deleted:
        raise HTTPException(status_code=404, detail="Payment method not found")
    return PaymentMethodDeleted(token=token, deleted=True)
