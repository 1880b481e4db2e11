"""
Order payment routes: purchase, void and refund.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.schemas import OrderOut, PurchaseRequest
from core.dependencies import get_settings
from core.settings import Settings
from db.models import Order, OrderStatus
from db.session import get_db
from payments.gateway import PaymentGateway
from payments.registry import get_gateway

log = structlog.get_logger(__name__)

router = APIRouter()


def _get_order(order_id: int, db: Session) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _gateway_for(order: Order, settings: Settings) -> PaymentGateway:
    return get_gateway(order.user, settings)


@router.post("/{order_id}/purchase", response_model=OrderOut)
def purchase_order(
    order_id: int,
    payload: PurchaseRequest | None = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    order = _get_order(order_id, db)
    if order.status != OrderStatus.pending:
        raise HTTPException(
            status_code=409, detail=f"Order is already {order.status.value}"
        )

    payload = payload or PurchaseRequest()
    result = _gateway_for(order, settings).purchase(
        order.amount,
        description=order.description,
        order=order,
        nonce=payload.nonce,
        token=payload.token,
    )

    order.status = OrderStatus.paid
    order.transaction_reference = result.transaction.id
    db.commit()
    db.refresh(order)
    log.info(
        "order.paid", order_id=order.id, reference=order.transaction_reference
    )
    return order


def _reverse(order_id: int, db: Session, settings: Settings, refund: bool) -> Order:
    order = _get_order(order_id, db)
    if order.status != OrderStatus.paid:
        raise HTTPException(
            status_code=409, detail="Only paid orders can be voided or refunded"
        )

    gateway = _gateway_for(order, settings)
    if refund:
        gateway.refund(order.transaction_reference)
        order.status = OrderStatus.refunded
    else:
        gateway.void(order.transaction_reference)
        order.status = OrderStatus.voided
    db.commit()
    db.refresh(order)
    log.info("order.reversed", order_id=order.id, status=order.status.value)
    return order


@router.post("/{order_id}/void", response_model=OrderOut)
def void_order(
    order_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Void an order whose transaction has not settled yet."""
    return _reverse(order_id, db, settings, refund=False)


@router.post("/{order_id}/refund", response_model=OrderOut)
def refund_order(
    order_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return _reverse(order_id, db, settings, refund=True)
