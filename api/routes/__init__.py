"""
API Routes Package

This module consolidates all API routes for the billing gateway.
"""

from fastapi import APIRouter

from . import orders
from . import payment_methods

# Create main router
router = APIRouter()

router.include_router(payment_methods.router, prefix="/users", tags=["payment-methods"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])

__all__ = ["router"]
