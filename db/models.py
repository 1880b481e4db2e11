"""
Database Models Module

This module defines SQLAlchemy ORM models for:
- Users and their cached gateway payment profile
- Orders charged through the payment gateway
"""

from datetime import datetime, UTC
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class User(Base):
    """A billable user. `payment_profile` is the gateway's customer id."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, index=True)
    payment_profile = Column(String(64), nullable=True)
    billing_details = Column(JSON, nullable=False, default=dict)
    is_tester = Column(Boolean, nullable=False, default=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    orders = relationship("Order", back_populates="user", lazy="dynamic")

    def __repr__(self):
        return f"<User(id={self.id}, payment_profile={self.payment_profile})>"


class OrderStatus(PyEnum):
    pending = "pending"
    paid = "paid"
    voided = "voided"
    refunded = "refunded"


class Order(Base):
    """Model representing an order charged through the gateway."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String(255), nullable=True)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending)
    transaction_reference = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )

    user = relationship("User", back_populates="orders")

    def __repr__(self):
        return f"<Order(id={self.id}, status={self.status})>"
