"""
Payment Gateway Contract

Every gateway driver implements `PaymentGateway`. The rest of the billing
application only sees this interface and the `PaymentMethod` projection, so
drivers can be swapped through configuration.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel

from db.models import Order


class PaymentGatewayError(Exception):
    """An unsuccessful gateway response, carrying the gateway's message."""


class UnsupportedPaymentMethodError(PaymentGatewayError):
    pass


class PaymentMethod(BaseModel):
    """Uniform projection of a gateway-side payment method."""

    token: str
    type: Literal["credit_card", "paypal_account"]
    default: bool = False
    gateway: str
    description: str | None = None
    image_url: str | None = None
    holder: str | None = None


class PaymentGateway(ABC):
    """Contract between the billing application and a payment gateway."""

    @abstractmethod
    def create_payment_profile(self) -> str:
        """Create a customer at the gateway and return its id."""

    @abstractmethod
    def update_payment_profile(self) -> Any:
        """Push the user's current details to the gateway customer."""

    @abstractmethod
    def find_customer(self) -> Any:
        """Fetch the gateway customer for the user's payment profile."""

    @abstractmethod
    def create_payment_method(self, token: str) -> PaymentMethod:
        """Vault a payment method from a client nonce and make it default."""

    @abstractmethod
    def get_payment_methods(self) -> list[PaymentMethod]:
        ...

    @abstractmethod
    def set_default_payment_method(self, token: str) -> PaymentMethod:
        ...

    @abstractmethod
    def delete_payment_method(self, token: str) -> bool:
        ...

    @abstractmethod
    def get_payment_token(self) -> str:
        """Client token the front end uses to initialise the gateway SDK."""

    @abstractmethod
    def purchase(
        self,
        amount: Decimal,
        description: str | None = None,
        order: Order | None = None,
        nonce: str | None = None,
        token: str | None = None,
    ) -> Any:
        """Charge the user and return the gateway transaction response."""

    @abstractmethod
    def void(self, reference: str) -> str:
        ...

    @abstractmethod
    def refund(self, reference: str) -> str:
        ...
