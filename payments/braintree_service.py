"""
Braintree Payment Service

This module maps the billing application's payment operations onto the
Braintree SDK:
- Customer (payment profile) creation and updates, with address sync
- Vaulting, defaulting and deleting payment methods
- Client token generation
- Sales, voids and refunds
"""

from decimal import Decimal
from typing import Any

import braintree
import structlog
from braintree.exceptions.braintree_error import BraintreeError
from braintree.exceptions.not_found_error import NotFoundError

from core.logging import BusinessEvents
from core.metrics import record_gateway_call
from core.settings import Settings
from db.models import Order, User
from payments.gateway import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentMethod,
    UnsupportedPaymentMethodError,
)

log = structlog.get_logger(__name__)

GATEWAY_NAME = "braintree"

# Braintree descriptor names are 22 characters, one of them the "*" separator
DESCRIPTOR_NAME_LENGTH = 21


class MissingPaymentProfileError(PaymentGatewayError):
    pass


class BraintreeService(PaymentGateway):
    def __init__(self, user: User, settings: Settings):
        """
        Initialize BraintreeService for a single user.

        Testers and BRAINTREE_TEST_MODE both route to the sandbox with the
        sandbox credentials; everyone else hits production.
        """
        self.user = user
        self.settings = settings
        self.test_mode = bool(user.is_tester) or settings.BRAINTREE_TEST_MODE
        self.gateway = braintree.BraintreeGateway(
            braintree.Configuration(
                environment=(
                    braintree.Environment.Sandbox
                    if self.test_mode
                    else braintree.Environment.Production
                ),
                **settings.braintree_credentials(self.test_mode),
            )
        )

    def _call(self, operation: str, fn, *args, errors=(BraintreeError,)) -> Any:
        """Invoke an SDK method, converting `errors` to PaymentGatewayError."""
        try:
            return fn(*args)
        except errors as e:
            raise self._gateway_error(operation, e) from e

    def _gateway_error(self, operation: str, error: Exception) -> PaymentGatewayError:
        message = str(error) or type(error).__name__
        record_gateway_call(operation, False)
        log.error(
            BusinessEvents.GATEWAY_ERROR,
            operation=operation,
            user_id=self.user.id,
            error=message,
        )
        return PaymentGatewayError(message)

    def _ensure_success(self, operation: str, result) -> Any:
        if not result.is_success:
            record_gateway_call(operation, False)
            log.error(
                BusinessEvents.GATEWAY_ERROR,
                operation=operation,
                user_id=self.user.id,
                error=result.message,
            )
            raise PaymentGatewayError(result.message)
        record_gateway_call(operation, True)
        return result

    def _profile(self) -> str:
        if not self.user.payment_profile:
            raise MissingPaymentProfileError(
                f"User {self.user.id} has no payment profile"
            )
        return self.user.payment_profile

    def create_payment_profile(self) -> str:
        result = self._call(
            "customer.create",
            self.gateway.customer.create,
            self.get_customer_data(add_address=False),
        )
        customer_id = self._ensure_success("customer.create", result).customer.id
        log.info(
            BusinessEvents.PROFILE_CREATED, user_id=self.user.id, profile=customer_id
        )
        return customer_id

    def update_payment_profile(self):
        profile = self._profile()
        result = self._call(
            "customer.update",
            self.gateway.customer.update,
            profile,
            self.get_customer_data(),
        )
        customer = self._ensure_success("customer.update", result).customer
        log.info(BusinessEvents.PROFILE_UPDATED, user_id=self.user.id, profile=profile)
        return customer

    def find_customer(self):
        customer = self._call(
            "customer.find", self.gateway.customer.find, self._profile()
        )
        record_gateway_call("customer.find", True)
        return customer

    def create_payment_method(self, token: str) -> PaymentMethod:
        result = self._call(
            "payment_method.create",
            self.gateway.payment_method.create,
            {
                "customer_id": self._profile(),
                "payment_method_nonce": token,
                "options": {"make_default": True},
            },
        )
        payment_method = self.parse_payment_method(
            self._ensure_success("payment_method.create", result).payment_method
        )
        log.info(
            BusinessEvents.PAYMENT_METHOD_CREATED,
            user_id=self.user.id,
            token=payment_method.token,
            type=payment_method.type,
        )
        return payment_method

    def get_payment_methods(self) -> list[PaymentMethod]:
        payment_methods = []
        for gateway_method in self.find_customer().payment_methods:
            try:
                payment_methods.append(self.parse_payment_method(gateway_method))
            except UnsupportedPaymentMethodError as e:
                log.warning(
                    BusinessEvents.PAYMENT_METHOD_SKIPPED,
                    user_id=self.user.id,
                    reason=str(e),
                )
        return payment_methods

    def set_default_payment_method(self, token: str) -> PaymentMethod:
        result = self._call(
            "payment_method.update",
            self.gateway.payment_method.update,
            token,
            {"options": {"make_default": True}},
        )
        payment_method = self.parse_payment_method(
            self._ensure_success("payment_method.update", result).payment_method
        )
        log.info(
            BusinessEvents.PAYMENT_METHOD_DEFAULTED, user_id=self.user.id, token=token
        )
        return payment_method

    def delete_payment_method(self, token: str) -> bool:
        """Delete a vaulted method; an unknown token yields False."""
        try:
            result = self.gateway.payment_method.delete(token)
        except NotFoundError:
            record_gateway_call("payment_method.delete", False)
            log.warning(
                BusinessEvents.PAYMENT_METHOD_DELETED,
                user_id=self.user.id,
                token=token,
                success=False,
                reason="not_found",
            )
            return False
        except BraintreeError as e:
            raise self._gateway_error("payment_method.delete", e) from e

        record_gateway_call("payment_method.delete", result.is_success)
        log.info(
            BusinessEvents.PAYMENT_METHOD_DELETED,
            user_id=self.user.id,
            token=token,
            success=result.is_success,
        )
        return result.is_success

    def get_payment_token(self) -> str:
        # The SDK reports rejected client token requests as ValueError
        client_token = self._call(
            "client_token.generate",
            self.gateway.client_token.generate,
            {"customer_id": self._profile()},
            errors=(BraintreeError, ValueError),
        )
        record_gateway_call("client_token.generate", True)
        return client_token

    def purchase(
        self,
        amount: Decimal,
        description: str | None = None,
        order: Order | None = None,
        nonce: str | None = None,
        token: str | None = None,
    ):
        """
        Charge the user and return the Braintree transaction result.

        Args:
            amount: Amount in the merchant account's currency
            description: Short purchase description, used for the descriptor
            order: Order being paid; its id becomes the Braintree order id
            nonce: Fresh client nonce, vaulted as the new default method first
            token: Existing vaulted payment method to charge

        Raises:
            PaymentGatewayError: If Braintree declines or rejects the sale
        """
        if nonce:
            self.create_payment_method(nonce)

        self.update_payment_profile()

        params: dict[str, Any] = {
            "customer_id": self._profile(),
            "amount": str(Decimal(amount).quantize(Decimal("0.01"))),
            "options": {"submit_for_settlement": True},
        }
        if token:
            params["payment_method_token"] = token
        if description:
            params["descriptor"] = self.generate_descriptor(description)

        merchant_account_id = self.settings.BRAINTREE_MERCHANT_ACCOUNTS.get(
            self.user.currency
        )
        if merchant_account_id:
            params["merchant_account_id"] = merchant_account_id
        if order is not None:
            params["order_id"] = str(order.id)

        log.info(
            BusinessEvents.PAYMENT_ATTEMPT,
            user_id=self.user.id,
            order_id=order.id if order is not None else None,
            amount=params["amount"],
            provider=GATEWAY_NAME,
        )

        result = self._call("transaction.sale", self.gateway.transaction.sale, params)
        if not result.is_success:
            record_gateway_call("transaction.sale", False)
            log.error(
                BusinessEvents.PAYMENT_FAILURE,
                user_id=self.user.id,
                amount=params["amount"],
                provider=GATEWAY_NAME,
                error=result.message,
            )
            raise PaymentGatewayError(result.message)

        record_gateway_call("transaction.sale", True)
        log.info(
            BusinessEvents.PAYMENT_SUCCESS,
            user_id=self.user.id,
            amount=params["amount"],
            provider=GATEWAY_NAME,
            provider_transaction_id=result.transaction.id,
        )
        return result

    def void(self, reference: str) -> str:
        result = self._call("transaction.void", self.gateway.transaction.void, reference)
        self._ensure_success("transaction.void", result)
        log.info(BusinessEvents.VOID_SUCCESS, user_id=self.user.id, reference=reference)
        return reference

    def refund(self, reference: str) -> str:
        result = self._call(
            "transaction.refund", self.gateway.transaction.refund, reference
        )
        self._ensure_success("transaction.refund", result)
        log.info(
            BusinessEvents.REFUND_SUCCESS, user_id=self.user.id, reference=reference
        )
        return reference

    def generate_descriptor(self, description: str) -> dict[str, str]:
        """Build the statement descriptor, e.g. ``ACME*PRO PLAN``."""
        prefix = self.settings.TRANSACTION_DESCRIPTOR_PREFIX
        length = max(DESCRIPTOR_NAME_LENGTH - len(prefix), 0)
        descriptor = {
            "name": f"{prefix}*{description[:length].upper()}",
            "phone": self.settings.TRANSACTION_DESCRIPTOR_PHONE,
            "url": self.settings.TRANSACTION_DESCRIPTOR_URL,
        }
        return {key: value for key, value in descriptor.items() if value}

    def parse_payment_method(self, gateway_method) -> PaymentMethod:
        if isinstance(gateway_method, braintree.CreditCard):
            return self._parse_credit_card(gateway_method)
        if isinstance(gateway_method, braintree.PayPalAccount):
            return self._parse_paypal_account(gateway_method)
        raise UnsupportedPaymentMethodError(
            f"Unsupported payment method type: {type(gateway_method).__name__}"
        )

    def _parse_credit_card(self, credit_card) -> PaymentMethod:
        ending_in = self.settings.PAYMENT_METHOD_ENDING_IN_LABEL
        return PaymentMethod(
            token=credit_card.token,
            type="credit_card",
            default=credit_card.default,
            gateway=GATEWAY_NAME,
            description=f"{credit_card.card_type} {ending_in} {credit_card.last_4}",
            image_url=credit_card.image_url,
            holder=credit_card.cardholder_name,
        )

    def _parse_paypal_account(self, paypal_account) -> PaymentMethod:
        return PaymentMethod(
            token=paypal_account.token,
            type="paypal_account",
            default=paypal_account.default,
            gateway=GATEWAY_NAME,
            description=paypal_account.email,
            image_url=paypal_account.image_url,
            holder=paypal_account.email,
        )

    def create_address(self, billing_details: dict):
        result = self._call(
            "address.create",
            self.gateway.address.create,
            {"customer_id": self._profile(), **self.get_billing_data(billing_details)},
        )
        return self._ensure_success("address.create", result)

    def update_address(self, address_id: str, billing_details: dict):
        result = self._call(
            "address.update",
            self.gateway.address.update,
            self._profile(),
            address_id,
            self.get_billing_data(billing_details),
        )
        return self._ensure_success("address.update", result)

    def get_customer_data(self, add_address: bool = True) -> dict[str, str]:
        billing_details = self.user.billing_details or {}

        if add_address:
            customer = self.find_customer()
            if not customer.addresses:
                self.create_address(billing_details)
            else:
                self.update_address(customer.addresses[0].id, billing_details)
            log.info(BusinessEvents.ADDRESS_SYNCED, user_id=self.user.id)

        return {
            "first_name": self.user.first_name,
            "last_name": self.user.last_name,
            "email": self.user.email,
            "company": billing_details.get("companyName", ""),
        }

    def get_billing_data(self, billing_details: dict) -> dict[str, str]:
        data = {
            "first_name": self.user.first_name,
            "last_name": self.user.last_name,
            "company": billing_details.get("companyName", ""),
            "street_address": billing_details.get("street", ""),
            "postal_code": billing_details.get("zipCode", ""),
            "locality": billing_details.get("city", ""),
        }

        country = billing_details.get("country")
        if country:
            if len(country) == 2:
                data["country_code_alpha2"] = country.upper()
            else:
                data["country_name"] = country

        return data
