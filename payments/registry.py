from core.settings import Settings
from db.models import User
from payments.braintree_service import BraintreeService
from payments.gateway import PaymentGateway

# Driver name -> gateway implementation
DRIVERS: dict[str, type[PaymentGateway]] = {
    "braintree": BraintreeService,
}


def get_gateway(user: User, settings: Settings) -> PaymentGateway:
    """Instantiate the configured gateway driver for a user."""
    driver = settings.PAYMENT_GATEWAY_DRIVER.lower()
    if driver not in DRIVERS:
        raise ValueError(f"Unknown payment gateway driver: {driver}")
    return DRIVERS[driver](user, settings)
