import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Load .env file automatically
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str

    # Payment gateway driver
    PAYMENT_GATEWAY_DRIVER: str = "braintree"

    # Braintree production credentials
    BRAINTREE_MERCHANT_ID: str = ""
    BRAINTREE_PUBLIC_KEY: str = ""
    BRAINTREE_PRIVATE_KEY: str = ""

    # Braintree sandbox credentials (used for testers and test mode)
    BRAINTREE_SANDBOX_MERCHANT_ID: str = ""
    BRAINTREE_SANDBOX_PUBLIC_KEY: str = ""
    BRAINTREE_SANDBOX_PRIVATE_KEY: str = ""
    BRAINTREE_TEST_MODE: bool = False

    # Currency code -> merchant account id, e.g. {"EUR": "acme_eur"}
    BRAINTREE_MERCHANT_ACCOUNTS: dict[str, str] = {}

    # Statement descriptor
    TRANSACTION_DESCRIPTOR_PREFIX: str = ""
    TRANSACTION_DESCRIPTOR_PHONE: str | None = None
    TRANSACTION_DESCRIPTOR_URL: str | None = None

    # Label used in credit card descriptions ("Visa ending in 1111")
    PAYMENT_METHOD_ENDING_IN_LABEL: str = "ending in"

    # App settings
    APP_NAME: str = "Billing Gateway"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "test", "production"] = "development"

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    def __init__(self, **kwargs):
        # Check for DATABASE_URL before calling parent constructor
        if "DATABASE_URL" not in kwargs and not os.getenv("DATABASE_URL"):
            raise RuntimeError(
                "DATABASE_URL not set; create .env or export the variable"
            )
        super().__init__(**kwargs)

    def braintree_credentials(self, test_mode: bool) -> dict[str, str]:
        """Return merchant id and key pair for the requested environment."""
        if test_mode:
            return {
                "merchant_id": self.BRAINTREE_SANDBOX_MERCHANT_ID,
                "public_key": self.BRAINTREE_SANDBOX_PUBLIC_KEY,
                "private_key": self.BRAINTREE_SANDBOX_PRIVATE_KEY,
            }
        return {
            "merchant_id": self.BRAINTREE_MERCHANT_ID,
            "public_key": self.BRAINTREE_PUBLIC_KEY,
            "private_key": self.BRAINTREE_PRIVATE_KEY,
        }
