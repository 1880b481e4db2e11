"""Test configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import MagicMock, patch

import braintree
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.dependencies import get_settings
from core.settings import Settings
from db.models import Base, Order, User
from main import app


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "DATABASE_URL": "sqlite:///:memory:",
            "BRAINTREE_MERCHANT_ID": "live_merchant",
            "BRAINTREE_PUBLIC_KEY": "live_public",
            "BRAINTREE_PRIVATE_KEY": "live_private",
            "BRAINTREE_SANDBOX_MERCHANT_ID": "sandbox_merchant",
            "BRAINTREE_SANDBOX_PUBLIC_KEY": "sandbox_public",
            "BRAINTREE_SANDBOX_PRIVATE_KEY": "sandbox_private",
            "APP_NAME": "Test Billing",
            "ENVIRONMENT": "development",
        }
    )

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        BRAINTREE_MERCHANT_ID="live_merchant",
        BRAINTREE_PUBLIC_KEY="live_public",
        BRAINTREE_PRIVATE_KEY="live_private",
        BRAINTREE_SANDBOX_MERCHANT_ID="sandbox_merchant",
        BRAINTREE_SANDBOX_PUBLIC_KEY="sandbox_public",
        BRAINTREE_SANDBOX_PRIVATE_KEY="sandbox_private",
        BRAINTREE_MERCHANT_ACCOUNTS={"EUR": "acme_eur"},
        TRANSACTION_DESCRIPTOR_PREFIX="ACME",
        TRANSACTION_DESCRIPTOR_PHONE="5555555555",
        TRANSACTION_DESCRIPTOR_URL="acme.test",
        APP_NAME="Test Billing",
        ENVIRONMENT="development",
    )


@pytest.fixture
def mock_braintree():
    """Patch the SDK gateway; yields the gateway instance services will use."""
    with patch(
        "payments.braintree_service.braintree.Configuration"
    ) as mock_config, patch(
        "payments.braintree_service.braintree.BraintreeGateway"
    ) as mock_gateway_cls:
        gateway = MagicMock()
        mock_gateway_cls.return_value = gateway
        gateway.configuration_cls = mock_config
        yield gateway


def make_user(**overrides) -> User:
    fields = {
        "id": 1,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "payment_profile": "cust_123",
        "billing_details": {
            "companyName": "Analytical Engines",
            "street": "12 St James's Square",
            "zipCode": "SW1Y 4JH",
            "city": "London",
            "country": "gb",
        },
        "is_tester": False,
        "currency": "USD",
    }
    fields.update(overrides)
    return User(**fields)


def make_credit_card(**overrides):
    card = MagicMock(spec=braintree.CreditCard)
    card.token = "card_token"
    card.default = True
    card.card_type = "Visa"
    card.last_4 = "1111"
    card.image_url = "https://assets.braintreegateway.com/visa.png"
    card.cardholder_name = "Ada Lovelace"
    for key, value in overrides.items():
        setattr(card, key, value)
    return card


def make_paypal_account(**overrides):
    account = MagicMock(spec=braintree.PayPalAccount)
    account.token = "paypal_token"
    account.default = False
    account.email = "ada@example.com"
    account.image_url = "https://assets.braintreegateway.com/paypal.png"
    for key, value in overrides.items():
        setattr(account, key, value)
    return account


def success_result(**attributes):
    return MagicMock(is_success=True, **attributes)


def error_result(message: str):
    return MagicMock(is_success=False, message=message)


@pytest.fixture
def user():
    return make_user()


@pytest.fixture
def test_db_engine():
    """Create a test database engine and setup tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stored_user(test_db_session):
    user = make_user()
    test_db_session.add(user)
    test_db_session.commit()
    return user


@pytest.fixture
def pending_order(test_db_session, stored_user):
    order = Order(
        user_id=stored_user.id,
        amount=Decimal("49.90"),
        description="Pro plan monthly",
    )
    test_db_session.add(order)
    test_db_session.commit()
    return order


@pytest.fixture
def client(mock_settings, test_db_engine):
    """Test client bound to the test database and settings."""
    from db.session import get_db, reset_engines

    reset_engines()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_db_engine
    )

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: mock_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    reset_engines()
