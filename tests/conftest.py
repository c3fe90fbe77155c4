import os
from decimal import Decimal
from typing import Generator

# Override settings for tests before importing storefront modules
TEST_DATABASE_URL = "sqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_mock"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_mock"
os.environ["DEFAULT_CURRENCY"] = "usd"
os.environ["SMTP_HOST"] = ""
os.environ["SMTP_FROM_EMAIL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.auth import create_access_token, get_password_hash
from storefront.dependencies import get_notifier, get_payment_gateway
from storefront.errors import GatewayUnavailable
from storefront.main import app
from storefront.models.database import Base, get_db
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.notifications import NotificationDispatcher
from storefront.services.payment_gateway import INTENT_SUCCEEDED, PaymentIntentRef

# Create test database engine
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeGateway:
    """In-memory stand-in for StripeGateway."""

    def __init__(self):
        self.intents: dict[str, PaymentIntentRef] = {}
        self.created: list[dict] = []
        self.retrieved: list[str] = []
        self.fail_create = False

    def add_intent(
        self,
        intent_id: str,
        status: str = INTENT_SUCCEEDED,
        amount: int | None = None,
        currency: str = "usd",
    ) -> PaymentIntentRef:
        intent = PaymentIntentRef(id=intent_id, status=status, amount=amount, currency=currency)
        self.intents[intent_id] = intent
        return intent

    def create_intent(self, amount_minor_units, currency, metadata=None):
        if self.fail_create:
            raise GatewayUnavailable()
        intent_id = f"pi_test_{len(self.created) + 1}"
        self.created.append(
            {"amount": amount_minor_units, "currency": currency, "metadata": metadata or {}}
        )
        return PaymentIntentRef(
            id=intent_id,
            status="requires_payment",
            amount=amount_minor_units,
            currency=currency,
            metadata=metadata or {},
            client_secret=f"{intent_id}_secret_abc",
        )

    def retrieve_intent(self, intent_id):
        self.retrieved.append(intent_id)
        if intent_id not in self.intents:
            raise GatewayUnavailable()
        return self.intents[intent_id]


class RecordingNotifier(NotificationDispatcher):
    def __init__(self):
        self.confirmed: list[int] = []
        self.status_changes: list[tuple[int, str]] = []

    def order_confirmed(self, order):
        self.confirmed.append(order.id)

    def order_status_changed(self, order):
        self.status_changes.append((order.id, order.status))


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db_session = TestSessionLocal()
    try:
        yield db_session
    finally:
        db_session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db: Session, gateway: FakeGateway, notifier: RecordingNotifier) -> Generator[TestClient, None, None]:
    """Create a test client with database, gateway and notifier overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db: Session, email: str, is_admin: bool) -> User:
    user = User(
        email=email,
        display_name="Admin" if is_admin else "Customer",
        hashed_password=get_password_hash("testpassword123"),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a regular customer."""
    return _make_user(db, "test@example.com", is_admin=False)


@pytest.fixture
def admin_user(db: Session) -> User:
    """Create an admin."""
    return _make_user(db, "admin@example.com", is_admin=True)


@pytest.fixture
def products(db: Session) -> dict[str, Product]:
    """Products A and B with stock 10 and 5."""
    items = {
        "A": Product(id="A", name="Alpha Mug", price=Decimal("5.00"), inventory=10, is_active=True),
        "B": Product(id="B", name="Beta Tee", price=Decimal("9.99"), inventory=5, is_active=True),
    }
    db.add_all(items.values())
    db.commit()
    return items


@pytest.fixture
def auth_token(client: TestClient, test_user: User) -> str:
    """Get auth token for the customer through the login endpoint."""
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 200
    return response.json()["accessToken"]


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


def inventory_of(db: Session, product_id: str) -> int:
    db.expire_all()
    return db.query(Product).filter(Product.id == product_id).one().inventory
