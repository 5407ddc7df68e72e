from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Generator, Mapping, Optional

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/crm` is importable as top-level `crm` for tests.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from crm.core.base import Base  # noqa: E402
from crm.domain.lifecycle import AccountStatus, ClientStatus, UserStatus  # noqa: E402
from crm.models.account import Account, AccountType  # noqa: E402
from crm.models.client import Client, Gender  # noqa: E402
from crm.models.staff_identity import StaffIdentity  # noqa: E402
from crm.models.transaction import Transaction, TransactionStatus, TransactionType  # noqa: E402
from crm.security.roles import Role  # noqa: E402
from crm.services.identity_provider import ProviderUser  # noqa: E402


JWT_SECRET = "test-secret"


def alembic_config(connection: Connection) -> Config:
    cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.attributes["connection"] = connection
    # Keep pytest's log capture wiring intact.
    cfg.attributes["configure_logger"] = False
    return cfg


@pytest.fixture(scope="session")
def engine() -> Engine:
    """Single shared in-memory database, migrated to head once per session."""
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    with eng.begin() as connection:
        command.upgrade(alembic_config(connection), "head")
    return eng


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """DB session per test; every table is emptied afterwards."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


class FakeIdentityProvider:
    """In-memory gateway recording every call (passwords kept apart from `calls`)."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.passwords: dict[str, str] = {}
        self.failures: dict[str, Exception] = {}
        self.omit_subject = False
        self._seq = 0

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def operations(self) -> list[str]:
        return [c[0] for c in self.calls]

    def create_user(self, username: str, temporary_password: str, attributes: Mapping[str, str]) -> ProviderUser:
        self.calls.append(("create_user", username, dict(attributes)))
        self._maybe_fail("create_user")
        self.passwords[username] = temporary_password
        self._seq += 1
        attrs = dict(attributes)
        if not self.omit_subject:
            attrs["sub"] = f"sub-{self._seq:04d}"
        return ProviderUser(username=username, attributes=attrs)

    def add_user_to_group(self, username: str, group_name: str) -> None:
        self.calls.append(("add_user_to_group", username, group_name))
        self._maybe_fail("add_user_to_group")

    def update_user_attributes(self, username: str, attributes: Mapping[str, str]) -> None:
        self.calls.append(("update_user_attributes", username, dict(attributes)))
        self._maybe_fail("update_user_attributes")

    def set_user_password(self, username: str, password: str) -> None:
        self.calls.append(("set_user_password", username))
        self._maybe_fail("set_user_password")
        self.passwords[username] = password


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def notify(self, email: str, message: str) -> None:
        self.sent.append((email, message))


@pytest.fixture()
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def api(
    db_session: Session,
    session_factory: sessionmaker[Session],
    identity_provider: FakeIdentityProvider,
    notifier: RecordingNotifier,
    monkeypatch: pytest.MonkeyPatch,
):
    """TestClient bound to the test database and in-memory collaborators."""
    from fastapi.testclient import TestClient

    from crm.api import deps
    from crm.main import app

    monkeypatch.setenv("CRM_JWT_SECRET", JWT_SECRET)

    def _session() -> Generator[Session, None, None]:
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[deps.get_db_session] = _session
    app.dependency_overrides[deps.get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_jwt(sub: str, groups: list[str], secret: str, *, exp: int | None = None) -> str:
    """HS256 JWT generator for API tests (no external dependency)."""
    payload: dict[str, Any] = {"sub": sub, "cognito:groups": groups}
    if exp is not None:
        payload["exp"] = exp
    return sign_jwt(payload, secret)


def sign_jwt(payload: Any, secret: str, *, header: Any = None) -> str:
    """Sign arbitrary JSON segments, valid or not as claims."""
    import base64, hashlib, hmac, json  # noqa: E401

    def b64url(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    if header is None:
        header = {"alg": "HS256", "typ": "JWT"}

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def auth_header(sub: str, *groups: str) -> dict[str, str]:
    import time

    token = make_jwt(sub, list(groups), JWT_SECRET, exp=int(time.time()) + 3600)
    return {"Authorization": f"Bearer {token}"}


def make_staff(
    session: Session,
    user_id: str,
    role: Role = Role.AGENT,
    *,
    email: Optional[str] = None,
    status: UserStatus = UserStatus.ACTIVE,
) -> StaffIdentity:
    identity = StaffIdentity(
        user_id=user_id,
        first_name="Test",
        last_name=user_id.title().replace("-", ""),
        email=email or f"{user_id}@bank.test",
        role=role,
        user_status=status,
    )
    session.add(identity)
    session.commit()
    return identity


_client_seq = 0


def make_client(
    session: Session,
    agent_id: str,
    *,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    status: ClientStatus = ClientStatus.ACTIVE,
) -> Client:
    global _client_seq
    _client_seq += 1
    client = Client(
        agent_id=agent_id,
        first_name="Jane",
        last_name="Tan",
        date_of_birth=date(1990, 5, 17),
        gender=Gender.FEMALE,
        email=email or f"client{_client_seq}@mail.test",
        phone_number=phone_number or f"+6590000{_client_seq:04d}",
        address="1 Marina Blvd",
        city="Singapore",
        state="Central",
        country="Singapore",
        postal_code="018989",
        client_status=status,
    )
    session.add(client)
    session.commit()
    return client


def make_account(
    session: Session,
    agent_id: str,
    client_id: str,
    *,
    account_id: Optional[str] = None,
    status: AccountStatus = AccountStatus.ACTIVE,
) -> Account:
    account = Account(
        client_id=client_id,
        agent_id=agent_id,
        account_type=AccountType.SAVINGS,
        account_status=status,
        opening_date=date(2024, 1, 15),
        initial_deposit=Decimal("1000.00"),
        currency="SGD",
        branch_id="BR-001",
    )
    if account_id is not None:
        account.account_id = account_id
    session.add(account)
    session.commit()
    return account


def make_transaction(
    session: Session,
    account: Account,
    *,
    transaction_id: Optional[str] = None,
    amount: str = "250.00",
) -> Transaction:
    tx = Transaction(
        client_id=account.client_id,
        account_id=account.account_id,
        transaction_type=TransactionType.DEPOSIT,
        amount=Decimal(amount),
        date=date(2024, 2, 1),
        status=TransactionStatus.COMPLETED,
    )
    if transaction_id is not None:
        tx.transaction_id = transaction_id
    session.add(tx)
    session.commit()
    return tx
