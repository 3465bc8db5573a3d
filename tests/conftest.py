import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth import CallerIdentity, get_optional_identity  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Calendar, Tenant  # noqa: E402

from .fakes import InMemoryReservationStore  # noqa: E402
from .helpers import APPROVAL_SCHEMA, MEETING_SCHEMA  # noqa: E402


class AuthState:
    """Identity returned by the overridden authentication dependency"""

    def __init__(self):
        self.identity = None

    def login(self, uid="user-1", tenant_id=None, roles=()):
        self.identity = CallerIdentity(uid=uid, tenant_id=tenant_id, roles=tuple(roles))
        return self.identity

    def logout(self):
        self.identity = None


@pytest.fixture
def store():
    store = InMemoryReservationStore()
    store.add_tenant("tenant-t", {"meeting": MEETING_SCHEMA, "review": APPROVAL_SCHEMA})
    store.add_calendar("calendar-c", "tenant-t", reservation_type_key="meeting")
    store.add_tenant("tenant-x", {"meeting": MEETING_SCHEMA})
    store.add_calendar("calendar-x", "tenant-x", reservation_type_key="meeting")
    return store


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seeded(db):
    """Tenant T with a meeting calendar and tenant X with its own calendar"""
    db.add_all(
        [
            Tenant(
                id="tenant-t",
                name="Tenant T",
                domain="t.example.com",
                status="active",
                schema_config={
                    "reservationTypes": {"meeting": MEETING_SCHEMA, "review": APPROVAL_SCHEMA}
                },
            ),
            Tenant(
                id="tenant-x",
                name="Tenant X",
                domain="x.example.com",
                status="active",
                schema_config={"reservationTypes": {"meeting": MEETING_SCHEMA}},
            ),
        ]
    )
    db.flush()
    db.add_all(
        [
            Calendar(
                id="calendar-c",
                tenant_id="tenant-t",
                name="Room C",
                reservation_type_key="meeting",
                availability={},
            ),
            Calendar(
                id="calendar-x",
                tenant_id="tenant-x",
                name="Room X",
                reservation_type_key="meeting",
                availability={},
            ),
        ]
    )
    db.commit()
    return db


@pytest.fixture
def auth():
    return AuthState()


@pytest.fixture
def client(session_factory, auth):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    async def override_identity():
        return auth.identity

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_optional_identity] = override_identity
    yield TestClient(app)
    app.dependency_overrides.clear()
