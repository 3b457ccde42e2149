import os

# Settings are read once at import time; point them at a throwaway DB.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("ADMIN_EMAILS", "")
os.environ.setdefault("SITE_URL", "http://localhost:8000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from hyroxbox.core.deps import get_current_user, get_current_user_optional, get_session
from hyroxbox.db.models import HyroxBox, Region
from hyroxbox.main import app
from hyroxbox.services.auth_provider import AuthUser

ADMIN = AuthUser(id="user-1", email="admin@example.com")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def anon_client(session):
    """Client with the test DB but no signed-in user."""
    app.dependency_overrides[get_session] = lambda: session
    # Startup hooks are skipped: no `with` block.
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client):
    """Client acting as a signed-in admin."""
    app.dependency_overrides[get_current_user] = lambda: ADMIN
    app.dependency_overrides[get_current_user_optional] = lambda: ADMIN
    return anon_client


def make_region(session, name="서울", code="SEL", description=None):
    region = Region(name=name, code=code, description=description)
    session.add(region)
    session.commit()
    session.refresh(region)
    return region


def make_box(session, region, name="Box", popularity=0, **fields):
    box = HyroxBox(name=name, region_id=region.id, popularity=popularity, **fields)
    session.add(box)
    session.commit()
    session.refresh(box)
    return box


@pytest.fixture
def seoul(session):
    return make_region(session, "서울", "SEL")


@pytest.fixture
def busan(session):
    return make_region(session, "부산", "BUS")
