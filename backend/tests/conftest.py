import os
from datetime import date
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = "sqlite:///./test_sipe.db"
os.environ["SEED_DEFAULT_USERS"] = "false"
os.environ["APP_ENV"] = "test"

from sipe.core.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from sipe.core.database import Base, SessionLocal, engine  # noqa: E402
from sipe.core.security import create_access_token  # noqa: E402
from sipe.main import app  # noqa: E402
from sipe.models.equipment import Equipment  # noqa: E402
from sipe.services.accounts import create_user  # noqa: E402


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


def bearer(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture()
def admin_user(db_session):
    return create_user(db_session, username="admin", email="admin@example.com", password="admin123", role="admin")


@pytest.fixture()
def regular_user(db_session):
    return create_user(db_session, username="jane", email="jane@example.com", password="jane1234")


@pytest.fixture()
def admin_headers(admin_user) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def user_headers(regular_user) -> dict[str, str]:
    return bearer(regular_user)


@pytest.fixture()
def make_equipment(db_session):
    """Insert catalog rows straight into the store."""

    def _make(code: str, stock: int = 0, name: str = None, notes: str = "") -> Equipment:
        item = Equipment(
            code=code.upper(),
            name=name or f"Equipo {code}",
            purchase_date=date(2024, 1, 10),
            stock=stock,
            notes=notes,
        )
        db_session.add(item)
        db_session.commit()
        db_session.refresh(item)
        return item

    return _make


def stored_stock(item_id: int) -> int:
    session = SessionLocal()
    try:
        return session.get(Equipment, item_id).stock
    finally:
        session.close()
