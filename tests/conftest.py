import os

# Point the application at a throwaway database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rugtrack.database import Base, get_db
from rugtrack.main import app
from rugtrack.services import store

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def reset_db():
    # Fresh schema for every test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_order(db):
    """Insert an order directly, one rug per given status."""
    def _seed(order_id, statuses, **fields):
        data = {
            "id": order_id,
            "client_name": fields.pop("client_name", f"Client {order_id}"),
            "signature": "data:image/png;base64,AAAA",
        }
        data.update(fields)
        items = [
            {"id": str(index), "status": item_status, "length": "2", "width": "3", "material": "Wool", "state": "Good", "cleaning_cost": 120.0}
            for index, item_status in enumerate(statuses, start=1)
        ]
        return store.create_order(db, data, items)
    return _seed


def order_payload(order_id="ORD-001", items=None, **overrides):
    payload = {
        "id": order_id,
        "client_name": "Jane Doe",
        "phone": "555-0100",
        "email": "jane@example.com",
        "address": "1 Rug Lane",
        "signature": "data:image/png;base64,iVBORw0KGgo=",
        "receipt": "receipt.jpg",
        "items": items if items is not None else [{"id": "1"}, {"id": "2"}],
    }
    payload.update(overrides)
    return payload
