import os

# Must be set before workboard settings are imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GATE_ENABLED"] = "false"
os.environ["POLL_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from workboard.main import app
from workboard.models.request import Base
from workboard.services.gateway import RecordStoreGateway
from workboard.services.mutations import BoardMutations
from workboard.services.poller import BoardPoller, get_poller


class MemoryStorage:
    """Stands in for the request-images bucket."""

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.fail = False

    def upload_fileobj(self, *, fileobj, key: str, content_type: str):
        if self.fail:
            raise ClientError({"Error": {"Code": "503", "Message": "bucket unavailable"}}, "PutObject")
        self.objects[key] = (fileobj.read(), content_type)

    def delete_object(self, *, key: str):
        self.objects.pop(key, None)

    def get_public_url(self, *, key: str) -> str:
        return f"https://storage.example.com/request-images/{key}"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    engine.dispose()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def gateway(session_factory, storage):
    return RecordStoreGateway(session_factory, storage)


@pytest.fixture
def poller(gateway):
    return BoardPoller(gateway, interval_seconds=15, completed_cap=100, deleted_cap=10)


@pytest.fixture
def mutations(gateway, poller):
    return BoardMutations(gateway, poller)


@pytest.fixture
def client(poller):
    app.dependency_overrides[get_poller] = lambda: poller
    yield TestClient(app)
    app.dependency_overrides.clear()
