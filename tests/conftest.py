"""
Campus Connect - Test Configuration and Fixtures

The lifecycle and API tests run against in-memory stand-ins for the Firestore
relationship store and user directory, so no emulator is needed.
"""
import os
import itertools
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

# Set testing environment
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['GCP_PROJECT_ID'] = 'campus-connect-test'

from campus_connect.core.connection_lifecycle import CallerIdentity, ConnectionLifecycleManager
from campus_connect.core.exceptions import ConnectionAlreadyExistsError, ConnectionNotFoundError
from campus_connect.schemas.enums import ConnectionStatusEnum, UserRoleEnum
from campus_connect.services.firestore_services.connection_service import make_pair_key

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryConnectionStore:
    """Same functions as connection_service, backed by dicts."""

    def __init__(self):
        self.connections: Dict[str, dict] = {}
        self.pairs: Dict[str, str] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def _now(self) -> datetime:
        return BASE_TIME + timedelta(seconds=next(self._clock))

    def get_connection(self, connection_id: str) -> Optional[dict]:
        connection = self.connections.get(connection_id)
        return dict(connection) if connection else None

    def find_between(self, user_a: str, user_b: str) -> Optional[dict]:
        connection_id = self.pairs.get(make_pair_key(user_a, user_b))
        return self.get_connection(connection_id) if connection_id else None

    def list_for_participant(self, user_id: str) -> List[dict]:
        return [
            dict(c) for c in self.connections.values()
            if user_id in (c['requester_id'], c['receiver_id'])
        ]

    def insert_connection(self, requester_id: str, receiver_id: str, message: Optional[str] = None) -> dict:
        pair_key = make_pair_key(requester_id, receiver_id)
        if pair_key in self.pairs:
            raise ConnectionAlreadyExistsError(self.pairs[pair_key])
        connection_id = f"conn-{next(self._ids)}"
        now = self._now()
        self.connections[connection_id] = {
            "connection_id": connection_id,
            "pair_key": pair_key,
            "requester_id": requester_id,
            "receiver_id": receiver_id,
            "status": ConnectionStatusEnum.PENDING.value,
            "message": message,
            "created_at": now,
            "updated_at": now,
        }
        self.pairs[pair_key] = connection_id
        return dict(self.connections[connection_id])

    def update_connection_status(self, connection_id, status, expected_status=ConnectionStatusEnum.PENDING) -> dict:
        connection = self.connections.get(connection_id)
        if not connection or connection['status'] != expected_status.value:
            raise ConnectionNotFoundError(connection_id)
        connection['status'] = status.value
        connection['updated_at'] = self._now()
        return dict(connection)

    def delete_connection(self, connection_id, expected_status=None) -> None:
        connection = self.connections.get(connection_id)
        if not connection:
            raise ConnectionNotFoundError(connection_id)
        if expected_status is not None and connection['status'] != expected_status.value:
            raise ConnectionNotFoundError(connection_id)
        del self.connections[connection_id]
        del self.pairs[connection['pair_key']]


class InMemoryUserDirectory:

    def __init__(self):
        self.users: Dict[str, dict] = {}

    def add(self, user_id: str, name: str = None, role: UserRoleEnum = UserRoleEnum.STUDENT,
            is_approved: bool = True) -> dict:
        user = {
            "user_id": user_id,
            "email": f"{user_id}@college.edu",
            "name": name or user_id.title(),
            "role": role.value,
            "is_approved": is_approved,
            "is_active": True,
            "created_at": BASE_TIME,
        }
        self.users[user_id] = user
        return user

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        return self.users.get(user_id)

    def get_users_by_ids(self, user_ids: List[str]) -> List[dict]:
        return [self.users[user_id] for user_id in user_ids if user_id in self.users]


@pytest.fixture
def store() -> InMemoryConnectionStore:
    return InMemoryConnectionStore()


@pytest.fixture
def users() -> InMemoryUserDirectory:
    directory = InMemoryUserDirectory()
    directory.add("alice", "Alice", UserRoleEnum.STUDENT)
    directory.add("bob", "Bob", UserRoleEnum.ALUMNI)
    directory.add("carol", "Carol", UserRoleEnum.ALUMNI)
    directory.add("dave", "Dave", UserRoleEnum.STUDENT, is_approved=False)
    directory.add("root", "Root", UserRoleEnum.ADMIN)
    return directory


@pytest.fixture
def manager(store, users) -> ConnectionLifecycleManager:
    return ConnectionLifecycleManager(store=store, users=users)


def caller(user_id: str) -> CallerIdentity:
    return CallerIdentity(user_id=user_id, is_authenticated=True)


@pytest.fixture
def make_caller():
    return caller


@pytest.fixture
def alice() -> CallerIdentity:
    return caller("alice")


@pytest.fixture
def bob() -> CallerIdentity:
    return caller("bob")


@pytest.fixture
def carol() -> CallerIdentity:
    return caller("carol")


@pytest.fixture
def anonymous() -> CallerIdentity:
    return CallerIdentity(user_id=None, is_authenticated=False)


@pytest.fixture
def pending_request(manager, alice):
    """A pending request from alice to bob; returns its id."""
    return manager.request_connection(alice, "bob", "hi").connection_id


@pytest.fixture
def accepted_connection(manager, alice, bob):
    """An accepted connection between alice and bob; returns its id."""
    connection_id = manager.request_connection(alice, "bob").connection_id
    manager.respond_to_connection(bob, connection_id, "accept")
    return connection_id


@pytest.fixture
def signed_in():
    """Holds the user the API sees as signed in; set 'user' to a user id or None."""
    return {"user": None}


@pytest.fixture
def client(manager, users, signed_in):
    """TestClient with auth and the connection manager swapped for in-memory versions."""
    from fastapi.testclient import TestClient

    from campus_connect.api.v1.deps import get_current_user
    from campus_connect.core.connection_lifecycle import get_connection_manager
    from campus_connect.main import app

    app.dependency_overrides[get_current_user] = lambda: users.get_user_by_id(signed_in["user"]) if signed_in["user"] else None
    app.dependency_overrides[get_connection_manager] = lambda: manager
    # Not entered as a context manager, so Firebase is never initialized
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
