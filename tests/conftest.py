"""
tests/conftest.py -- Shared test fixtures for the forum test suite.

This module provides:
  - Clock: a settable clock injected into every service, so expiry can be
    tested without sleeping
  - make_services: factory that wires a fresh in-memory Database + services
    from Settings overrides
  - services: make_services() with default settings
  - register / signed_in / signed_in_admin: factory fixtures for members
  - basic_auth / bearer / member: header builders and an HTTP signup+signin
  - make_client / api_client: TestClient over the real app with a patched
    lifespan that parks the test services on app.state

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each Database gets a random name so tests never see each other's rows.
"""

from __future__ import annotations

import base64
import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# Keep the access log quiet unless a test run asks for more.
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import SignupCandidate, User
from core.config import Settings
from core.database import Database
from forum.container import ForumServices, build_services, create_admin

# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class Clock:
    """Callable returning a fixed UTC instant that tests move forward explicitly."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Database / services helpers
# ---------------------------------------------------------------------------


def _memory_url() -> str:
    return f"sqlite:///file:test_forum_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def make_services(clock: Clock) -> Generator[Callable[..., ForumServices], None, None]:
    """Yield a factory: make_services(**settings_overrides) -> ForumServices.

    Every call gets its own isolated database. All databases are disposed at
    teardown.
    """
    opened: list[Database] = []

    def _make(**overrides) -> ForumServices:
        settings = Settings(database_url=_memory_url(), **overrides)
        db = Database(settings.database_url)
        opened.append(db)
        return build_services(settings, db, clock=clock)

    yield _make

    for db in opened:
        db.close()


@pytest.fixture
def services(make_services: Callable[..., ForumServices]) -> ForumServices:
    return make_services()


# ---------------------------------------------------------------------------
# Member helpers -- exposed as factory fixtures
# ---------------------------------------------------------------------------


def _register(services: ForumServices, username: str, password: str = "s3cret!", email: str | None = None) -> User:
    return services.authenticator.signup(
        SignupCandidate(username=username, email=email or f"{username}@example.com", password=password)
    )


def _signed_in(services: ForumServices, username: str, password: str = "s3cret!") -> tuple[User, str]:
    user = _register(services, username, password)
    session = services.authenticator.signin(username, password)
    return user, session.token


def _signed_in_admin(services: ForumServices, username: str = "root", password: str = "adminpass") -> tuple[User, str]:
    user = create_admin(services, username, f"{username}@example.com", password)
    session = services.authenticator.signin(username, password)
    return user, session.token


@pytest.fixture
def register() -> Callable[..., User]:
    """Factory: register(services, username, password=..., email=None) -> User (nonadmin)."""
    return _register


@pytest.fixture
def signed_in() -> Callable[..., tuple[User, str]]:
    """Factory: signed_in(services, username, password=...) -> (user, token)."""
    return _signed_in


@pytest.fixture
def signed_in_admin() -> Callable[..., tuple[User, str]]:
    """Factory: signed_in_admin(services, username="root") -> (admin, token)."""
    return _signed_in_admin


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _patch_lifespan(settings: Settings, services: ForumServices):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-built test services into app.state so TestClient routes hit
    an isolated in-memory database rather than forum.db.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.db = services.db
        app.state.services = services
        yield

    return test_lifespan


def _basic_auth(username: str, password: str) -> dict[str, str]:
    raw = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {raw}"}


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def basic_auth() -> Callable[[str, str], dict[str, str]]:
    """Factory: basic_auth(username, password) -> Authorization header dict."""
    return _basic_auth


@pytest.fixture
def bearer() -> Callable[[str], dict[str, str]]:
    """Factory: bearer(token) -> Authorization header dict."""
    return _bearer


@pytest.fixture
def member() -> Callable[..., tuple[str, str]]:
    """Factory: member(client, username, password="pw1") -> (user uuid, token).

    Signs up and signs in over HTTP, so the token comes from the
    access-token response header exactly as a client would read it.
    """

    def _member(client: TestClient, username: str, password: str = "pw1") -> tuple[str, str]:
        resp = client.post(
            "/api/v1/user/signup",
            json={"user_name": username, "email_address": f"{username}@example.com", "password": password},
        )
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        user_id = resp.json()["id"]
        resp = client.post("/api/v1/user/signin", headers=_basic_auth(username, password))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        return user_id, resp.headers["access-token"]

    return _member


@pytest.fixture
def make_client(clock: Clock) -> Generator[Callable[..., tuple[TestClient, ForumServices]], None, None]:
    """Yield a factory: make_client(**settings_overrides) -> (client, services).

    Only one client may be open at a time because the lifespan is patched on
    the shared app object.
    """
    opened: list[tuple[TestClient, Database]] = []

    def _make(**overrides) -> tuple[TestClient, ForumServices]:
        settings = Settings(database_url=_memory_url(), **overrides)
        db = Database(settings.database_url)
        services = build_services(settings, db, clock=clock)
        app.router.lifespan_context = _patch_lifespan(settings, services)
        client = TestClient(app, raise_server_exceptions=True)
        client.__enter__()
        opened.append((client, db))
        return client, services

    yield _make

    for client, db in opened:
        client.__exit__(None, None, None)
        db.close()


@pytest.fixture
def api_client(make_client) -> tuple[TestClient, ForumServices]:
    """(client, services) over the real app with default settings."""
    return make_client()
