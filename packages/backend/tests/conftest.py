"""Test fixtures — a throwaway SQLite database per test, real auth pipeline.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server:

1. Settings are read once at import, so the env vars below are set before
   anything from taskboard is imported.
2. Each test gets its own SQLite file under tmp_path, with foreign keys
   switched on (SQLite leaves them off by default). Tests that exercise
   account linking depend on the deferred user FKs actually being checked.
3. Sessions really commit. Linking and provisioning own their
   transactions, so a savepoint-and-rollback wrapper would hide exactly
   the behaviour under test.
4. The federated provider is a local RSA keypair. Its key resolver
   replaces the JWKS fetch, so nothing leaves the process.
"""

import os

os.environ.setdefault("TASKBOARD_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["TASKBOARD_JWT_SECRET"] = "test-secret-0123456789-abcdefghijklmnopqrstuvwxyz"
os.environ["TASKBOARD_FEDERATED_PROJECT_ID"] = "taskboard-test"

import uuid  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.auth.federated import FederatedTokenVerifier  # noqa: E402
from taskboard.auth.jwt import create_access_token  # noqa: E402
from taskboard.auth.verifier import (  # noqa: E402
    CredentialVerifier,
    LocalTokenVerifier,
    get_credential_verifier,
)
from taskboard.config import settings  # noqa: E402
from taskboard.db.engine import get_db  # noqa: E402
from taskboard.db.models import Base  # noqa: E402
from taskboard.main import app  # noqa: E402

PROJECT_ID = settings.federated_project_id
ISSUER = settings.federated_issuer


def _enable_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture()
async def engine(tmp_path):
    """Fresh schema in a per-test SQLite file."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}")
    event.listen(eng.sync_engine, "connect", _enable_foreign_keys)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ─── Federated identity provider ─────────────────────────


class FakeIdentityProvider:
    """Mints RS256 ID tokens the way the real provider shapes them.

    key_resolver stands in for the JWKS lookup: it hands back the public
    key for our kid and fails like PyJWKClient does for any other kid.
    """

    def __init__(self, private_key, project_id: str, issuer: str, kid: str = "test-key-1"):
        self.private_key = private_key
        self.public_key = private_key.public_key()
        self.project_id = project_id
        self.issuer = issuer
        self.kid = kid
        self.key_lookups = 0

    def issue(
        self,
        uid: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        expires_in: int = 3600,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        kid: Optional[str] = None,
        signing_key=None,
    ) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "iss": issuer or self.issuer,
            "aud": audience or self.project_id,
            "sub": uid,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
            "auth_time": int(now.timestamp()),
        }
        if email is not None:
            claims["email"] = email
        if name is not None:
            claims["name"] = name
        return jwt.encode(
            claims,
            signing_key or self.private_key,
            algorithm="RS256",
            headers={"kid": kid or self.kid},
        )

    def key_resolver(self, token: str):
        self.key_lookups += 1
        if jwt.get_unverified_header(token).get("kid") != self.kid:
            raise jwt.PyJWKClientError("Unable to find a signing key that matches")
        return self.public_key


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture()
def idp(rsa_private_key):
    return FakeIdentityProvider(rsa_private_key, PROJECT_ID, ISSUER)


@pytest.fixture()
def verifier(idp):
    """The production verifier wiring, with the provider's key swapped in."""
    return CredentialVerifier(
        local=LocalTokenVerifier(settings.jwt_secret, settings.jwt_algorithm),
        federated=FederatedTokenVerifier(
            project_id=PROJECT_ID,
            issuer=ISSUER,
            key_resolver=idp.key_resolver,
            timeout_seconds=2.0,
        ),
    )


# ─── HTTP clients ────────────────────────────────────────


@pytest_asyncio.fixture()
async def client(session_factory, verifier):
    """HTTP client running the real auth gate against the test database.

    Learn: Only the database and the verifier's trust anchors are
    overridden. Every request goes through the gate, so tests have to
    present a real token (see auth_headers / register_user below).
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_verifier] = lambda: verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


async def register_user(
    client: AsyncClient,
    email: Optional[str] = None,
    name: str = "Test User",
    password: str = "secure_password_123",
) -> tuple[dict, dict[str, str]]:
    """Register through the API and return (user, headers with an access token)."""
    email = email or unique_email()
    r = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "name": name, "password": password},
    )
    assert r.status_code == 201, r.text
    return r.json(), auth_headers(create_access_token(email))
