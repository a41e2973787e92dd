"""Auth API — registration, login, token refresh, current user.

Learn: Routes for the local token scheme:
- POST /auth/register → create a password account
- POST /auth/login → email/password → access + refresh tokens
- POST /auth/refresh → refresh token → new pair
- GET /auth/me → whoever the auth gate resolved (local or federated)

register/login/refresh are on the gate's public-path list. Federated
sign-in has no endpoint: the client presents the provider's ID token
as a bearer token and the gate provisions or links on first sight.
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.auth.errors import VerificationError
from taskboard.auth.jwt import REFRESH, create_token_pair, decode_token
from taskboard.auth.password import hash_password, verify_password
from taskboard.auth.principal import CurrentIdentity
from taskboard.db.engine import get_db
from taskboard.schemas.auth import (
    LoginRequest,
    MeRead,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserRead,
)
from taskboard.services.user_store import UserStore

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


def new_local_user_id() -> str:
    return f"user_{uuid.uuid4().hex}"


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new password account."""
    store = UserStore(db)
    if await store.find_by_email(body.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    try:
        user = await store.create(
            user_id=new_local_user_id(),
            email=body.email,
            name=body.name,
            password_hash=hash_password(body.password),
        )
    except IntegrityError:
        # Same email inserted since the check above (another registration
        # or a first federated sign-in).
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    logger.info("auth.registered", user_id=user.id)
    return user


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login with email and password → JWT tokens.

    Federation-only accounts (empty password hash) can't log in here.
    """
    user = await UserStore(db).find_by_email(body.email)

    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return TokenResponse(**create_token_pair(user.email))


# ─── Refresh ────────────────────────────────────────────


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new access + refresh pair."""
    try:
        payload = decode_token(body.refresh_token)
    except VerificationError as e:
        raise HTTPException(status_code=401, detail=str(e))

    if payload["type"] != REFRESH:
        raise HTTPException(status_code=401, detail="Not a refresh token")

    if not await UserStore(db).find_by_email(payload["sub"]):
        raise HTTPException(status_code=401, detail="User not found")

    return TokenResponse(**create_token_pair(payload["sub"]))


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=MeRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's info."""
    user = await UserStore(db).find_by_id(identity.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return MeRead(
        id=user.id,
        email=user.email,
        name=user.name,
        scheme=identity.scheme.value,
        has_password=bool(user.password_hash),
    )
