"""FastAPI auth dependencies for handlers.

Learn: The auth gate (auth/gate.py) already did the work by the time a
handler runs; these just read its result off request.state.
get_current_user is the "hard" form (401 if missing); the optional form
returns None on public routes.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request

from taskboard.auth.principal import CurrentIdentity


async def get_current_user_optional(request: Request) -> Optional[CurrentIdentity]:
    """The identity the gate bound to this request, if any."""
    return getattr(request.state, "identity", None)


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required, 401 if no auth)."""
    if not identity:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
