"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: The auth gate is applied once, at the /api/v1 router level, using
FastAPI's dependencies parameter. It runs before every handler below and
decides per request: public path → pass through, otherwise authenticate
or 401. Which paths are public is configuration (settings.public_paths),
not which router a route happens to live in.
"""

from fastapi import APIRouter, Depends

from taskboard.api.auth import router as auth_router
from taskboard.api.boards import router as boards_router
from taskboard.api.cards import router as cards_router
from taskboard.api.health import router as health_router
from taskboard.auth.gate import enforce_auth_gate

api_router = APIRouter(prefix="/api/v1", dependencies=[Depends(enforce_auth_gate)])

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(boards_router, tags=["boards"])
api_router.include_router(cards_router, tags=["cards"])
