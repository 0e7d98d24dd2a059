"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every task route passes the authentication
gate even if a handler forgets to ask for the identity. Health and auth
routers are open (auth's /me declares the gate itself).
"""

from fastapi import APIRouter, Depends

from smarttodo.api.auth import router as auth_router
from smarttodo.api.health import router as health_router
from smarttodo.api.tasks import router as tasks_router
from smarttodo.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer credential
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
