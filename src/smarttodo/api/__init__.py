"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in the tasks router
without relying on each handler to remember. Handlers that need the
identity also declare Depends(get_current_user); FastAPI caches the
dependency per request, so the gate still runs exactly once.
"""

from fastapi import APIRouter, Depends

from smarttodo.api.auth import router as auth_router
from smarttodo.api.tasks import router as tasks_router
from smarttodo.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required (auth/me declares its own dependency)
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
