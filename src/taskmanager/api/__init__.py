"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects every task route without
repeating it per handler. Health and auth routers are open.
"""

from fastapi import APIRouter, Depends

from taskmanager.api.auth import router as auth_router
from taskmanager.api.health import router as health_router
from taskmanager.api.tasks import router as tasks_router
from taskmanager.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
