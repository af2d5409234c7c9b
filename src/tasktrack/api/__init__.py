"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every project/task route rejects requests
without a valid Bearer token before the handler runs. Health and auth
routers are open.
"""

from fastapi import APIRouter, Depends

from tasktrack.api.auth import router as auth_router
from tasktrack.api.health import router as health_router
from tasktrack.api.projects import router as projects_router
from tasktrack.auth.dependencies import get_current_user

_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes: no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes: require a valid session token
api_router.include_router(projects_router, tags=["projects", "tasks"], dependencies=_auth)
