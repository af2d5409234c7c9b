"""Auth API: registration, login, current user.

- POST /auth/register → create a user, returns {user, token}
- POST /auth/login    → email/password, returns {user, token}
- GET  /auth/me       → the user behind the Bearer token

Register and login are open routes; /me needs a valid token.
There is no logout endpoint: tokens are stateless, the client drops it.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.db.engine import get_db
from tasktrack.errors import NotFoundError
from tasktrack.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from tasktrack.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth")


def _svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(user=UserRead.model_validate(result.user), token=result.token)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, svc: AuthService = Depends(_svc)):
    """Create a new user account and log it in."""
    result = await svc.register(email=body.email, password=body.password, name=body.name)
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_svc)):
    """Login with email and password."""
    result = await svc.login(email=body.email, password=body.password)
    return _auth_response(result)


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    user = await svc.get_user(identity.user_id)
    if user is None:
        # Valid token for a user that no longer exists
        raise NotFoundError("User not found")
    return user
