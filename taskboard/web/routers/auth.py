"""
Auth Router - registration, login, logout and current user
"""
from fastapi import APIRouter, Depends, Request, status

from ...db.schema import UserRecord
from ...services import AuthService
from ..dependencies import get_auth_service, get_current_user
from ..limiter import limiter, rate_limits
from ..schemas import AuthResponse, LoginRequest, MessageResponse, RegisterRequest

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(rate_limits.auth)
async def register(
    request: Request,
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Create an account and return it with a bearer token"""
    result = await auth.register(payload.name, payload.email, payload.password)
    return AuthResponse(user=result.user, token=result.token)


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(rate_limits.auth)
async def login(
    request: Request,
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange credentials for a new bearer token (401 on bad credentials)"""
    result = await auth.login(payload.email, payload.password)
    return AuthResponse(user=result.user, token=result.token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: int = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke all of the caller's tokens"""
    await auth.logout(current_user)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserRecord)
async def me(
    current_user: int = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Get the authenticated user's profile"""
    return await auth.current_user(current_user)
