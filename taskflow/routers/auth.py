"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.dependencies import CurrentUser, get_current_user
from taskflow.exceptions import AppError, NotFound
from taskflow.rate_limit import limiter
from taskflow.schemas.auth import (
    AuthData,
    LoginRequest,
    RefreshData,
    RefreshTokenRequest,
    RegisterRequest,
    TokenPair,
    UpdatePasswordRequest,
    UpdateProfileRequest,
    UserProfile,
)
from taskflow.schemas.common import ApiResponse
from taskflow.services.auth import AuthResult, get_auth_service
from taskflow.services.user_store import get_user_store

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _auth_data(result: AuthResult) -> AuthData:
    return AuthData(
        user=UserProfile.model_validate(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,  # type: ignore[arg-type]
    )


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> ApiResponse[AuthData]:
    """Register a new user account. A requested role is ignored."""
    result = get_auth_service().register(db, body.name, body.email, body.password)
    return ApiResponse(message="User registered successfully", data=_auth_data(result))


@router.post("/login", response_model=ApiResponse[AuthData])
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> ApiResponse[AuthData]:
    """Authenticate and receive an access/refresh token pair."""
    result = get_auth_service().login(db, body.email, body.password)
    return ApiResponse(message="Login successful", data=_auth_data(result))


@router.post("/refresh-token", response_model=ApiResponse[RefreshData])
@limiter.limit("30/minute")
def refresh_token(
    request: Request, body: RefreshTokenRequest, db: Session = Depends(get_db)
) -> ApiResponse[RefreshData]:
    """Exchange a refresh token for a new access token."""
    if not body.refresh_token:
        raise AppError("Refresh token is required")
    result = get_auth_service().refresh(db, body.refresh_token)
    return ApiResponse(data=RefreshData(access_token=result.access_token, refresh_token=result.refresh_token))


@router.post("/logout", response_model=ApiResponse[None])
def logout(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> ApiResponse[None]:
    """Revoke the caller's refresh token."""
    get_auth_service().logout(db, user.user_id)
    return ApiResponse(message="Logged out successfully")


@router.get("/me", response_model=ApiResponse[UserProfile])
def me(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> ApiResponse[UserProfile]:
    """Return the caller's profile."""
    record = get_user_store().get_by_id(db, user.user_id)
    if record is None:
        raise NotFound("User not found")
    return ApiResponse(data=UserProfile.model_validate(record))


@router.put("/update-profile", response_model=ApiResponse[UserProfile])
def update_profile(
    body: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[UserProfile]:
    """Change the caller's name and/or email."""
    record = get_auth_service().update_profile(db, user.user_id, name=body.name, email=body.email)
    return ApiResponse(message="Profile updated successfully", data=UserProfile.model_validate(record))


@router.put("/update-password", response_model=ApiResponse[TokenPair])
def update_password(
    body: UpdatePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TokenPair]:
    """Change the caller's password. Returns a fresh token pair; earlier refresh tokens stop working."""
    result = get_auth_service().update_password(db, user.user_id, body.current_password, body.new_password)
    return ApiResponse(
        message="Password updated successfully",
        data=TokenPair(access_token=result.access_token, refresh_token=result.refresh_token),  # type: ignore[arg-type]
    )
