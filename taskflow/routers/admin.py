"""Admin API endpoints. Every route requires a user whose current role is 'admin'."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.dependencies import CurrentUser, require_admin
from taskflow.exceptions import NotFound
from taskflow.schemas.admin import AdminStats, RoleUpdateRequest, UserDetail, UserListData
from taskflow.schemas.auth import UserProfile
from taskflow.schemas.common import ApiResponse, Pagination
from taskflow.services.admin import get_admin_service
from taskflow.services.auth import get_auth_service

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


@router.get("/stats", response_model=ApiResponse[AdminStats])
def dashboard_stats(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[AdminStats]:
    """User and task totals plus the most recent sign-ups."""
    return ApiResponse(data=AdminStats.model_validate(get_admin_service().get_stats(db), from_attributes=True))


@router.get("/users", response_model=ApiResponse[UserListData])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Literal["user", "admin"] | None = None,
    search: str | None = None,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[UserListData]:
    """List users, newest first."""
    users, total = get_admin_service().list_users(db, page=page, limit=limit, role=role, search=search)
    return ApiResponse(
        data=UserListData(
            users=[UserProfile.model_validate(u) for u in users],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/users/{user_id}", response_model=ApiResponse[UserDetail])
def get_user(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[UserDetail]:
    """Get one user with their task count."""
    detail = get_admin_service().get_user_detail(db, user_id)
    if detail is None:
        raise NotFound("User not found")
    return ApiResponse(data=UserDetail(**detail))


@router.put("/users/{user_id}/role", response_model=ApiResponse[UserProfile])
def update_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[UserProfile]:
    """Change a user's role. Takes effect on that user's next request."""
    user = get_auth_service().change_role(db, admin.user_id, user_id, body.role)
    return ApiResponse(message="User role updated successfully", data=UserProfile.model_validate(user))


@router.put("/users/{user_id}/deactivate", response_model=ApiResponse[None])
def deactivate_user(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    """Deactivate a user and revoke their refresh token."""
    get_auth_service().deactivate(db, admin.user_id, user_id)
    return ApiResponse(message="User deactivated successfully")


@router.put("/users/{user_id}/activate", response_model=ApiResponse[None])
def activate_user(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    """Reactivate a user."""
    get_auth_service().activate(db, admin.user_id, user_id)
    return ApiResponse(message="User activated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: int,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    """Delete a user and all of their tasks."""
    get_auth_service().delete_account(db, admin.user_id, user_id)
    return ApiResponse(message="User and associated tasks deleted successfully")
