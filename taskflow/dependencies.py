"""Authentication dependencies for FastAPI routes."""

from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import ROLE_ADMIN
from taskflow.services.access import get_access_gate

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """Authenticated user context, loaded from the store on every request."""

    user_id: int
    name: str
    email: str
    role: str


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Validate the Bearer access token and the account behind it. Raises Unauthenticated."""
    token = credentials.credentials if credentials else None
    user = get_access_gate().authenticate(db, token)
    return CurrentUser(user_id=user.id, name=user.name, email=user.email, role=user.role)


def require_role(*roles: str) -> Callable[..., CurrentUser]:
    """Build a dependency that admits only users whose current role is in ``roles``."""

    def dependency(
        user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> CurrentUser:
        live = get_access_gate().authorize(db, user.user_id, *roles)
        return CurrentUser(user_id=live.id, name=live.name, email=live.email, role=live.role)

    return dependency


require_admin = require_role(ROLE_ADMIN)
