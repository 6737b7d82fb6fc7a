"""Access gate: bearer-token authentication and role checks against live account state."""

import logging

from sqlalchemy.orm import Session

from taskflow.exceptions import Forbidden, TokenError, Unauthenticated
from taskflow.models.user import User
from taskflow.services.jwt import ACCESS, JWTService, get_jwt_service
from taskflow.services.user_store import UserStore, get_user_store

logger = logging.getLogger("taskflow")


class AccessGate:
    """Verifies access tokens and enforces roles.

    The user record is loaded on every call, so deactivation or a role change
    applies to the next request even when the access token is still unexpired.
    """

    def __init__(self, store: UserStore | None = None, jwt_service: JWTService | None = None) -> None:
        self.store = store or get_user_store()
        self.jwt = jwt_service or get_jwt_service()

    def authenticate(self, db: Session, token: str | None) -> User:
        """Return the active user behind an access token. Raises Unauthenticated."""
        if not token:
            raise Unauthenticated("Not authorized, no token")

        try:
            claims = self.jwt.verify(token, ACCESS)
        except TokenError as exc:
            logger.info("Access token rejected: %s", exc.__class__.__name__)
            raise Unauthenticated("Not authorized, token invalid or expired") from None

        user = self.store.get_by_id(db, self.jwt.user_id_from(claims))
        if user is None:
            logger.info("Access token rejected: user %s not found", claims["sub"])
            raise Unauthenticated("Not authorized, user not found")
        if not user.is_active:
            logger.info("Access token rejected: user %s is deactivated", user.id)
            raise Unauthenticated("Account is deactivated")
        return user

    def authorize(self, db: Session, user_id: int, *required_roles: str) -> User:
        """Return the user if their current role is one of ``required_roles``. Raises Forbidden."""
        user = self.store.get_by_id(db, user_id)
        if user is None or not user.is_active:
            raise Unauthenticated()
        if user.role not in required_roles:
            logger.warning("User %s with role '%s' denied, requires %s", user.id, user.role, required_roles)
            raise Forbidden(f"User role '{user.role}' is not authorized to access this route")
        return user


_access_gate: AccessGate | None = None


def get_access_gate() -> AccessGate:
    """Get singleton access gate instance."""
    global _access_gate
    if _access_gate is None:
        _access_gate = AccessGate()
    return _access_gate
