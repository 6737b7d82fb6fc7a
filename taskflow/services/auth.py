"""Authentication service: registration, login, token refresh, logout and account state.

A user holds at most one refresh token. Every operation that issues a refresh
token stores it over the previous one, so a new login revokes the refresh
token of any earlier session.
"""

import hmac
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from taskflow.config import get_settings
from taskflow.exceptions import (
    AccountDeactivated,
    AppError,
    DuplicateEmail,
    InvalidCredentials,
    InvalidRefreshToken,
    NotFound,
    SelfActionForbidden,
    StoreUnavailable,
    TokenError,
)
from taskflow.models.user import ROLES, User
from taskflow.services.jwt import REFRESH, JWTService, get_jwt_service
from taskflow.services.passwords import hash_password, verify_against_dummy, verify_password
from taskflow.services.user_store import UserStore, get_user_store

logger = logging.getLogger("taskflow")


@dataclass
class AuthResult:
    """Tokens issued by a successful authentication step."""

    user: User
    access_token: str
    refresh_token: str | None = None


class AuthService:
    """Handles the credential and session lifecycle of users."""

    def __init__(
        self,
        store: UserStore | None = None,
        jwt_service: JWTService | None = None,
        rotate_refresh_tokens: bool | None = None,
    ) -> None:
        self.store = store or get_user_store()
        self.jwt = jwt_service or get_jwt_service()
        if rotate_refresh_tokens is None:
            rotate_refresh_tokens = get_settings().REFRESH_TOKEN_ROTATION
        self.rotate_refresh_tokens = rotate_refresh_tokens

    def _start_session(self, db: Session, user: User) -> AuthResult:
        """Issue a token pair and store the refresh token over any previous one."""
        access_token, refresh_token = self.jwt.issue_pair(user)
        if not self.store.replace_refresh_token(db, user.id, refresh_token):
            logger.warning("User %s vanished while starting a session", user.id)
            raise StoreUnavailable()
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)

    def register(self, db: Session, name: str, email: str, password: str) -> AuthResult:
        """Register a new user with role 'user' and start their first session."""
        if self.store.email_taken(db, email):
            raise DuplicateEmail()

        user = self.store.create(db, name=name, email=email, password_hash=hash_password(password))
        logger.info("Registered user %s", user.id)
        return self._start_session(db, user)

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate by email and password and start a new session."""
        user = self.store.get_with_credentials(db, email=email)
        if user is None:
            verify_against_dummy(password)
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.info("Login failed for user %s: wrong password", user.id)
            raise InvalidCredentials()

        if not user.is_active:
            logger.info("Login refused for deactivated user %s", user.id)
            raise AccountDeactivated()

        result = self._start_session(db, user)
        logger.info("User %s logged in", user.id)
        return result

    def refresh(self, db: Session, refresh_token: str) -> AuthResult:
        """Exchange the stored refresh token for a new access token.

        The refresh token must be exactly the one currently stored for the user.
        With rotation enabled a new refresh token replaces it as well.
        """
        try:
            claims = self.jwt.verify(refresh_token, REFRESH)
        except TokenError as exc:
            logger.info("Refresh rejected: %s", exc.__class__.__name__)
            raise InvalidRefreshToken() from None

        user_id = self.jwt.user_id_from(claims)
        user = self.store.get_with_credentials(db, user_id=user_id)
        if user is None:
            logger.info("Refresh rejected: user %s not found", user_id)
            raise InvalidRefreshToken()

        stored = user.refresh_token
        if not stored or not hmac.compare_digest(stored.encode("utf-8"), refresh_token.encode("utf-8")):
            logger.warning("Refresh rejected for user %s: token does not match the stored one", user_id)
            raise InvalidRefreshToken()

        if not user.is_active:
            logger.info("Refresh rejected: user %s is deactivated", user_id)
            raise InvalidRefreshToken()

        if self.rotate_refresh_tokens:
            return self._start_session(db, user)
        return AuthResult(user=user, access_token=self.jwt.issue_access_token(user))

    def logout(self, db: Session, user_id: int) -> None:
        """Revoke the user's refresh token. Safe to call repeatedly."""
        self.store.clear_refresh_token(db, user_id)
        logger.info("User %s logged out", user_id)

    def update_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> AuthResult:
        """Change the password and rotate the refresh token.

        A wrong current password leaves both the hash and the refresh token untouched.
        """
        user = self.store.get_with_credentials(db, user_id=user_id)
        if user is None:
            raise NotFound("User not found")

        if not verify_password(current_password, user.password_hash):
            logger.info("Password change refused for user %s: wrong current password", user_id)
            raise InvalidCredentials("Current password is incorrect", status_code=400)

        access_token, refresh_token = self.jwt.issue_pair(user)
        if not self.store.replace_password(db, user_id, hash_password(new_password), refresh_token):
            raise StoreUnavailable()
        logger.info("User %s changed password", user_id)
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)

    def update_profile(self, db: Session, user_id: int, name: str | None = None, email: str | None = None) -> User:
        """Change name and/or email. A taken email raises DuplicateEmail."""
        if email and self.store.email_taken(db, email, exclude_id=user_id):
            raise DuplicateEmail()
        if not self.store.update_profile(db, user_id, name=name, email=email):
            raise NotFound("User not found")
        return self.store.get_by_id(db, user_id)  # type: ignore[return-value]

    # --- admin-invoked account state changes ---

    def deactivate(self, db: Session, actor_id: int, user_id: int) -> None:
        """Deactivate an account and revoke its refresh token."""
        if actor_id == user_id:
            raise SelfActionForbidden("Cannot deactivate your own account")
        if not self.store.set_active(db, user_id, False):
            raise NotFound("User not found")
        logger.info("Admin %s deactivated user %s", actor_id, user_id)

    def activate(self, db: Session, actor_id: int, user_id: int) -> None:
        if not self.store.set_active(db, user_id, True):
            raise NotFound("User not found")
        logger.info("Admin %s activated user %s", actor_id, user_id)

    def change_role(self, db: Session, actor_id: int, user_id: int, role: str) -> User:
        if role not in ROLES:
            raise AppError("Invalid role")
        if not self.store.set_role(db, user_id, role):
            raise NotFound("User not found")
        logger.info("Admin %s set role of user %s to %s", actor_id, user_id, role)
        return self.store.get_by_id(db, user_id)  # type: ignore[return-value]

    def delete_account(self, db: Session, actor_id: int, user_id: int) -> None:
        """Delete an account together with its tasks."""
        if actor_id == user_id:
            raise SelfActionForbidden("Cannot delete your own account")
        if not self.store.delete(db, user_id):
            raise NotFound("User not found")
        logger.info("Admin %s deleted user %s", actor_id, user_id)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
