"""JWT Token Service: access and refresh token issuance and verification."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from taskflow.config import Settings, get_settings
from taskflow.exceptions import ExpiredToken, InvalidSignature, MalformedToken, WrongTokenKind

ACCESS = "access"
REFRESH = "refresh"
TOKEN_KINDS = (ACCESS, REFRESH)


class JWTService:
    """Mints and verifies signed tokens.

    Every token carries ``sub`` (user id), ``iat``, ``exp``, ``type`` and a random
    ``jti``. Each kind is signed with its own secret, and ``verify`` also checks the
    ``type`` claim so one kind can never stand in for the other.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.algorithm = settings.JWT_ALGORITHM
        self._secrets = {
            ACCESS: settings.JWT_ACCESS_SECRET,
            REFRESH: settings.JWT_REFRESH_SECRET,
        }
        self._lifetimes = {
            ACCESS: timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            REFRESH: timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        }

    def issue_access_token(self, user: Any) -> str:
        """Create a short-lived access token for the given user."""
        return self._issue(user.id, ACCESS)

    def issue_refresh_token(self, user: Any) -> str:
        """Create a long-lived refresh token for the given user."""
        return self._issue(user.id, REFRESH)

    def issue_pair(self, user: Any) -> tuple[str, str]:
        """Return (access_token, refresh_token)."""
        return self.issue_access_token(user), self.issue_refresh_token(user)

    def _issue(self, user_id: int, kind: str) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "type": kind,
            "iat": now,
            "exp": now + self._lifetimes[kind],
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)

    def verify(self, token: str, expected_kind: str) -> dict[str, Any]:
        """Verify a token of the expected kind and return its claims.

        Raises MalformedToken, WrongTokenKind, InvalidSignature or ExpiredToken.
        """
        if expected_kind not in TOKEN_KINDS:
            raise ValueError(f"Unknown token kind '{expected_kind}'")

        try:
            unverified = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken(str(exc)) from None

        kind = unverified.get("type")
        if kind != expected_kind:
            raise WrongTokenKind(f"expected {expected_kind} token, got {kind!r}")

        try:
            claims = jwt.decode(token, self._secrets[expected_kind], algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredToken("token has expired") from None
        except JWTClaimsError as exc:
            raise MalformedToken(str(exc)) from None
        except JWTError as exc:
            raise InvalidSignature(str(exc)) from None

        try:
            int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise MalformedToken("missing or invalid subject") from None
        return claims

    def user_id_from(self, claims: dict[str, Any]) -> int:
        return int(claims["sub"])


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
