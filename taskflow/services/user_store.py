"""Credential store: persistence of user identity and credential state.

All writes to credential fields are single-row UPDATE statements committed
immediately, so concurrent writers for the same user resolve to last-write-wins
without a read-modify-write window in Python.
"""

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, undefer

from taskflow.database import LIKE_ESCAPE, contains_pattern, store_guard
from taskflow.exceptions import DuplicateEmail
from taskflow.models.task import Task
from taskflow.models.user import ROLE_ADMIN, ROLE_USER, User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """Reads and writes user records."""

    # --- reads ---

    def get_by_id(self, db: Session, user_id: int) -> User | None:
        """Get a user by id. Credential fields are not loaded."""
        with store_guard(db, "get_by_id"):
            return db.query(User).filter(User.id == user_id).first()

    def get_with_credentials(
        self, db: Session, *, user_id: int | None = None, email: str | None = None
    ) -> User | None:
        """Get a user with password_hash and refresh_token loaded."""
        query = db.query(User).options(undefer(User.password_hash), undefer(User.refresh_token))
        if user_id is not None:
            query = query.filter(User.id == user_id)
        elif email is not None:
            query = query.filter(User.email == normalize_email(email))
        else:
            raise ValueError("user_id or email is required")
        with store_guard(db, "get_with_credentials"):
            user = query.populate_existing().first()
        return user

    def email_taken(self, db: Session, email: str, exclude_id: int | None = None) -> bool:
        query = db.query(User.id).filter(User.email == normalize_email(email))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        with store_guard(db, "email_taken"):
            return query.first() is not None

    def list_users(
        self,
        db: Session,
        page: int = 1,
        limit: int = 10,
        role: str | None = None,
        search: str | None = None,
    ) -> tuple[list[User], int]:
        """Paginated users, newest first. Returns (users, total_count)."""
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(User.name.ilike(pattern, escape=LIKE_ESCAPE), User.email.ilike(pattern, escape=LIKE_ESCAPE))
            )
        with store_guard(db, "list_users"):
            total = query.count()
            users = (
                query.order_by(User.created_at.desc(), User.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        return users, total

    def counts(self, db: Session) -> dict[str, int]:
        """Totals used by the admin dashboard."""
        with store_guard(db, "counts"):
            total = db.query(func.count(User.id)).scalar() or 0
            active = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
            admins = db.query(func.count(User.id)).filter(User.role == ROLE_ADMIN).scalar() or 0
        return {"total": total, "active": active, "admins": admins}

    # --- writes ---

    def create(self, db: Session, name: str, email: str, password_hash: str) -> User:
        """Insert a new user with role 'user'. Raises DuplicateEmail on a unique-index conflict."""
        user = User(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=password_hash,
            role=ROLE_USER,
            is_active=True,
        )
        with store_guard(db, "create"):
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateEmail() from None
            db.refresh(user)
        return user

    def _update(self, db: Session, user_id: int, values: dict, action: str) -> bool:
        with store_guard(db, action):
            updated = db.query(User).filter(User.id == user_id).update(values, synchronize_session="fetch")
            db.commit()
        return updated == 1

    def replace_refresh_token(self, db: Session, user_id: int, token: str) -> bool:
        """Store ``token`` as the user's only refresh token.

        Overwrites whatever was stored before, which revokes the previous
        session's refresh token. Returns False if the user no longer exists.
        """
        return self._update(db, user_id, {User.refresh_token: token}, "replace_refresh_token")

    def clear_refresh_token(self, db: Session, user_id: int) -> bool:
        return self._update(db, user_id, {User.refresh_token: None}, "clear_refresh_token")

    def replace_password(self, db: Session, user_id: int, password_hash: str, refresh_token: str) -> bool:
        """Swap the password hash and the refresh token in one statement."""
        return self._update(
            db,
            user_id,
            {User.password_hash: password_hash, User.refresh_token: refresh_token},
            "replace_password",
        )

    def set_active(self, db: Session, user_id: int, active: bool) -> bool:
        """Toggle is_active. Deactivation also revokes the stored refresh token."""
        values: dict = {User.is_active: active}
        if not active:
            values[User.refresh_token] = None
        return self._update(db, user_id, values, "set_active")

    def set_role(self, db: Session, user_id: int, role: str) -> bool:
        return self._update(db, user_id, {User.role: role}, "set_role")

    def update_profile(self, db: Session, user_id: int, name: str | None = None, email: str | None = None) -> bool:
        values: dict = {}
        if name:
            values[User.name] = name.strip()
        if email:
            values[User.email] = normalize_email(email)
        if not values:
            return True
        try:
            return self._update(db, user_id, values, "update_profile")
        except IntegrityError:
            db.rollback()
            raise DuplicateEmail() from None

    def delete(self, db: Session, user_id: int) -> bool:
        """Delete a user and every task they own."""
        with store_guard(db, "delete"):
            db.query(Task).filter(Task.user_id == user_id).delete(synchronize_session=False)
            deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            db.commit()
        return deleted == 1


_user_store: UserStore | None = None


def get_user_store() -> UserStore:
    """Get singleton user store instance."""
    global _user_store
    if _user_store is None:
        _user_store = UserStore()
    return _user_store
