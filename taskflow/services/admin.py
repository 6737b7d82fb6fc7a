"""Admin read models: user listing, user detail and dashboard statistics."""

from sqlalchemy.orm import Session

from taskflow.models.user import User
from taskflow.services.task import TaskService, get_task_service
from taskflow.services.user_store import UserStore, get_user_store

RECENT_USERS_LIMIT = 5


class AdminService:
    """Aggregates user and task data for administrators."""

    def __init__(self, store: UserStore | None = None, tasks: TaskService | None = None) -> None:
        self.store = store or get_user_store()
        self.tasks = tasks or get_task_service()

    def list_users(
        self, db: Session, page: int = 1, limit: int = 10, role: str | None = None, search: str | None = None
    ) -> tuple[list[User], int]:
        return self.store.list_users(db, page=page, limit=limit, role=role, search=search)

    def get_user_detail(self, db: Session, user_id: int) -> dict | None:
        """Get a user's public fields plus their task count."""
        user = self.store.get_by_id(db, user_id)
        if user is None:
            return None
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "is_active": user.is_active,
            "created_at": user.created_at,
            "task_count": self.tasks.count_for_user(db, user.id),
        }

    def get_stats(self, db: Session) -> dict:
        total_tasks, tasks_by_status = self.tasks.count_by_status(db)
        recent_users, _ = self.store.list_users(db, page=1, limit=RECENT_USERS_LIMIT)
        return {
            "users": self.store.counts(db),
            "tasks": {"total": total_tasks, "by_status": tasks_by_status},
            "recent_users": recent_users,
        }


_admin_service: AdminService | None = None


def get_admin_service() -> AdminService:
    """Get singleton admin service instance."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service
