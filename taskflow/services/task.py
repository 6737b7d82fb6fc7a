"""Task service: CRUD and per-user statistics, always scoped to the owner."""

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from taskflow.database import LIKE_ESCAPE, contains_pattern, store_guard
from taskflow.models.task import TASK_PRIORITIES, TASK_STATUSES, Task

SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "title": Task.title,
    "priority": Task.priority,
    "status": Task.status,
}

# high first
PRIORITY_RANK = case({"high": 0, "medium": 1, "low": 2}, value=Task.priority, else_=3)


class TaskService:
    """Handles task creation, listing, update and deletion."""

    def list_tasks(
        self,
        db: Session,
        user_id: int,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        priority: str | None = None,
        search: str | None = None,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> tuple[list[Task], int]:
        """Get a page of the user's tasks. Returns (tasks, total_count)."""
        query = db.query(Task).filter(Task.user_id == user_id)
        if status:
            query = query.filter(Task.status == status)
        if priority:
            query = query.filter(Task.priority == priority)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Task.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        column = SORTABLE_FIELDS.get(sort_by, Task.created_at)
        ordering = column.asc() if order == "asc" else column.desc()

        with store_guard(db, "list_tasks"):
            total = query.count()
            tasks = query.order_by(ordering, Task.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return tasks, total

    def get_task(self, db: Session, task_id: int, user_id: int) -> Task | None:
        """Get a single task by ID, scoped to user."""
        with store_guard(db, "get_task"):
            return db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()

    def open_tasks(self, db: Session, user_id: int) -> list[Task]:
        """The user's unfinished tasks, highest priority and earliest due date first."""
        with store_guard(db, "open_tasks"):
            return (
                db.query(Task)
                .filter(Task.user_id == user_id, Task.status != "completed")
                .order_by(PRIORITY_RANK, Task.due_date.is_(None), Task.due_date.asc(), Task.id.asc())
                .all()
            )

    def create_task(self, db: Session, user_id: int, **fields) -> Task:
        task = Task(user_id=user_id, **fields)
        with store_guard(db, "create_task"):
            db.add(task)
            db.commit()
            db.refresh(task)
        return task

    def update_task(self, db: Session, task: Task, **fields) -> Task:
        for name, value in fields.items():
            setattr(task, name, value)
        with store_guard(db, "update_task"):
            db.commit()
            db.refresh(task)
        return task

    def delete_task(self, db: Session, task: Task) -> None:
        with store_guard(db, "delete_task"):
            db.delete(task)
            db.commit()

    def get_stats(self, db: Session, user_id: int) -> dict:
        """Task counts by status and priority, with every bucket present."""
        by_status = dict.fromkeys(TASK_STATUSES, 0)
        by_priority = dict.fromkeys(TASK_PRIORITIES, 0)
        with store_guard(db, "get_stats"):
            rows = db.query(Task.status, func.count(Task.id)).filter(Task.user_id == user_id).group_by(Task.status)
            for status, count in rows:
                by_status[status] = count

            rows = db.query(Task.priority, func.count(Task.id)).filter(Task.user_id == user_id).group_by(Task.priority)
            for priority, count in rows:
                by_priority[priority] = count

        return {"total": sum(by_status.values()), "by_status": by_status, "by_priority": by_priority}

    def count_for_user(self, db: Session, user_id: int) -> int:
        with store_guard(db, "count_for_user"):
            return db.query(func.count(Task.id)).filter(Task.user_id == user_id).scalar() or 0

    def count_by_status(self, db: Session) -> tuple[int, dict[str, int]]:
        """Totals across all users. Returns (total, by_status)."""
        with store_guard(db, "count_by_status"):
            rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
        by_status = {status: count for status, count in rows}
        return sum(by_status.values()), by_status


_task_service: TaskService | None = None


def get_task_service() -> TaskService:
    """Get singleton task service instance."""
    global _task_service
    if _task_service is None:
        _task_service = TaskService()
    return _task_service
