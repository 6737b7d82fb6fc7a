"""Task API endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.dependencies import CurrentUser, get_current_user
from taskflow.exceptions import NotFound
from taskflow.schemas.common import ApiResponse, Pagination
from taskflow.schemas.task import (
    TaskCreate,
    TaskListData,
    TaskPriority,
    TaskResponse,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)
from taskflow.services.task import get_task_service

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])

NULLABLE_FIELDS = {"description", "due_date"}


@router.get("", response_model=ApiResponse[TaskListData])
def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: TaskStatus | None = Query(None, alias="status"),
    priority: TaskPriority | None = None,
    search: str | None = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TaskListData]:
    """List the caller's tasks with filtering, search, sorting and pagination."""
    tasks, total = get_task_service().list_tasks(
        db,
        user.user_id,
        page=page,
        limit=limit,
        status=status_filter,
        priority=priority,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return ApiResponse(
        data=TaskListData(
            tasks=[TaskResponse.model_validate(t) for t in tasks],
            pagination=Pagination.build(page, limit, total),
        )
    )


@router.get("/stats", response_model=ApiResponse[TaskStats])
def task_stats(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TaskStats]:
    """Counts of the caller's tasks by status and priority."""
    return ApiResponse(data=TaskStats(**get_task_service().get_stats(db, user.user_id)))


@router.post("", response_model=ApiResponse[TaskResponse], status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TaskResponse]:
    """Create a task owned by the caller."""
    task = get_task_service().create_task(db, user.user_id, **body.model_dump())
    return ApiResponse(message="Task created successfully", data=TaskResponse.model_validate(task))


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse])
def get_task(
    task_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TaskResponse]:
    """Get a single task."""
    task = get_task_service().get_task(db, task_id, user.user_id)
    if not task:
        raise NotFound("Task not found")
    return ApiResponse(data=TaskResponse.model_validate(task))


@router.put("/{task_id}", response_model=ApiResponse[TaskResponse])
def update_task(
    task_id: int,
    body: TaskUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[TaskResponse]:
    """Update the fields present in the body."""
    service = get_task_service()
    task = service.get_task(db, task_id, user.user_id)
    if not task:
        raise NotFound("Task not found")
    changes = {
        name: value
        for name, value in body.model_dump(exclude_unset=True).items()
        if value is not None or name in NULLABLE_FIELDS
    }
    task = service.update_task(db, task, **changes)
    return ApiResponse(message="Task updated successfully", data=TaskResponse.model_validate(task))


@router.delete("/{task_id}", response_model=ApiResponse[None])
def delete_task(
    task_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    """Delete a task."""
    service = get_task_service()
    task = service.get_task(db, task_id, user.user_id)
    if not task:
        raise NotFound("Task not found")
    service.delete_task(db, task)
    return ApiResponse(message="Task deleted successfully")
