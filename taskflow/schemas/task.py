"""Pydantic schemas for task endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from taskflow.schemas.common import CamelModel, Pagination

TaskStatus = Literal["pending", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)


class TaskUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    tags: list[str] | None = None


class TaskResponse(CamelModel):
    id: int
    title: str
    description: str | None
    status: str
    priority: str
    due_date: datetime | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class TaskListData(CamelModel):
    tasks: list[TaskResponse]
    pagination: Pagination


class TaskStats(CamelModel):
    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
