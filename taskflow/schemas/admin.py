"""Pydantic schemas for admin endpoints."""

from typing import Literal

from taskflow.schemas.auth import UserProfile
from taskflow.schemas.common import CamelModel, Pagination


class RoleUpdateRequest(CamelModel):
    role: Literal["user", "admin"]


class UserDetail(UserProfile):
    task_count: int


class UserListData(CamelModel):
    users: list[UserProfile]
    pagination: Pagination


class UserCounts(CamelModel):
    total: int
    active: int
    admins: int


class TaskCounts(CamelModel):
    total: int
    by_status: dict[str, int]


class AdminStats(CamelModel):
    users: UserCounts
    tasks: TaskCounts
    recent_users: list[UserProfile]
