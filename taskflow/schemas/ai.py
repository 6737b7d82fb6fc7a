"""Pydantic schemas for AI assistant endpoints."""

from typing import Literal

from pydantic import Field

from taskflow.schemas.common import CamelModel


class AnalyzeRequest(CamelModel):
    question: str | None = Field(default=None, max_length=1000)


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=4000)


class ChatRequest(CamelModel):
    # Checked in the route, which answers "Message is required".
    message: str | None = Field(default=None, max_length=2000)
    conversation_history: list[ChatMessage] = Field(default_factory=list)


class AssistantTaskStats(CamelModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    high_priority: int
    medium_priority: int
    low_priority: int


class AnalysisData(CamelModel):
    response: str
    task_stats: AssistantTaskStats
    model: str


class ChatData(CamelModel):
    response: str


class ScheduleData(CamelModel):
    response: str
    total_tasks: int
    work_hours: int
