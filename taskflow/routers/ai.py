"""AI assistant API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.dependencies import CurrentUser, get_current_user
from taskflow.exceptions import AppError
from taskflow.rate_limit import limiter
from taskflow.schemas.ai import AnalysisData, AnalyzeRequest, ChatData, ChatRequest, ScheduleData
from taskflow.schemas.common import ApiResponse
from taskflow.services.ai import AIAssistant, get_ai_assistant

router = APIRouter(prefix="/api/v1/ai", tags=["AI Assistant"])


@router.post("/analyze", response_model=ApiResponse[AnalysisData])
@limiter.limit("20/minute")
def analyze(
    request: Request,
    body: AnalyzeRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AIAssistant = Depends(get_ai_assistant),
) -> ApiResponse[AnalysisData]:
    """Productivity advice based on the caller's tasks."""
    return ApiResponse(data=AnalysisData(**assistant.analyze(db, user.user_id, body.question)))


@router.post("/chat", response_model=ApiResponse[ChatData])
@limiter.limit("20/minute")
def chat(
    request: Request,
    body: ChatRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AIAssistant = Depends(get_ai_assistant),
) -> ApiResponse[ChatData]:
    """Chat with the assistant about the caller's tasks."""
    if not body.message or not body.message.strip():
        raise AppError("Message is required")
    history = [m.model_dump() for m in body.conversation_history]
    return ApiResponse(data=ChatData(**assistant.chat(db, user.user_id, body.message, history)))


@router.get("/schedule", response_model=ApiResponse[ScheduleData])
@limiter.limit("20/minute")
def schedule(
    request: Request,
    work_hours: int = Query(8, ge=1, le=16, alias="workHours"),
    start_time: str = Query("09:00", alias="startTime", pattern=r"^([01]\d|2[0-3]):[0-5]\d$"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AIAssistant = Depends(get_ai_assistant),
) -> ApiResponse[ScheduleData]:
    """Generate a daily schedule for the caller's open tasks."""
    return ApiResponse(data=ScheduleData(**assistant.schedule(db, user.user_id, work_hours, start_time)))
