"""AI assistant: task-aware advice, chat and daily schedules from a chat-completions model.

The provider is any OpenAI-compatible endpoint; Groq is the default. Prompts
are kept short, the assistant's own work is collecting the user's task context
and shaping requests and responses.
"""

import json
import logging

from openai import OpenAI, OpenAIError
from sqlalchemy.orm import Session

from taskflow.config import get_settings
from taskflow.exceptions import AssistantNotConfigured, AssistantUnavailable
from taskflow.models.task import Task
from taskflow.services.task import TaskService, get_task_service

logger = logging.getLogger("taskflow")

HISTORY_LIMIT = 10
FALLBACK_REPLY = "Sorry, I could not generate a response."
NO_OPEN_TASKS_REPLY = "You have no pending tasks. Enjoy your free time or plan ahead for upcoming projects!"
DEFAULT_QUESTION = "Analyze my tasks. What should I focus on today and how should I plan my schedule?"


def task_counts(stats: dict) -> dict[str, int]:
    """Flatten TaskService.get_stats output into the counts the assistant reports."""
    by_status, by_priority = stats["by_status"], stats["by_priority"]
    return {
        "total": stats["total"],
        "pending": by_status["pending"],
        "in_progress": by_status["in-progress"],
        "completed": by_status["completed"],
        "high_priority": by_priority["high"],
        "medium_priority": by_priority["medium"],
        "low_priority": by_priority["low"],
    }


def _task_summary(task: Task) -> dict:
    return {
        "title": task.title,
        "description": task.description or "",
        "status": task.status,
        "priority": task.priority,
        "due_date": task.due_date.date().isoformat() if task.due_date else None,
    }


class AIAssistant:
    """Wraps a chat-completions client with the user's task context."""

    def __init__(
        self,
        client: OpenAI | None = None,
        tasks: TaskService | None = None,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        settings = get_settings()
        self.tasks = tasks or get_task_service()
        self.model = model or settings.AI_MODEL
        api_key = settings.GROQ_API_KEY if api_key is None else api_key
        if client is None and api_key:
            client = OpenAI(api_key=api_key, base_url=settings.AI_BASE_URL, timeout=settings.AI_TIMEOUT_SECONDS)
        self.client = client

    def _complete(self, messages: list[dict], temperature: float, max_tokens: int) -> str:
        if self.client is None:
            raise AssistantNotConfigured()
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            logger.error("AI provider call failed: %s", exc.__class__.__name__)
            raise AssistantUnavailable() from exc

        choices = getattr(completion, "choices", None) or []
        if not choices:
            logger.warning("AI completion returned no choices")
            return FALLBACK_REPLY
        return choices[0].message.content or FALLBACK_REPLY

    def analyze(self, db: Session, user_id: int, question: str | None = None) -> dict:
        """Productivity advice from the user's task counts and open tasks."""
        counts = task_counts(self.tasks.get_stats(db, user_id))
        open_tasks = [_task_summary(t) for t in self.tasks.open_tasks(db, user_id)]
        system = (
            "You are a task management assistant. Give concise, actionable advice on priorities, "
            f"time allocation and scheduling.\nTask counts: {json.dumps(counts)}\n"
            f"Open tasks: {json.dumps(open_tasks)}"
        )
        reply = self._complete(
            [{"role": "system", "content": system}, {"role": "user", "content": question or DEFAULT_QUESTION}],
            temperature=0.7,
            max_tokens=1500,
        )
        return {"response": reply, "task_stats": counts, "model": self.model}

    def chat(self, db: Session, user_id: int, message: str, history: list[dict] | None = None) -> dict:
        """One conversational turn. Only the last HISTORY_LIMIT history messages are sent."""
        counts = task_counts(self.tasks.get_stats(db, user_id))
        system = (
            "You are TaskBot, a friendly productivity assistant. Be concise and practical.\n"
            f"The user has {counts['total']} tasks: {counts['high_priority']} high priority, "
            f"{counts['pending']} pending, {counts['in_progress']} in progress."
        )
        messages = [{"role": "system", "content": system}]
        messages.extend((history or [])[-HISTORY_LIMIT:])
        messages.append({"role": "user", "content": message})
        return {"response": self._complete(messages, temperature=0.8, max_tokens=800)}

    def schedule(self, db: Session, user_id: int, work_hours: int = 8, start_time: str = "09:00") -> dict:
        """A daily timetable for the user's open tasks."""
        open_tasks = self.tasks.open_tasks(db, user_id)
        if not open_tasks:
            return {"response": NO_OPEN_TASKS_REPLY, "total_tasks": 0, "work_hours": work_hours}

        task_lines = "\n".join(f"- {t.title} ({t.priority} priority, {t.status})" for t in open_tasks)
        prompt = (
            f"Create a {work_hours}-hour daily schedule starting at {start_time} for these tasks:\n"
            f"{task_lines}\nUse explicit time slots, include short breaks, put high priority work first."
        )
        reply = self._complete(
            [
                {"role": "system", "content": "You are a scheduling assistant. Produce realistic daily timetables."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.6,
            max_tokens=1000,
        )
        return {"response": reply, "total_tasks": len(open_tasks), "work_hours": work_hours}


_ai_assistant: AIAssistant | None = None


def get_ai_assistant() -> AIAssistant:
    """Get singleton AI assistant instance."""
    global _ai_assistant
    if _ai_assistant is None:
        _ai_assistant = AIAssistant()
    return _ai_assistant
