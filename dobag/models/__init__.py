"""Data models for doBag."""

from dobag.models.task import Task, TaskStatus
from dobag.models.user import User
from dobag.models.modifier import Modifier, TaskModifier, SchedulingHint, ScheduleContext

__all__ = [
    "Task",
    "TaskStatus",
    "User",
    "Modifier",
    "TaskModifier",
    "SchedulingHint",
    "ScheduleContext",
]
