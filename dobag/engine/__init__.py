"""Scheduling and task lifecycle engine for doBag."""

from dobag.engine.scheduler import SchedulerService, get_position_suggestions, resolve_position
from dobag.engine.lifecycle import TaskLifecycleService
from dobag.engine.task_modifiers import TaskModifierService, ModifierInput, BatchResult

__all__ = [
    "SchedulerService",
    "get_position_suggestions",
    "resolve_position",
    "TaskLifecycleService",
    "TaskModifierService",
    "ModifierInput",
    "BatchResult",
]
