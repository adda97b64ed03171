"""Position scheduler for doBag.

Gathers scheduling hints from every modifier attached to a task and turns the
position suggestions among them into one integer position by majority vote.

The scheduler is agnostic to modifier kinds: it only reads the ``position``,
``suggestedPositions`` and ``value`` fields of hint data. Hints without those
fields (duration, priority and divisibility hints today) have no effect on the
position. Hint ``priority`` is not used to weight votes.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import List, Optional, Tuple

from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import SchedulingHint, ScheduleContext, TaskModifier
from dobag.modifiers.base import ModifierBehavior, is_number
from dobag.modifiers.registry import ModifierRegistry
from dobag.database.repository import TaskRepository
from dobag.database.modifier_repository import TaskModifierRepository

logger = logging.getLogger(__name__)


def get_position_suggestions(hints: List[SchedulingHint]) -> List[float]:
    """Extract position suggestions from scheduling hints.

    Every hint is checked for three shapes, in order:
    1. ``data["position"]`` is a number
    2. ``data["suggestedPositions"]`` is a list of numbers or ``{"position": number}``
    3. ``hint.type == "position"`` and ``data["value"]`` is a number

    A hint may contribute zero, one or many suggestions.

    Args:
        hints: Hints from all of a task's modifiers

    Returns:
        Suggested positions in hint order
    """
    positions: List[float] = []

    for hint in hints:
        data = hint.data or {}

        if is_number(data.get("position")):
            positions.append(data["position"])

        suggested = data.get("suggestedPositions")
        if isinstance(suggested, list):
            for suggestion in suggested:
                if is_number(suggestion):
                    positions.append(suggestion)
                elif isinstance(suggestion, dict) and is_number(suggestion.get("position")):
                    positions.append(suggestion["position"])

        if hint.type == "position" and is_number(data.get("value")):
            positions.append(data["value"])

    return positions


def resolve_position(positions: List[float]) -> Optional[int]:
    """Resolve suggested positions by unweighted majority vote.

    The most-suggested position wins; on a tie the largest (furthest to the
    end) candidate wins.

    Args:
        positions: Suggested positions (may contain duplicates)

    Returns:
        The winning position, or None if there are no suggestions
    """
    if not positions:
        return None

    votes = Counter(positions)
    max_votes = max(votes.values())
    winner = max(position for position, count in votes.items() if count == max_votes)
    return int(winner)


class SchedulerService:
    """Computes positions for tasks from their modifiers' hints.

    Reads only; writing the returned position is up to the caller.
    """

    def __init__(
        self,
        registry: ModifierRegistry,
        task_repository: TaskRepository,
        task_modifier_repository: TaskModifierRepository,
    ):
        self.registry = registry
        self.task_repository = task_repository
        self.task_modifier_repository = task_modifier_repository

    def calculate_task_position(self, task: Task, task_modifiers: Optional[List[TaskModifier]] = None) -> int:
        """Calculate a task's position based on its modifiers.

        Args:
            task: The task to schedule
            task_modifiers: The task's modifier values. Loaded from the store
                when omitted; pass them for a task that is not stored yet.

        Returns:
            The position suggested by most hints, or the default position if
            no hint suggests one
        """
        hints = self.get_scheduling_hints(task, task_modifiers)
        position = resolve_position(get_position_suggestions(hints))
        if position is None:
            position = self.get_default_position(task)
            logger.debug(f"No position suggestions for task {task.id}; using default {position}")
        else:
            logger.debug(f"Resolved task {task.id} to position {position} from {len(hints)} hints")
        return position

    def get_scheduling_hints(
        self, task: Task, task_modifiers: Optional[List[TaskModifier]] = None
    ) -> List[SchedulingHint]:
        """Collect hints from every resolvable modifier attached to the task."""
        if task_modifiers is None:
            task_modifiers = self.task_modifier_repository.get_for_task(task.id)
        entries = self._resolve_behaviors(task_modifiers)
        if not entries:
            return []

        context = self.build_schedule_context(task.user_id)
        hints: List[SchedulingHint] = []
        for task_modifier, behavior in entries:
            hints.extend(behavior.get_scheduling_hints(task, task_modifier.value, context))
        return hints

    def build_schedule_context(self, user_id: str) -> ScheduleContext:
        """Snapshot of the user's live tasks (ordered by position) and their modifiers."""
        tasks = self.task_repository.get_active(user_id)
        modifiers_by_task = self.task_modifier_repository.get_for_tasks([t.id for t in tasks])
        return ScheduleContext(
            tasks=tasks,
            current_time=datetime.utcnow(),
            modifiers_by_task=modifiers_by_task,
        )

    def get_default_position(self, task: Task) -> int:
        """One past the user's last live bag task (or the first position)."""
        return self.task_repository.next_position(task.user_id, is_template=False, status=TaskStatus.BAG)

    def _resolve_behaviors(
        self, task_modifiers: List[TaskModifier]
    ) -> List[Tuple[TaskModifier, ModifierBehavior]]:
        entries = []
        for task_modifier in task_modifiers:
            behavior = self.registry.get(task_modifier.modifier_kind)
            if behavior is None:
                logger.warning(
                    f"Unknown modifier kind '{task_modifier.modifier_kind}' on task "
                    f"{task_modifier.task_id}; skipping"
                )
                continue
            entries.append((task_modifier, behavior))
        return entries
