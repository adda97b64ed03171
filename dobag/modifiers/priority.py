"""Priority modifier: low, medium or high importance."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dobag.models.task import Task
from dobag.models.modifier import SchedulingHint, ScheduleContext
from dobag.models.constants import PRIORITY_LEVEL_VALUES, DEFAULT_PRIORITY_LEVEL
from dobag.modifiers.base import ModifierBehavior


@dataclass(frozen=True)
class PriorityValue:
    level: str

    @classmethod
    def from_value(cls, value: Dict[str, Any]) -> "PriorityValue":
        level = value.get("value") or DEFAULT_PRIORITY_LEVEL
        if not isinstance(level, str):
            level = DEFAULT_PRIORITY_LEVEL
        return cls(level=level)

    @property
    def score(self) -> int:
        """Numeric priority, 0-100 (unknown levels score as medium)."""
        return PRIORITY_LEVEL_VALUES.get(self.level, PRIORITY_LEVEL_VALUES[DEFAULT_PRIORITY_LEVEL])


class PriorityModifier(ModifierBehavior):
    """Importance of a task."""

    kind = "priority"

    def validate_value(self, value: Any) -> bool:
        if not isinstance(value, dict) or not value.get("value"):
            return False
        level = value["value"]
        return isinstance(level, str) and level in PRIORITY_LEVEL_VALUES

    def get_default_value(self) -> Dict[str, Any]:
        return {"value": DEFAULT_PRIORITY_LEVEL}

    def get_scheduling_hints(
        self,
        task: Task,
        value: Dict[str, Any],
        context: Optional[ScheduleContext],
    ) -> List[SchedulingHint]:
        priority = PriorityValue.from_value(value)
        return [
            SchedulingHint(
                type="scheduling-priority",
                priority=priority.score,
                data={
                    "level": priority.level,
                    "earlySchedulingPreference": priority.level == "high",
                    "canDelay": priority.level == "low",
                },
            )
        ]
