"""Divisibility modifier.

Whether a task can be split into segments, and how: ``{"value": true,
"minSegmentMinutes": 20, "maxSegments": 2}``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dobag.models.task import Task
from dobag.models.modifier import SchedulingHint, ScheduleContext
from dobag.models.constants import (
    DEFAULT_MIN_SEGMENT_MINUTES,
    DEFAULT_MAX_SEGMENTS,
    DIVISIBILITY_HINT_PRIORITY,
)
from dobag.modifiers.base import ModifierBehavior, is_number


def _is_positive_integer(value: Any) -> bool:
    if not is_number(value) or value <= 0:
        return False
    return isinstance(value, int) or float(value).is_integer()


@dataclass(frozen=True)
class DivisibilityValue:
    is_divisible: bool
    min_segment_minutes: float
    max_segments: int

    @classmethod
    def from_value(cls, value: Dict[str, Any]) -> "DivisibilityValue":
        is_divisible = value.get("value") is True
        max_segments = int(value.get("maxSegments") or DEFAULT_MAX_SEGMENTS) if is_divisible else 1
        return cls(
            is_divisible=is_divisible,
            min_segment_minutes=value.get("minSegmentMinutes") or DEFAULT_MIN_SEGMENT_MINUTES,
            max_segments=max_segments,
        )


class DivisibilityModifier(ModifierBehavior):
    """Segmentation options of a task."""

    kind = "divisibility"

    def validate_value(self, value: Any) -> bool:
        if not isinstance(value, dict) or not isinstance(value.get("value"), bool):
            return False

        # Segment settings only matter for divisible tasks
        if value["value"] is True:
            if "minSegmentMinutes" in value:
                min_segment = value["minSegmentMinutes"]
                if not is_number(min_segment) or min_segment <= 0:
                    return False
            if "maxSegments" in value and not _is_positive_integer(value["maxSegments"]):
                return False

        return True

    def get_default_value(self) -> Dict[str, Any]:
        return {
            "value": False,
            "minSegmentMinutes": DEFAULT_MIN_SEGMENT_MINUTES,
            "maxSegments": DEFAULT_MAX_SEGMENTS,
        }

    def get_scheduling_hints(
        self,
        task: Task,
        value: Dict[str, Any],
        context: Optional[ScheduleContext],
    ) -> List[SchedulingHint]:
        divisibility = DivisibilityValue.from_value(value)
        return [
            SchedulingHint(
                type="segmentation-option",
                priority=DIVISIBILITY_HINT_PRIORITY,
                data={
                    "isDivisible": divisibility.is_divisible,
                    "minSegmentMinutes": divisibility.min_segment_minutes,
                    "preferContiguous": True,
                    "maxSegments": divisibility.max_segments,
                },
            )
        ]
