"""Duration modifier.

Expected time a task needs, written as ``"<number>m"`` or ``"<number>h"``
(e.g. ``"30m"``, ``"1.5h"``).
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dobag.models.task import Task
from dobag.models.modifier import SchedulingHint, ScheduleContext
from dobag.models.constants import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_DURATION_VALUE,
    DURATION_HINT_PRIORITY,
)
from dobag.modifiers.base import ModifierBehavior

_DURATION_RE = re.compile(r"(?P<amount>\d+|\d+\.\d+)(?P<unit>[mh])", re.ASCII)


def parse_duration(duration: Any) -> float:
    """Convert a duration string to minutes.

    Args:
        duration: Duration string such as "30m", "1h" or "1.5h"

    Returns:
        Duration in minutes (DEFAULT_DURATION_MINUTES if unparsable)
    """
    if not isinstance(duration, str):
        return DEFAULT_DURATION_MINUTES
    match = _DURATION_RE.fullmatch(duration)
    if not match:
        return DEFAULT_DURATION_MINUTES
    amount = float(match.group("amount"))
    return amount * 60 if match.group("unit") == "h" else amount


@dataclass(frozen=True)
class DurationValue:
    minutes: float

    @classmethod
    def from_value(cls, value: Dict[str, Any]) -> "DurationValue":
        return cls(minutes=parse_duration(value.get("value") or DEFAULT_DURATION_VALUE))


class DurationModifier(ModifierBehavior):
    """Time requirement of a task."""

    kind = "duration"

    def validate_value(self, value: Any) -> bool:
        if not isinstance(value, dict) or not value.get("value"):
            return False
        duration = value["value"]
        return isinstance(duration, str) and _DURATION_RE.fullmatch(duration) is not None

    def get_default_value(self) -> Dict[str, Any]:
        return {"value": DEFAULT_DURATION_VALUE}

    def get_scheduling_hints(
        self,
        task: Task,
        value: Dict[str, Any],
        context: Optional[ScheduleContext],
    ) -> List[SchedulingHint]:
        duration = DurationValue.from_value(value)
        return [
            SchedulingHint(
                type="time-requirement",
                priority=DURATION_HINT_PRIORITY,
                data={
                    "durationMinutes": duration.minutes,
                    "mustFit": True,
                },
            )
        ]
