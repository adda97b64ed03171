"""Behavior contract every modifier kind implements.

The scheduler is polymorphic over this contract and never special-cases a kind
name, so new kinds can be added by writing a behavior and registering it.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from dobag.models.task import Task
from dobag.models.modifier import SchedulingHint, ScheduleContext


class ModifierBehavior(ABC):
    """Validation, default value and scheduling hints for one modifier kind."""

    kind: str = ""

    @abstractmethod
    def validate_value(self, value: Any) -> bool:
        """Return whether ``value`` is well-formed for this kind.

        Must be a pure structural check that returns False (never raises) for
        malformed input.
        """

    @abstractmethod
    def get_default_value(self) -> Dict[str, Any]:
        """Return a value that always passes ``validate_value``."""

    @abstractmethod
    def get_scheduling_hints(
        self,
        task: Task,
        value: Dict[str, Any],
        context: ScheduleContext,
    ) -> List[SchedulingHint]:
        """Return zero or more hints for ``task`` given its value for this kind.

        Must be a pure function of its inputs.
        """


def is_number(value: Any) -> bool:
    """True for finite ints and floats (booleans are not numbers here)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
