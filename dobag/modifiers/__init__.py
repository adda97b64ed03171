"""Modifier behaviors for doBag.

``build_default_registry`` is the single place where kinds are bound to
behaviors. To add a kind, implement ``ModifierBehavior`` and list it in
``DEFAULT_BEHAVIORS``.
"""

from dobag.modifiers.base import ModifierBehavior
from dobag.modifiers.registry import ModifierRegistry
from dobag.modifiers.duration import DurationModifier
from dobag.modifiers.priority import PriorityModifier
from dobag.modifiers.divisibility import DivisibilityModifier

DEFAULT_BEHAVIORS = (
    DurationModifier,
    PriorityModifier,
    DivisibilityModifier,
)


def build_default_registry() -> ModifierRegistry:
    """Create a registry with every built-in modifier kind registered."""
    registry = ModifierRegistry()
    for behavior_class in DEFAULT_BEHAVIORS:
        behavior = behavior_class()
        registry.register(behavior.kind, behavior)
    return registry


__all__ = [
    "ModifierBehavior",
    "ModifierRegistry",
    "DurationModifier",
    "PriorityModifier",
    "DivisibilityModifier",
    "DEFAULT_BEHAVIORS",
    "build_default_registry",
]
