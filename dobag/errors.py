"""Error types for doBag.

Only caller-input violations and not-found conditions are raised as
``DoBagError``. "No opinion" conditions (no hints, unknown modifier kind during
scheduling) are not errors. Store failures propagate as SQLAlchemy errors.
"""

from typing import Any, Dict, Optional


class DoBagError(Exception):
    """Base exception for doBag."""
    pass


class TaskNotFoundError(DoBagError):
    """Task does not exist or is not owned by the user."""
    pass


class TemplateNotFoundError(DoBagError):
    """Template does not exist, is not owned by the user, or is not a template."""
    pass


class ModifierNotFoundError(DoBagError):
    """Catalog modifier (or a task's value for it) does not exist."""
    pass


class ModifierAlreadyAppliedError(DoBagError):
    """The task already has a value for this modifier."""
    pass


class UnsupportedModifierKindError(DoBagError):
    """No behavior is registered for the modifier's kind, so values cannot be validated."""

    def __init__(self, kind: str):
        super().__init__(f"Unsupported modifier kind: {kind}")
        self.kind = kind


class InvalidModifierValueError(DoBagError):
    """A modifier value failed its behavior's validation."""

    def __init__(self, kind: str, expected_format: Optional[Dict[str, Any]] = None):
        super().__init__("Invalid value for this modifier type")
        self.kind = kind
        self.expected_format = expected_format


class TemplateInUseError(DoBagError):
    """A template cannot be deleted while tasks reference it."""

    def __init__(self, template_id: str, usage_count: int):
        super().__init__("Cannot delete template that is in use by tasks")
        self.template_id = template_id
        self.usage_count = usage_count
