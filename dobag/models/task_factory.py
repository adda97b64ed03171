"""Task creation factory for doBag.

This module centralizes task creation logic so the API and the template
instantiation path apply the same template rules and defaults.
"""

import uuid
from datetime import datetime
from typing import Optional, Dict, Any, Tuple

from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import TaskModifier
from dobag.models.constants import FIRST_POSITION


def resolve_template_flags(
    status: Optional[TaskStatus] = None,
    is_template: Optional[bool] = None,
) -> Tuple[TaskStatus, bool]:
    """Determine (status, is_template) for a new task.

    A task is a template if it is explicitly flagged as one or if it is
    created on the shelf. Templates default to the shelf, live tasks to the bag.

    Args:
        status: Requested status, if any
        is_template: Requested template flag, if any

    Returns:
        Tuple of (status, is_template)
    """
    template = is_template is True or status == TaskStatus.SHELF
    if status is None:
        status = TaskStatus.SHELF if template else TaskStatus.BAG
    return TaskStatus(status), template


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary."""
    return {
        "status": TaskStatus.BAG,
        "position": FIRST_POSITION,
        "is_template": False,
        "template_id": None,
    }


def create_task_base(
    user_id: str,
    text: str,
    position: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    is_template: Optional[bool] = None,
    template_id: Optional[str] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    Args:
        user_id: User ID who owns this task (required)
        text: Task text (required)
        position: Initial position (defaults to the first position)
        status: Task status (derived from the template flag when omitted)
        is_template: Whether the task is a template
        template_id: Template the task is instantiated from

    Returns:
        Task object with defaults applied
    """
    now = datetime.utcnow()
    defaults = create_task_defaults()
    status, template = resolve_template_flags(status, is_template)

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        text=text,
        position=position if position is not None else defaults["position"],
        status=status,
        is_template=template,
        template_id=template_id if template_id is not None else defaults["template_id"],
        created_at=now,
        updated_at=now,
    )


def create_instance_from_template(template: Task, position: int) -> Task:
    """Create a live task instance from a template (not yet persisted)."""
    return create_task_base(
        user_id=template.user_id,
        text=template.text,
        position=position,
        status=TaskStatus.BAG,
        is_template=False,
        template_id=template.id,
    )


def create_task_modifier(
    task_id: str,
    modifier_id: str,
    value: Dict[str, Any],
    modifier_kind: Optional[str] = None,
    modifier_name: Optional[str] = None,
) -> TaskModifier:
    """Create a modifier value for a task (not yet persisted)."""
    now = datetime.utcnow()
    return TaskModifier(
        id=str(uuid.uuid4()),
        task_id=task_id,
        modifier_id=modifier_id,
        value=dict(value),
        created_at=now,
        updated_at=now,
        modifier_kind=modifier_kind,
        modifier_name=modifier_name,
    )
