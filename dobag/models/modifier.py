"""Modifier data models for doBag.

A modifier is a typed task attribute extension. The catalog (``Modifier``)
describes which kinds exist; ``TaskModifier`` holds the value one task has for
one modifier. ``value`` and ``config`` are open JSON maps: only the behavior
registered for the modifier's kind interprets them.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from dobag.models.task import Task


class Modifier(BaseModel):
    """Catalog entry for a modifier type."""

    id: str = Field(..., description="Unique modifier identifier")
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="Human-readable description")
    kind: str = Field(..., description="Behavior kind (e.g. 'duration', 'priority')")
    config: Dict[str, Any] = Field(default_factory=dict, description="UI/behavior configuration")
    created_at: datetime = Field(..., description="Creation timestamp")


class TaskModifier(BaseModel):
    """Value of a modifier attached to a task."""

    id: str = Field(..., description="Unique task-modifier identifier")
    task_id: str = Field(..., description="Task this value belongs to")
    modifier_id: str = Field(..., description="Catalog modifier this value is for")
    value: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific value")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    # Populated when read joined with the catalog
    modifier_kind: Optional[str] = Field(None, description="Kind of the catalog modifier")
    modifier_name: Optional[str] = Field(None, description="Name of the catalog modifier")


class SchedulingHint(BaseModel):
    """Ephemeral suggestion a modifier contributes toward scheduling.

    ``priority`` is advisory: the position vote does not weight by it.
    """

    type: str = Field(..., min_length=1, description="Hint type (e.g. 'time-requirement')")
    priority: int = Field(..., ge=0, le=100, description="Importance, 0-100")
    data: Dict[str, Any] = Field(default_factory=dict, description="Hint-specific data")


class ScheduleContext(BaseModel):
    """Snapshot handed to behaviors when they produce hints."""

    tasks: List[Task] = Field(default_factory=list, description="User's live tasks ordered by position")
    current_time: datetime = Field(..., description="Time the snapshot was taken")
    modifiers_by_task: Dict[str, List[TaskModifier]] = Field(
        default_factory=dict, description="Modifier values keyed by task id"
    )
