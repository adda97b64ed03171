"""Request/response models for task and modifier endpoints."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import Modifier, TaskModifier
from dobag.engine.task_modifiers import ModifierInput


class TaskCreateRequest(BaseModel):
    """Request model for creating a task or template."""
    text: str = Field(..., min_length=1, description="Task text")
    status: Optional[TaskStatus] = Field(None, description="'bag' for live tasks, 'shelf' for templates")
    is_template: Optional[bool] = Field(None, description="Create a template")
    modifiers: List[ModifierInput] = Field(default_factory=list, description="Modifier values to attach")


class TaskUpdateRequest(BaseModel):
    """Request model for updating a task (fields left out are unchanged)."""
    text: Optional[str] = Field(None, min_length=1, description="Task text")
    status: Optional[TaskStatus] = Field(None, description="Task status")


class TaskPositionRequest(BaseModel):
    """Request model for a manual (drag-and-drop) reorder."""
    position: int = Field(..., description="New position")


class TaskModifierValueRequest(BaseModel):
    """Request model for replacing a modifier value."""
    value: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific value")


class TaskListItem(Task):
    """Task as listed, with template usage info."""
    usage_count: Optional[int] = Field(None, description="Number of instances (templates only)")


class TaskResponse(BaseModel):
    """Response for a single task."""
    task: Task
    modifiers: List[TaskModifier] = Field(default_factory=list)


class TaskListResponse(BaseModel):
    """Response for task listing."""
    tasks: List[TaskListItem]
    count: int


class ModifierListResponse(BaseModel):
    """Response for the modifier catalog."""
    modifiers: List[Modifier]
    count: int


class ModifierTypesResponse(BaseModel):
    """Response for registered modifier kinds."""
    types: List[str]
    count: int


class TaskModifierListResponse(BaseModel):
    """Response for a task's modifier values."""
    modifiers: List[TaskModifier]
    count: int


class BatchModifierResponse(BaseModel):
    """Response for a batch modifier application."""
    success: bool
    results: List[TaskModifier]
    errors: Optional[List[Dict[str, Any]]] = None
    total: int
    successful: int
    failed: int
