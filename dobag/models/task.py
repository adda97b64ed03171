"""Task data model for doBag."""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status enumeration."""
    BAG = "bag"      # Live task
    SHELF = "shelf"  # Template kept on the shelf


class Task(BaseModel):
    """Canonical Task model.

    Attributes such as duration or priority are not fields of the task; they
    are attached as modifiers (see ``dobag.models.modifier``).
    """
    
    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    text: str = Field(..., min_length=1, description="Task text")
    position: int = Field(..., description="Ordering key within the user's list")
    status: TaskStatus = Field(TaskStatus.BAG, description="Task status")
    is_template: bool = Field(False, description="Whether this task is a reusable template")
    template_id: Optional[str] = Field(
        None, description="Template this task was instantiated from (non-owning reference)"
    )
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    
    class Config:
        """Pydantic configuration."""
        use_enum_values = True
