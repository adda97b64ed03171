"""SQLAlchemy database models for doBag."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint

from typing import Union, TypeVar, Type
from dobag.database.database import Base
from dobag.models.task import TaskStatus

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (issued by the auth service)
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from dobag.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    text = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=1)
    status = Column(String, nullable=False, default=TaskStatus.BAG.value)

    # Templates
    is_template = Column(Boolean, nullable=False, default=False, index=True)
    # Deleting a referenced template is refused by the application, not cascaded
    template_id = Column(String, ForeignKey("tasks.id"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from dobag.models.task import Task

        return Task(
            id=self.id,
            user_id=self.user_id,
            text=self.text,
            position=self.position,
            status=value_to_enum(self.status, TaskStatus, TaskStatus.BAG),
            is_template=bool(self.is_template),
            template_id=self.template_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        return cls(
            id=task.id,
            user_id=task.user_id,
            text=task.text,
            position=task.position,
            # Pydantic with use_enum_values=True returns strings
            status=enum_to_value(task.status),
            is_template=task.is_template,
            template_id=task.template_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class ModifierDB(Base):
    """Database model for a modifier catalog entry."""

    __tablename__ = "modifiers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    kind = Column(String, nullable=False, index=True)
    config = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from dobag.models.modifier import Modifier
        return Modifier(
            id=self.id,
            name=self.name,
            description=self.description,
            kind=self.kind,
            config=self.config or {},
            created_at=self.created_at,
        )


class TaskModifierDB(Base):
    """Database model for a task's value of one modifier."""

    __tablename__ = "task_modifiers"
    __table_args__ = (
        # At most one value per (task, modifier)
        UniqueConstraint("task_id", "modifier_id", name="uq_task_modifier"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    modifier_id = Column(String, ForeignKey("modifiers.id", ondelete="CASCADE"), nullable=False)
    value = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self, modifier: "ModifierDB" = None):
        """Convert database model to Pydantic model (optionally joined with its catalog row)."""
        from dobag.models.modifier import TaskModifier
        return TaskModifier(
            id=self.id,
            task_id=self.task_id,
            modifier_id=self.modifier_id,
            value=self.value or {},
            created_at=self.created_at,
            updated_at=self.updated_at,
            modifier_kind=modifier.kind if modifier is not None else None,
            modifier_name=modifier.name if modifier is not None else None,
        )

    @classmethod
    def from_pydantic(cls, task_modifier):
        """Create database model from Pydantic model."""
        return cls(
            id=task_modifier.id,
            task_id=task_modifier.task_id,
            modifier_id=task_modifier.modifier_id,
            value=task_modifier.value,
            created_at=task_modifier.created_at,
            updated_at=task_modifier.updated_at,
        )
