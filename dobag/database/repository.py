"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import List, Optional, Dict
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import TaskModifier
from dobag.models.constants import FIRST_POSITION
from dobag.database.models import TaskDB, TaskModifierDB, enum_to_value

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task, task_modifiers: Optional[List[TaskModifier]] = None) -> Task:
        """Create a new task together with its modifier values (one commit)."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            if task_modifiers:
                # Task row first so the modifier rows can reference it
                self.db.flush()
                self.db.add_all([TaskModifierDB.from_pydantic(tm) for tm in task_modifiers])
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.text[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_template(self, user_id: str, template_id: str) -> Optional[Task]:
        """Get a template owned by the user (None if missing or not a template)."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == template_id,
            TaskDB.user_id == user_id,
            TaskDB.is_template.is_(True),
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str, templates: Optional[bool] = None) -> List[Task]:
        """Get a user's tasks.

        Args:
            user_id: Owner of the tasks
            templates: True for templates only, False for live tasks only,
                None for both (templates first)

        Returns:
            Tasks ordered by position
        """
        query = self.db.query(TaskDB).filter(TaskDB.user_id == user_id)
        if templates is None:
            query = query.order_by(desc(TaskDB.is_template), TaskDB.position, TaskDB.created_at)
        else:
            query = query.filter(TaskDB.is_template.is_(templates)).order_by(TaskDB.position, TaskDB.created_at)
        return [task_db.to_pydantic() for task_db in query.all()]

    def get_active(self, user_id: str) -> List[Task]:
        """Get all live (non-template) tasks for a user ordered by position."""
        return self.get_all(user_id, templates=False)

    def get_max_position(
        self,
        user_id: str,
        *,
        is_template: Optional[bool] = None,
        status: Optional[TaskStatus] = None,
    ) -> Optional[int]:
        """Highest position among the user's matching tasks (None if there are none)."""
        query = self.db.query(func.max(TaskDB.position)).filter(TaskDB.user_id == user_id)
        if is_template is not None:
            query = query.filter(TaskDB.is_template.is_(is_template))
        if status is not None:
            query = query.filter(TaskDB.status == enum_to_value(status))
        return query.scalar()

    def next_position(self, user_id: str, **filters) -> int:
        """One past the highest matching position, or the first position."""
        max_position = self.get_max_position(user_id, **filters)
        return max_position + 1 if max_position is not None else FIRST_POSITION

    def count_instances(self, user_id: str, template_id: str) -> int:
        """Number of the user's tasks instantiated from a template."""
        return self.db.query(func.count(TaskDB.id)).filter(
            TaskDB.user_id == user_id,
            TaskDB.template_id == template_id,
        ).scalar() or 0

    def get_usage_counts(self, user_id: str) -> Dict[str, int]:
        """Instance counts keyed by template id (templates without instances are omitted)."""
        rows = self.db.query(TaskDB.template_id, func.count(TaskDB.id)).filter(
            TaskDB.user_id == user_id,
            TaskDB.template_id.isnot(None),
        ).group_by(TaskDB.template_id).all()
        return {template_id: int(count) for template_id, count in rows}

    def update(self, task: Task) -> Task:
        """Update an existing task (user_id must match task.user_id)."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task.id,
            TaskDB.user_id == task.user_id,
        ).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")

        task_db.text = task.text
        task_db.position = task.position
        task_db.status = enum_to_value(task.status)
        task_db.is_template = task.is_template
        task_db.template_id = task.template_id
        task_db.updated_at = task.updated_at

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.text[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def update_position(self, user_id: str, task_id: str, position: int) -> Optional[Task]:
        """Set a task's position. Returns None if the task does not exist."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return None

        try:
            task_db.position = position
            task_db.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Moved task {task_id} to position {position}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to move task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, task_id: str) -> bool:
        """Permanently delete a task and its modifier values."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return False

        try:
            self.db.query(TaskModifierDB).filter(
                TaskModifierDB.task_id == task_id,
            ).delete(synchronize_session=False)
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
