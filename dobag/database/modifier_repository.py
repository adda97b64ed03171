"""Repositories for the modifier catalog and task modifier values."""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from dobag.models.modifier import Modifier, TaskModifier
from dobag.database.models import ModifierDB, TaskModifierDB

logger = logging.getLogger(__name__)


# Built-in catalog rows, one per registered behavior kind
DEFAULT_MODIFIER_CATALOG: List[Dict[str, Any]] = [
    {
        "name": "Duration",
        "description": "Expected time needed to complete the task",
        "kind": "duration",
        "config": {"unit": "minutes", "min": 5, "max": 480, "step": 5},
    },
    {
        "name": "Priority",
        "description": "Task importance level",
        "kind": "priority",
        "config": {"levels": ["low", "medium", "high"]},
    },
    {
        "name": "Divisibility",
        "description": "Whether the task can be divided into smaller segments",
        "kind": "divisibility",
        "config": {"default": False},
    },
]


class ModifierRepository:
    """Repository for modifier catalog operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Modifier]:
        """All catalog modifiers ordered by name."""
        rows = self.db.query(ModifierDB).order_by(ModifierDB.name).all()
        return [row.to_pydantic() for row in rows]

    def get(self, modifier_id: str) -> Optional[Modifier]:
        row = self.db.query(ModifierDB).filter(ModifierDB.id == modifier_id).first()
        return row.to_pydantic() if row else None

    def get_by_kind(self, kind: str) -> Optional[Modifier]:
        row = self.db.query(ModifierDB).filter(ModifierDB.kind == kind).order_by(ModifierDB.created_at).first()
        return row.to_pydantic() if row else None

    def create(
        self,
        name: str,
        kind: str,
        description: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Modifier:
        """Create a catalog modifier."""
        row = ModifierDB(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            kind=kind,
            config=config or {},
            created_at=datetime.utcnow(),
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created modifier {row.id}: {name} ({kind})")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create modifier {name}: {type(e).__name__}: {str(e)}")
            raise

    def ensure_defaults(self, definitions: Iterable[Dict[str, Any]]) -> List[Modifier]:
        """Create catalog rows for definitions whose kind is not in the catalog yet.

        Returns:
            The modifiers that were created
        """
        created: List[Modifier] = []
        for definition in definitions:
            if self.get_by_kind(definition["kind"]) is None:
                created.append(self.create(**definition))
        if created:
            logger.info(f"Seeded modifier catalog: {', '.join(m.kind for m in created)}")
        return created


class TaskModifierRepository:
    """Repository for task modifier value operations."""

    def __init__(self, db: Session):
        self.db = db

    def _joined_query(self):
        return self.db.query(TaskModifierDB, ModifierDB).join(
            ModifierDB, TaskModifierDB.modifier_id == ModifierDB.id
        )

    def get_for_task(self, task_id: str) -> List[TaskModifier]:
        """A task's modifier values joined with their catalog kind, ordered by modifier name."""
        rows = self._joined_query().filter(
            TaskModifierDB.task_id == task_id,
        ).order_by(ModifierDB.name).all()
        return [tm.to_pydantic(modifier) for tm, modifier in rows]

    def get_for_tasks(self, task_ids: List[str]) -> Dict[str, List[TaskModifier]]:
        """Modifier values for several tasks, keyed by task id."""
        result: Dict[str, List[TaskModifier]] = {task_id: [] for task_id in task_ids}
        if not task_ids:
            return result
        rows = self._joined_query().filter(
            TaskModifierDB.task_id.in_(task_ids),
        ).order_by(ModifierDB.name).all()
        for tm, modifier in rows:
            result[tm.task_id].append(tm.to_pydantic(modifier))
        return result

    def get(self, task_id: str, modifier_id: str) -> Optional[TaskModifier]:
        row = self._joined_query().filter(
            TaskModifierDB.task_id == task_id,
            TaskModifierDB.modifier_id == modifier_id,
        ).first()
        if not row:
            return None
        tm, modifier = row
        return tm.to_pydantic(modifier)

    def create(self, task_id: str, modifier_id: str, value: Dict[str, Any]) -> TaskModifier:
        """Attach a modifier value to a task.

        The (task_id, modifier_id) uniqueness constraint is enforced by the store;
        a violation propagates as an IntegrityError.
        """
        now = datetime.utcnow()
        row = TaskModifierDB(
            id=str(uuid.uuid4()),
            task_id=task_id,
            modifier_id=modifier_id,
            value=value,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(row)
            self.db.commit()
            logger.debug(f"Attached modifier {modifier_id} to task {task_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to attach modifier {modifier_id} to task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        return self.get(task_id, modifier_id)

    def update_value(self, task_id: str, modifier_id: str, value: Dict[str, Any]) -> Optional[TaskModifier]:
        """Replace a task's value for a modifier. Returns None if not attached."""
        row = self.db.query(TaskModifierDB).filter(
            TaskModifierDB.task_id == task_id,
            TaskModifierDB.modifier_id == modifier_id,
        ).first()
        if not row:
            return None

        try:
            row.value = value
            row.updated_at = datetime.utcnow()
            self.db.commit()
            logger.debug(f"Updated modifier {modifier_id} on task {task_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update modifier {modifier_id} on task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        return self.get(task_id, modifier_id)

    def delete(self, task_id: str, modifier_id: str) -> bool:
        """Detach a modifier from a task."""
        row = self.db.query(TaskModifierDB).filter(
            TaskModifierDB.task_id == task_id,
            TaskModifierDB.modifier_id == modifier_id,
        ).first()
        if not row:
            return False

        try:
            self.db.delete(row)
            self.db.commit()
            logger.debug(f"Detached modifier {modifier_id} from task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to detach modifier {modifier_id} from task {task_id}: {type(e).__name__}: {str(e)}")
            raise
