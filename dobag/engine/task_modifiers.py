"""Validated writes of modifier values onto tasks.

Every value is checked by the behavior registered for the modifier's kind
before it reaches the store; invalid values are never persisted.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from dobag.errors import (
    DoBagError,
    InvalidModifierValueError,
    ModifierAlreadyAppliedError,
    ModifierNotFoundError,
    UnsupportedModifierKindError,
)
from dobag.models.task import Task
from dobag.models.modifier import Modifier, TaskModifier
from dobag.modifiers.registry import ModifierRegistry
from dobag.database.modifier_repository import ModifierRepository, TaskModifierRepository

logger = logging.getLogger(__name__)


class ModifierInput(BaseModel):
    """A modifier value to apply, identified by catalog id or by kind."""

    modifier_id: Optional[str] = Field(None, description="Catalog modifier ID")
    modifier_kind: Optional[str] = Field(None, min_length=1, description="Catalog modifier kind")
    value: Dict[str, Any] = Field(default_factory=dict, description="Kind-specific value")


class BatchResult(BaseModel):
    """Outcome of applying several modifier values to one task."""

    results: List[TaskModifier] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class TaskModifierService:
    """Attach, update, detach and batch-apply modifier values."""

    def __init__(
        self,
        registry: ModifierRegistry,
        modifier_repository: ModifierRepository,
        task_modifier_repository: TaskModifierRepository,
    ):
        self.registry = registry
        self.modifier_repository = modifier_repository
        self.task_modifier_repository = task_modifier_repository

    def resolve_modifier(self, modifier_id: Optional[str] = None, modifier_kind: Optional[str] = None) -> Modifier:
        """Find a catalog modifier by ID, or by kind when no ID is given.

        Raises:
            DoBagError: If neither an ID nor a kind is given
            ModifierNotFoundError: If no catalog modifier matches
        """
        if modifier_id:
            modifier = self.modifier_repository.get(modifier_id)
            if modifier is None:
                raise ModifierNotFoundError("Modifier not found")
            return modifier
        if modifier_kind:
            modifier = self.modifier_repository.get_by_kind(modifier_kind)
            if modifier is None:
                raise ModifierNotFoundError("Modifier type not found")
            return modifier
        raise DoBagError("Either modifier_id or modifier_kind must be provided")

    def validate(self, modifier: Modifier, value: Dict[str, Any]) -> None:
        """Check a value against the modifier kind's behavior.

        Raises:
            UnsupportedModifierKindError: If no behavior is registered for the kind
            InvalidModifierValueError: If the behavior rejects the value
        """
        behavior = self.registry.get(modifier.kind)
        if behavior is None:
            raise UnsupportedModifierKindError(modifier.kind)
        if not behavior.validate_value(value):
            raise InvalidModifierValueError(modifier.kind, behavior.get_default_value())

    def prepare(self, inputs: List[ModifierInput]) -> List[Tuple[Modifier, Dict[str, Any]]]:
        """Resolve and validate the values of a task that is not stored yet.

        Nothing is written; every input is checked before the caller writes any.

        Raises:
            ModifierAlreadyAppliedError: If two inputs name the same modifier
        """
        prepared: List[Tuple[Modifier, Dict[str, Any]]] = []
        seen: Set[str] = set()
        for modifier_input in inputs:
            modifier = self.resolve_modifier(modifier_input.modifier_id, modifier_input.modifier_kind)
            if modifier.id in seen:
                raise ModifierAlreadyAppliedError("Modifier listed more than once")
            seen.add(modifier.id)
            self.validate(modifier, modifier_input.value)
            prepared.append((modifier, modifier_input.value))
        return prepared

    def attach(self, task: Task, modifier_input: ModifierInput) -> TaskModifier:
        """Attach a new modifier value to a task.

        Raises:
            ModifierAlreadyAppliedError: If the task already has a value for the modifier
        """
        modifier = self.resolve_modifier(modifier_input.modifier_id, modifier_input.modifier_kind)
        if self.task_modifier_repository.get(task.id, modifier.id) is not None:
            raise ModifierAlreadyAppliedError("Modifier already applied to this task")
        self.validate(modifier, modifier_input.value)
        return self.task_modifier_repository.create(task.id, modifier.id, modifier_input.value)

    def update(self, task: Task, modifier_id: str, value: Dict[str, Any]) -> TaskModifier:
        """Replace a task's value for a modifier it already has."""
        existing = self.task_modifier_repository.get(task.id, modifier_id)
        if existing is None:
            raise ModifierNotFoundError("Modifier not found for this task")
        self.validate(self.resolve_modifier(modifier_id=modifier_id), value)
        return self.task_modifier_repository.update_value(task.id, modifier_id, value)

    def detach(self, task: Task, modifier_id: str) -> None:
        """Remove a modifier from a task."""
        if not self.task_modifier_repository.delete(task.id, modifier_id):
            raise ModifierNotFoundError("Modifier not found for this task")

    def apply_batch(self, task: Task, inputs: List[ModifierInput]) -> BatchResult:
        """Apply several values, inserting new ones and updating existing ones.

        Each input is handled independently: failures are collected as errors
        and do not stop the rest of the batch.
        """
        batch = BatchResult()
        for modifier_input in inputs:
            try:
                modifier = self.resolve_modifier(modifier_input.modifier_id, modifier_input.modifier_kind)
                self.validate(modifier, modifier_input.value)
                if self.task_modifier_repository.get(task.id, modifier.id) is not None:
                    result = self.task_modifier_repository.update_value(task.id, modifier.id, modifier_input.value)
                else:
                    result = self.task_modifier_repository.create(task.id, modifier.id, modifier_input.value)
                batch.results.append(result)
            except InvalidModifierValueError as e:
                batch.errors.append({
                    "kind": e.kind,
                    "error": str(e),
                    "expected_format": e.expected_format,
                })
            except DoBagError as e:
                batch.errors.append({
                    "input": modifier_input.model_dump(),
                    "error": str(e),
                })
        logger.debug(
            f"Applied modifier batch to task {task.id}: "
            f"{len(batch.results)} ok, {len(batch.errors)} failed"
        )
        return batch
