"""Task and template lifecycle rules for doBag.

Templates (``is_template=True``, on the shelf) are reusable patterns. An
instance is a live bag task that points back at its template and starts with a
copy of the template's modifier values. Templates cannot be deleted while any
instance references them.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from dobag.errors import TaskNotFoundError, TemplateNotFoundError, TemplateInUseError
from dobag.models.task import Task, TaskStatus
from dobag.models.modifier import Modifier, TaskModifier
from dobag.models.task_factory import (
    create_task_base,
    create_instance_from_template,
    create_task_modifier,
    resolve_template_flags,
)
from dobag.database.repository import TaskRepository
from dobag.database.modifier_repository import TaskModifierRepository
from dobag.engine.scheduler import SchedulerService

logger = logging.getLogger(__name__)


class TaskLifecycleService:
    """Creates, schedules, instantiates and deletes tasks."""

    def __init__(
        self,
        task_repository: TaskRepository,
        task_modifier_repository: TaskModifierRepository,
        scheduler: SchedulerService,
    ):
        self.task_repository = task_repository
        self.task_modifier_repository = task_modifier_repository
        self.scheduler = scheduler

    def create_task(
        self,
        user_id: str,
        text: str,
        status: Optional[TaskStatus] = None,
        is_template: Optional[bool] = None,
        modifier_values: Optional[List[Tuple[Modifier, Dict[str, Any]]]] = None,
    ) -> Tuple[Task, List[TaskModifier]]:
        """Create a task with its (already validated) modifier values.

        Live tasks are placed by the scheduler before the row is written;
        templates go after the user's last template. The task and its values
        are stored in one commit.

        Returns:
            Tuple of (new task, its modifier values)
        """
        status, template = resolve_template_flags(status, is_template)
        task = create_task_base(user_id=user_id, text=text, status=status, is_template=template)
        task_modifiers = [
            create_task_modifier(task.id, modifier.id, value, modifier.kind, modifier.name)
            for modifier, value in modifier_values or []
        ]

        if template:
            position = self.task_repository.next_position(user_id, is_template=True)
        else:
            position = self.scheduler.calculate_task_position(task, task_modifiers)

        created = self.task_repository.create(task.model_copy(update={"position": position}), task_modifiers)
        return created, self.task_modifier_repository.get_for_task(created.id)

    def reschedule(self, task: Task) -> Task:
        """Recompute a live task's position and persist it if it changed.

        Templates keep their shelf order and are returned unchanged.
        """
        if task.is_template:
            return task

        position = self.scheduler.calculate_task_position(task)
        if position == task.position:
            return task

        updated = self.task_repository.update_position(task.user_id, task.id, position)
        if updated is None:
            raise TaskNotFoundError(f"Task {task.id} not found")
        return updated

    def instantiate_from_template(self, template_id: str, user_id: str) -> Tuple[Task, List[TaskModifier]]:
        """Create a live task from a template, copying its modifier values.

        Args:
            template_id: ID of the template to instantiate
            user_id: User who must own the template

        Returns:
            Tuple of (new task, its modifier values)

        Raises:
            TemplateNotFoundError: If the template is missing, not owned by the
                user, or not a template
        """
        template = self.task_repository.get_template(user_id, template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")

        position = self.task_repository.next_position(user_id, status=TaskStatus.BAG)
        instance = create_instance_from_template(template, position)
        copies = [
            create_task_modifier(instance.id, tm.modifier_id, tm.value, tm.modifier_kind, tm.modifier_name)
            for tm in self.task_modifier_repository.get_for_task(template.id)
        ]
        # Scheduled before the row is written; the instance and its copies share one commit
        instance = instance.model_copy(
            update={"position": self.scheduler.calculate_task_position(instance, copies)}
        )

        instance = self.task_repository.create(instance, copies)
        logger.info(f"Instantiated template {template.id} as task {instance.id}")
        return instance, self.task_modifier_repository.get_for_task(instance.id)

    def delete_task(self, user_id: str, task_id: str) -> None:
        """Delete a task, refusing templates that still have instances.

        Raises:
            TemplateInUseError: If other tasks were instantiated from this one
            TaskNotFoundError: If the task does not exist for this user
        """
        usage_count = self.task_repository.count_instances(user_id, task_id)
        if usage_count > 0:
            logger.info(f"Refusing to delete template {task_id}: {usage_count} instances")
            raise TemplateInUseError(task_id, usage_count)

        if not self.task_repository.delete(user_id, task_id):
            raise TaskNotFoundError(f"Task {task_id} not found")
