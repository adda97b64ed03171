"""FastAPI web application for doBag."""

import logging
from datetime import datetime
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dobag.errors import (
    DoBagError,
    InvalidModifierValueError,
    ModifierNotFoundError,
    TaskNotFoundError,
    TemplateNotFoundError,
)
from dobag.models.task import Task
from dobag.models.modifier import TaskModifier
from dobag.models.user import User
from dobag.modifiers import ModifierRegistry, build_default_registry
from dobag.database.database import get_db, init_db
from dobag.database.repository import TaskRepository
from dobag.database.modifier_repository import ModifierRepository, TaskModifierRepository
from dobag.auth.dependencies import get_current_user
from dobag.engine.scheduler import SchedulerService
from dobag.engine.lifecycle import TaskLifecycleService
from dobag.engine.task_modifiers import TaskModifierService, ModifierInput
from dobag.api.task_models import (
    TaskCreateRequest,
    TaskUpdateRequest,
    TaskPositionRequest,
    TaskModifierValueRequest,
    TaskListItem,
    TaskResponse,
    TaskListResponse,
    ModifierListResponse,
    ModifierTypesResponse,
    TaskModifierListResponse,
    BatchModifierResponse,
)

logger = logging.getLogger(__name__)

# Built once per process; handed to services through get_modifier_registry
modifier_registry = build_default_registry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Registered modifier kinds: {', '.join(modifier_registry.get_available_types())}")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="doBag API",
    description="Personal task bag with pluggable task modifiers",
    version="0.1.0",
    lifespan=lifespan,
)


# Error mapping
_ERROR_STATUS_CODES = (
    (TaskNotFoundError, status.HTTP_404_NOT_FOUND),
    (TemplateNotFoundError, status.HTTP_404_NOT_FOUND),
    (ModifierNotFoundError, status.HTTP_404_NOT_FOUND),
)


@app.exception_handler(DoBagError)
async def handle_dobag_error(request: Request, exc: DoBagError):
    """Caller-input and not-found errors: specific reason for the client."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_class, code in _ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            status_code = code
            break
    content = {"detail": str(exc)}
    if isinstance(exc, InvalidModifierValueError):
        content["expected_format"] = exc.expected_format
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError):
    """Store failures: opaque response, details only in the log."""
    logger.error(f"Store failure on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong"},
    )


# Service dependencies
def get_modifier_registry() -> ModifierRegistry:
    return modifier_registry


def get_scheduler(
    db: Session = Depends(get_db),
    registry: ModifierRegistry = Depends(get_modifier_registry),
) -> SchedulerService:
    return SchedulerService(registry, TaskRepository(db), TaskModifierRepository(db))


def get_lifecycle_service(
    db: Session = Depends(get_db),
    scheduler: SchedulerService = Depends(get_scheduler),
) -> TaskLifecycleService:
    return TaskLifecycleService(TaskRepository(db), TaskModifierRepository(db), scheduler)


def get_task_modifier_service(
    db: Session = Depends(get_db),
    registry: ModifierRegistry = Depends(get_modifier_registry),
) -> TaskModifierService:
    return TaskModifierService(registry, ModifierRepository(db), TaskModifierRepository(db))


def _get_owned_task(db: Session, user: User, task_id: str) -> Task:
    task = TaskRepository(db).get(user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Tasks
@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    templates: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List tasks; `templates=true` for templates only, `templates=false` for live tasks only."""
    repository = TaskRepository(db)
    tasks = repository.get_all(current_user.id, templates=templates)
    usage_counts = repository.get_usage_counts(current_user.id)
    items = [
        TaskListItem(
            **task.model_dump(),
            usage_count=usage_counts.get(task.id, 0) if task.is_template else None,
        )
        for task in tasks
    ]
    return TaskListResponse(tasks=items, count=len(items))


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
    modifier_service: TaskModifierService = Depends(get_task_modifier_service),
):
    """Create a task (or template) with its modifiers. Nothing is written if any modifier is rejected."""
    modifier_values = modifier_service.prepare(request.modifiers)
    task, modifiers = lifecycle.create_task(
        current_user.id, request.text, request.status, request.is_template, modifier_values
    )
    return TaskResponse(task=task, modifiers=modifiers)


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a task with its modifier values."""
    task = _get_owned_task(db, current_user, task_id)
    return TaskResponse(task=task, modifiers=TaskModifierRepository(db).get_for_task(task.id))


@app.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Update a task's text and/or status. A status change reschedules live tasks."""
    task = _get_owned_task(db, current_user, task_id)
    changes = request.model_dump(exclude_none=True)
    status_changed = "status" in changes and changes["status"] != task.status

    updated = TaskRepository(db).update(
        task.model_copy(update={**changes, "updated_at": datetime.utcnow()})
    )
    if status_changed:
        updated = lifecycle.reschedule(updated)
    return TaskResponse(task=updated, modifiers=TaskModifierRepository(db).get_for_task(updated.id))


@app.patch("/tasks/{task_id}/position", response_model=TaskResponse)
def move_task(
    task_id: str,
    request: TaskPositionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Set a task's position directly (drag and drop). Does not reschedule."""
    task = TaskRepository(db).update_position(current_user.id, task_id, request.position)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse(task=task)


@app.post("/tasks/{task_id}/instantiate", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def instantiate_template(
    task_id: str,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Create a live task from a template."""
    task, modifiers = lifecycle.instantiate_from_template(task_id, current_user.id)
    return TaskResponse(task=task, modifiers=modifiers)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Delete a task. Templates with instances cannot be deleted."""
    lifecycle.delete_task(current_user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Modifiers
@app.get("/modifiers", response_model=ModifierListResponse)
def list_modifiers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the modifier catalog."""
    modifiers = ModifierRepository(db).get_all()
    return ModifierListResponse(modifiers=modifiers, count=len(modifiers))


@app.get("/modifiers/types", response_model=ModifierTypesResponse)
def list_modifier_types(
    current_user: User = Depends(get_current_user),
    registry: ModifierRegistry = Depends(get_modifier_registry),
):
    """List registered modifier kinds."""
    types = registry.get_available_types()
    return ModifierTypesResponse(types=types, count=len(types))


@app.get("/tasks/{task_id}/modifiers", response_model=TaskModifierListResponse)
def list_task_modifiers(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List a task's modifier values."""
    task = _get_owned_task(db, current_user, task_id)
    modifiers = TaskModifierRepository(db).get_for_task(task.id)
    return TaskModifierListResponse(modifiers=modifiers, count=len(modifiers))


@app.post("/tasks/{task_id}/modifiers", response_model=TaskModifier, status_code=status.HTTP_201_CREATED)
def add_task_modifier(
    task_id: str,
    request: ModifierInput,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    modifier_service: TaskModifierService = Depends(get_task_modifier_service),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Attach a modifier value to a task."""
    task = _get_owned_task(db, current_user, task_id)
    task_modifier = modifier_service.attach(task, request)
    lifecycle.reschedule(task)
    return task_modifier


@app.patch("/tasks/{task_id}/modifiers/{modifier_id}", response_model=TaskModifier)
def update_task_modifier(
    task_id: str,
    modifier_id: str,
    request: TaskModifierValueRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    modifier_service: TaskModifierService = Depends(get_task_modifier_service),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Replace a task's value for a modifier."""
    task = _get_owned_task(db, current_user, task_id)
    task_modifier = modifier_service.update(task, modifier_id, request.value)
    lifecycle.reschedule(task)
    return task_modifier


@app.delete("/tasks/{task_id}/modifiers/{modifier_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_task_modifier(
    task_id: str,
    modifier_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    modifier_service: TaskModifierService = Depends(get_task_modifier_service),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Detach a modifier from a task."""
    task = _get_owned_task(db, current_user, task_id)
    modifier_service.detach(task, modifier_id)
    lifecycle.reschedule(task)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/tasks/{task_id}/modifiers/batch", response_model=BatchModifierResponse, status_code=207)
def apply_task_modifiers(
    task_id: str,
    request: List[ModifierInput],
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    modifier_service: TaskModifierService = Depends(get_task_modifier_service),
    lifecycle: TaskLifecycleService = Depends(get_lifecycle_service),
):
    """Apply several modifier values at once (insert or update each)."""
    task = _get_owned_task(db, current_user, task_id)
    batch = modifier_service.apply_batch(task, request)
    if batch.results:
        lifecycle.reschedule(task)
    return BatchModifierResponse(
        success=len(batch.results) > 0,
        results=batch.results,
        errors=batch.errors or None,
        total=len(request),
        successful=len(batch.results),
        failed=len(batch.errors),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
