# tasky/tasks/router.py

from fastapi import APIRouter, Depends, status, Path, Query, HTTPException
from typing import List, Optional
import logging
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from . import schemas
from .service import TaskService
from tasky.core.dependencies import get_db, get_current_user
from tasky.core.errors import ServerError, ValidationError, field_errors
from tasky.users.models import User

# Инициализация роутера и логгера
router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
)
logger = logging.getLogger(__name__)


# Сервис задач, привязанный к текущему пользователю
def get_task_service(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskService:
    return TaskService(db, current_user)


@router.get(
    "",
    response_model=List[schemas.TaskOut],
    summary="List the caller's tasks"
)
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status", description="Exact status match; empty means any"),
    priority: Optional[str] = Query(None, description="Exact priority match; empty means any"),
    task_service: TaskService = Depends(get_task_service),
):
    """Returns the authenticated user's tasks, newest first."""
    try:
        filters = schemas.TaskFilters(status=status_filter, priority=priority)
    except PydanticValidationError as e:
        raise ValidationError(errors=field_errors(e.errors()))

    try:
        return task_service.list_tasks(filters)
    except Exception as e:
        logger.error(f"Unexpected error listing tasks for {task_service.user.id}: {e}", exc_info=True)
        raise ServerError()


@router.get(
    "/{task_id}",
    response_model=schemas.TaskOut,
    summary="Get a single task"
)
def get_task(
    task_id: str = Path(..., description="The ID of the task"),
    task_service: TaskService = Depends(get_task_service),
):
    try:
        return task_service.get_task(task_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error getting task {task_id} for {task_service.user.id}: {e}", exc_info=True)
        raise ServerError()


@router.post(
    "",
    response_model=schemas.TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task"
)
def create_task(
    task_data: schemas.TaskCreate,
    task_service: TaskService = Depends(get_task_service),
):
    """Creates a task owned by the authenticated user."""
    logger.info(f"Request to create task for user {task_service.user.id}")
    try:
        task = task_service.create_task(task_data)
        return schemas.TaskEnvelope(message="Task created successfully", task=schemas.TaskOut.model_validate(task))
    except Exception as e:
        logger.error(f"Unexpected error creating task for {task_service.user.id}: {e}", exc_info=True)
        raise ServerError()


@router.put(
    "/{task_id}",
    response_model=schemas.TaskEnvelope,
    summary="Update an existing task"
)
def update_task(
    task_id: str = Path(..., description="The ID of the task to update"),
    task_data: schemas.TaskUpdate = ...,
    task_service: TaskService = Depends(get_task_service),
):
    """Applies only the fields present in the request body."""
    logger.info(f"Request to update task {task_id} for user {task_service.user.id}")
    try:
        task = task_service.update_task(task_id, task_data)
        return schemas.TaskEnvelope(message="Task updated successfully", task=schemas.TaskOut.model_validate(task))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error updating task {task_id} for {task_service.user.id}: {e}", exc_info=True)
        raise ServerError()


@router.delete(
    "/{task_id}",
    response_model=schemas.TaskMessage,
    summary="Delete a task"
)
def delete_task(
    task_id: str = Path(..., description="The ID of the task to delete"),
    task_service: TaskService = Depends(get_task_service),
):
    logger.info(f"Request to delete task {task_id} for user {task_service.user.id}")
    try:
        task_service.delete_task(task_id)
        return schemas.TaskMessage(message="Task deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error deleting task {task_id} for {task_service.user.id}: {e}", exc_info=True)
        raise ServerError()
