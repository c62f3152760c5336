# tasky/tasks/schemas.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import TaskStatus, TaskPriority, TITLE_MAX_LENGTH


def _clean_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title is required")
    if len(v) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return v


def _blank_to_none(v: Any) -> Any:
    # Форма на фронте присылает '' для пустых полей
    if isinstance(v, str) and not v.strip():
        return None
    return v


class TaskCreate(BaseModel):
    # Поле владельца не принимаем: его задает сервер
    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="Task title, 1-100 characters")
    description: Optional[str] = Field(None, description="Optional free-text description")
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    dueDate: Optional[datetime] = Field(None, description="Optional due date in ISO 8601 format")

    @field_validator('title')
    @classmethod
    def title_length(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator('description', 'dueDate', mode='before')
    @classmethod
    def empty_is_none(cls, v):
        return _blank_to_none(v)


class TaskUpdate(BaseModel):
    """Разрешенные для изменения поля; все остальные ключи запроса игнорируются."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    dueDate: Optional[datetime] = None

    @field_validator('title', 'status', 'priority', mode='before')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator('title')
    @classmethod
    def title_length(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator('description', 'dueDate', mode='before')
    @classmethod
    def empty_is_none(cls, v):
        return _blank_to_none(v)


# Имя поля в API -> колонка модели
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
}


class TaskFilters(BaseModel):
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None

    @field_validator('status', 'priority', mode='before')
    @classmethod
    def empty_means_any(cls, v: Any) -> Any:
        # ?status= из формы фильтра означает "без фильтра"
        return _blank_to_none(v)


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    dueDate: Optional[datetime] = Field(None, validation_alias="due_date")
    user: str = Field(validation_alias="user_id")
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class TaskEnvelope(BaseModel):
    message: str
    task: TaskOut


class TaskMessage(BaseModel):
    message: str
