# tasky/tasks/service.py
import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from tasky.core.errors import NotFoundError
from tasky.users.models import User
from .models import Task
from .schemas import TaskCreate, TaskUpdate, TaskFilters, UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


class TaskService:
    """
    CRUD над задачами одного пользователя.

    Каждый запрос фильтруется по владельцу, поэтому чужая задача
    неотличима от несуществующей: в обоих случаях NotFoundError.
    """

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def _owned(self):
        return self.db.query(Task).filter(Task.user_id == self.user.id)

    def _commit(self, action: str, task: Optional[Task] = None) -> None:
        try:
            self.db.commit()
            if task is not None:
                self.db.refresh(task)
        except Exception as e:
            logger.error(f"Database commit failed during {action} for user {self.user.id}: {e}", exc_info=True)
            self.db.rollback()
            raise

    def list_tasks(self, filters: Optional[TaskFilters] = None) -> List[Task]:
        """Задачи пользователя, новые первыми; фильтры сравниваются на точное совпадение."""
        query = self._owned()
        if filters is not None:
            if filters.status is not None:
                query = query.filter(Task.status == filters.status.value)
            if filters.priority is not None:
                query = query.filter(Task.priority == filters.priority.value)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def get_task(self, task_id: str) -> Task:
        task = self._owned().filter(Task.id == task_id).first()
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create_task(self, data: TaskCreate) -> Task:
        task = Task(
            title=data.title,
            description=data.description,
            status=data.status.value,
            priority=data.priority.value,
            due_date=data.dueDate,
            user_id=self.user.id,
        )
        self.db.add(task)
        self._commit("create_task", task)
        logger.info(f"Task {task.id} created for user {self.user.id}")
        return task

    def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        """Применяет только присланные поля из разрешенного списка."""
        task = self.get_task(task_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            column = UPDATABLE_FIELDS[field]
            if isinstance(value, Enum):
                value = value.value
            setattr(task, column, value)

        self._commit(f"update_task:{task_id}", task)
        logger.info(f"Task {task_id} updated for user {self.user.id}: {sorted(changes)}")
        return task

    def delete_task(self, task_id: str) -> None:
        task = self.get_task(task_id)
        self.db.delete(task)
        self._commit(f"delete_task:{task_id}")
        logger.info(f"Task {task_id} deleted for user {self.user.id}")
