"""To-do items that pay out XP when ticked off."""

from __future__ import annotations

import logging
from datetime import datetime

from ..errors import NotFoundError, ValidationError
from ..records import Todo, new_id
from ..storage.base import Clock, Storage
from .xp import XPEngine

logger = logging.getLogger(__name__)


class TodoList:
    """CRUD for todos.  Completing one awards its XP.

    Un-completing a todo does not take the XP back, and completing it
    again pays out again.
    """

    def __init__(
        self, storage: Storage, xp_engine: XPEngine, *, clock: Clock = datetime.now,
    ) -> None:
        self._storage = storage
        self._xp = xp_engine
        self._clock = clock

    def _get(self, todo_id: str) -> Todo:
        todo = self._storage.get_todo(todo_id)
        if todo is None:
            raise NotFoundError("Todo", todo_id)
        return todo

    def create_todo(self, user_id: str, title: str, xp_value: int) -> Todo:
        if not title or not title.strip():
            raise ValidationError("title cannot be blank")
        if xp_value < 0:
            raise ValidationError("xp_value cannot be negative", {"xp_value": xp_value})

        todo = Todo(
            id=new_id(),
            user_id=user_id,
            title=title.strip(),
            xp_value=xp_value,
            created_at=self._clock(),
        )
        self._storage.create_todo(todo)
        return todo

    def todos(self, user_id: str) -> list[Todo]:
        return self._storage.list_todos(user_id)

    def update_todo(
        self,
        todo_id: str,
        *,
        title: str | None = None,
        completed: bool | None = None,
    ) -> Todo:
        user_id = self._get(todo_id).user_id
        with self._storage.atomic(user_id):
            todo = self._get(todo_id)
            if title is not None:
                if not title.strip():
                    raise ValidationError("title cannot be blank")
                todo.title = title.strip()

            newly_completed = bool(completed) and not todo.completed
            if completed is not None:
                todo.completed = completed
                if not completed:
                    todo.completed_at = None
            if newly_completed:
                todo.completed_at = self._clock()

            self._storage.update_todo(todo)
            if newly_completed and todo.xp_value > 0:
                self._xp.award(user_id, todo.xp_value, reason=f"Todo: {todo.title}")

        if newly_completed:
            logger.debug("%s completed todo %s", user_id, todo.id)
        return todo

    def delete_todo(self, todo_id: str) -> None:
        if not self._storage.delete_todo(todo_id):
            raise NotFoundError("Todo", todo_id)
