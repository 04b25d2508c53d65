"""Persistence helpers for todos and the users that own them."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import asc, nulls_last
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.todo import Todo
from app.db.models.user import User

logger = logging.getLogger(__name__)


class TodoNotFoundError(LookupError):
    pass


class TodoOwnershipError(PermissionError):
    pass


class InvalidParentError(ValueError):
    pass


def ensure_user(db: Session, user_id: UUID) -> User:
    """Return the user row, inserting a bare one the first time ``user_id`` is seen."""
    existing = db.get(User, user_id)
    if existing is not None:
        return existing

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent request created the same user between get and flush.
        db.rollback()
        existing = db.get(User, user_id)
        if existing is None:
            raise
        return existing
    logger.info("Created user %s on first todo write", user_id)
    return user


def get_owned_todo(db: Session, todo_id: str, user_id: UUID) -> Todo:
    todo = db.get(Todo, todo_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)
    if todo.user_id != user_id:
        raise TodoOwnershipError(todo_id)
    return todo


def list_user_todos(db: Session, user_id: UUID) -> List[Todo]:
    """Todos for ``user_id``, scheduled ones first by date and time."""
    return (
        db.query(Todo)
        .filter(Todo.user_id == user_id)
        .order_by(nulls_last(asc(Todo.date)), nulls_last(asc(Todo.time)), asc(Todo.created_at))
        .all()
    )


def create_todo(
    db: Session,
    user_id: UUID,
    fields: Dict[str, Any],
    *,
    todo_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Todo:
    """
    Insert a todo; the caller commits.

    A ``parent_todo_id`` must point at a todo of the same user. Client-supplied ids
    (scheduled subtasks arrive with their analysis ids) are stored verbatim.
    """
    parent_id = fields.get("parent_todo_id")
    if parent_id:
        get_owned_todo(db, parent_id, user_id)
    ensure_user(db, user_id)

    todo = Todo(id=todo_id or str(uuid4()), user_id=user_id, metadata_json=metadata or {}, **fields)
    if todo.progress is None:
        todo.progress = 0
    if todo.status is None:
        todo.status = "active"
    db.add(todo)
    return todo


def apply_todo_changes(db: Session, todo: Todo, changes: Dict[str, Any]) -> Todo:
    """Set ``changes`` on ``todo``; a new parent must be another todo of the same user."""
    parent_id = changes.get("parent_todo_id")
    if parent_id is not None:
        if parent_id == todo.id:
            raise InvalidParentError("A todo cannot be its own parent")
        get_owned_todo(db, parent_id, todo.user_id)
    for attribute, value in changes.items():
        setattr(todo, attribute, value)
    return todo


def delete_todo_tree(db: Session, todo: Todo) -> int:
    """Delete ``todo`` and its direct subtasks owned by the same user; returns how many subtasks went with it."""
    removed = (
        db.query(Todo)
        .filter(Todo.parent_todo_id == todo.id, Todo.user_id == todo.user_id)
        .delete(synchronize_session=False)
    )
    db.delete(todo)
    return removed
