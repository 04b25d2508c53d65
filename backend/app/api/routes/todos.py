"""Todo CRUD routes."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.schemas.todo import TodoCreateRequest, TodoMutationResponse, TodoPayload, TodoUpdateRequest
from app.db.deps import get_db
from app.db.models.todo import Todo
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.todo_service import (
    InvalidParentError,
    TodoNotFoundError,
    TodoOwnershipError,
    apply_todo_changes,
    create_todo,
    delete_todo_tree,
    get_owned_todo,
    list_user_todos,
)

router = APIRouter(prefix="/api")

# Wire name -> ORM attribute for fields a client may set.
WRITABLE_FIELDS = {
    "time": "time",
    "title": "title",
    "description": "description",
    "location": "location",
    "progress": "progress",
    "deadline": "deadline",
    "parentTodoId": "parent_todo_id",
    "status": "status",
    "date": "date",
    "estimatedDuration": "estimated_duration",
    "memo": "memo",
}


@router.get("/todos", response_model=List[TodoPayload], tags=["todos"])
def list_todos(
    http_request: Request,
    user_id: UUID = Query(..., description="User owning the todos"),
    db: Session = Depends(get_db),
) -> List[TodoPayload]:
    """List a user's todos ordered by scheduled date and time."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("todo.list", metadata={"route": "/api/todos"}, user_id=str(user_id), request_id=request_id):
        todos = list_user_todos(db, user_id)
    log_metric("todo.list.count", len(todos), metadata={"user_id": str(user_id)})
    return [_serialize_todo(todo) for todo in todos]


@router.post("/todos", response_model=TodoMutationResponse, status_code=status.HTTP_201_CREATED, tags=["todos"])
def create_todo_endpoint(
    payload: TodoCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TodoMutationResponse:
    request_id = getattr(http_request.state, "request_id", None)
    fields = _to_columns(payload.model_dump(exclude_unset=True))
    fields["is_from_calendar"] = payload.isFromCalendar
    metadata: Dict[str, Any] = {"source": "ai_subtask" if payload.parentTodoId else "manual"}
    if payload.priority:
        metadata["priority"] = payload.priority
    if payload.order is not None:
        metadata["order"] = payload.order

    try:
        with trace(
            "todo.create",
            metadata={"route": "/api/todos", "todo_id": payload.id, "is_subtask": bool(payload.parentTodoId)},
            user_id=str(payload.user_id),
            request_id=request_id,
        ):
            with _translate_lookup_errors():
                todo = create_todo(db, payload.user_id, fields, todo_id=payload.id, metadata=metadata)
            db.commit()
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Todo id already exists") from exc

    log_metric("todo.create.success", 1, metadata={"user_id": str(payload.user_id)})
    return TodoMutationResponse(id=todo.id, message="Todo created successfully", request_id=request_id or "")


@router.put("/todos/{todo_id}", response_model=TodoMutationResponse, tags=["todos"])
def update_todo(
    todo_id: str,
    payload: TodoUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TodoMutationResponse:
    """Apply a partial update; only fields present in the body change."""
    request_id = getattr(http_request.state, "request_id", None)
    changes = _to_columns(payload.model_dump(exclude_unset=True))
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")
    if "title" in changes and not changes["title"]:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Title cannot be empty")

    with _translate_lookup_errors():
        todo = get_owned_todo(db, todo_id, payload.user_id)
    try:
        with trace(
            "todo.update",
            metadata={"route": f"/api/todos/{todo_id}", "fields": sorted(changes)},
            user_id=str(payload.user_id),
            request_id=request_id,
        ):
            with _translate_lookup_errors():
                apply_todo_changes(db, todo, changes)
            db.commit()
    except Exception:
        db.rollback()
        raise

    log_metric("todo.update.fields", len(changes), metadata={"todo_id": todo_id})
    return TodoMutationResponse(id=todo_id, message="Todo updated successfully", request_id=request_id or "")


@router.delete("/todos/{todo_id}", response_model=TodoMutationResponse, tags=["todos"])
def delete_todo(
    todo_id: str,
    http_request: Request,
    user_id: UUID = Query(...),
    db: Session = Depends(get_db),
) -> TodoMutationResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with _translate_lookup_errors():
        todo = get_owned_todo(db, todo_id, user_id)
    try:
        with trace("todo.delete", metadata={"todo_id": todo_id}, user_id=str(user_id), request_id=request_id):
            removed = delete_todo_tree(db, todo)
            db.commit()
    except Exception:
        db.rollback()
        raise

    log_metric("todo.delete.subtasks", removed, metadata={"user_id": str(user_id)})
    return TodoMutationResponse(id=todo_id, message="Todo deleted successfully", request_id=request_id or "")


@contextmanager
def _translate_lookup_errors() -> Iterator[None]:
    """Map service lookup failures onto 404/403/422 responses."""
    try:
        yield
    except TodoNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found") from exc
    except TodoOwnershipError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Todo does not belong to user") from exc
    except InvalidParentError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


def _to_columns(body: Dict[str, Any]) -> Dict[str, Any]:
    return {WRITABLE_FIELDS[key]: value for key, value in body.items() if key in WRITABLE_FIELDS}


def _serialize_todo(todo: Todo) -> TodoPayload:
    metadata = todo.metadata_json or {}
    return TodoPayload(
        id=todo.id,
        time=todo.time,
        title=todo.title,
        description=todo.description,
        location=todo.location,
        isFromCalendar=bool(todo.is_from_calendar),
        progress=todo.progress or 0,
        deadline=todo.deadline,
        parentTodoId=todo.parent_todo_id,
        status=todo.status or "active",
        date=todo.date,
        estimatedDuration=todo.estimated_duration,
        memo=todo.memo,
        priority=metadata.get("priority"),
        order=metadata.get("order"),
        created_at=todo.created_at,
        updated_at=todo.updated_at,
    )
