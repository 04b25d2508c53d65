from app.db.base import Base
from app.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())

    assert {"users", "todos", "daily_summaries"}.issubset(table_names)


def test_todo_metadata_column_keeps_wire_name() -> None:
    todos = Base.metadata.tables["todos"]

    assert "metadata" in todos.columns
    assert {fk.column.table.name for fk in todos.foreign_keys} == {"users", "todos"}
