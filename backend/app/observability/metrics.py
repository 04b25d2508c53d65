"""Lightweight metrics helpers."""
from __future__ import annotations

from typing import Any, Dict, Optional

from app.observability.tracing import trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``value`` as a short ``metric:<name>`` trace when Opik is enabled."""
    payload: Dict[str, Any] = dict(metadata or {})
    payload["value"] = value
    with trace(f"metric:{name}", metadata=payload):
        pass
