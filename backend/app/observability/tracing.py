"""Tracing utilities wrapping Opik."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from app.observability import client as opik_client

logger = logging.getLogger(__name__)


def get_opik_client():
    return opik_client.get_opik_client()


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional[Any]]:
    """
    Open an Opik trace for the enclosed block.

    Yields ``None`` when Opik is disabled so callers can guard ``update`` calls.
    Exceptions are recorded on the trace and re-raised.
    """
    client = get_opik_client()
    active = None

    if client:
        trace_metadata = {key: value for key, value in (metadata or {}).items() if value is not None}
        if user_id:
            trace_metadata.setdefault("user_id", str(user_id))
        if request_id:
            trace_metadata.setdefault("request_id", request_id)
        try:
            active = client.trace(name=name, metadata=trace_metadata or None)
        except Exception as exc:  # pragma: no cover - SDK failure
            logger.debug("Unable to start Opik trace %s: %s", name, exc)

    try:
        yield active
    except Exception as exc:
        if active is not None:
            _safe_call(active, "update", name, error_info={"message": str(exc), "type": type(exc).__name__})
        raise
    finally:
        if active is not None:
            _safe_call(active, "end", name)


def _safe_call(active: Any, method: str, name: str, **kwargs: Any) -> None:
    try:
        getattr(active, method)(**kwargs)
    except Exception:  # pragma: no cover - SDK failure
        logger.debug("Opik trace %s: %s() failed", name, method, exc_info=True)
