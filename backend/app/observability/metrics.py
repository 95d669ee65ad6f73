"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from app.observability.client import get_opik_client

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log a metric to Opik if it is enabled."""
    client = get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update({key: val for key, val in metadata.items() if val is not None})

    try:
        client.trace(name=f"metric:{name}", metadata=payload)
    except Exception as exc:  # pragma: no cover - third-party failure
        logger.debug("Unable to record metric %s: %s", name, exc)


@contextmanager
def timed(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """Record ``<name>.latency_ms`` for the wrapped block, successful or not."""
    start = perf_counter()
    try:
        yield
    finally:
        log_metric(f"{name}.latency_ms", (perf_counter() - start) * 1000, metadata=metadata)
