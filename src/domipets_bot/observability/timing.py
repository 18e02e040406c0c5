"""Context manager for per-turn latency instrumentation."""

from __future__ import annotations

import contextlib
import time
from collections.abc import Generator

from domipets_bot.observability.logging import get_logger

logger = get_logger(__name__)


@contextlib.contextmanager
def timed(component: str, **fields: object) -> Generator[None, None, None]:
    """Measure and log elapsed time for a component.

    Usage:
        with timed("conversation_turn", state="MENU"):
            ...

    Extra keyword fields are attached to the structured entry.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "component_latency",
            extra={
                "component": component,
                "elapsed_ms": round(elapsed_ms, 2),
                **fields,
            },
        )
