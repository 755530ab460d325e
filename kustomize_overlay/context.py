"""Utilities for tracing the steps of a build."""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


trace: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "trace", default=()
)


@contextmanager
def trace_context(name: str) -> Generator[None, None, None]:
    """Log entry, exit and elapsed time of a named step.

    Nested steps are rendered as a path of their parents so interleaved
    concurrent builds can be told apart in debug output.
    """
    stack = trace.get() + (name,)
    token = trace.set(stack)
    label = " > ".join(stack)
    start = perf_counter()
    _LOGGER.debug("[Trace] > %s", label)
    try:
        yield
    finally:
        trace.reset(token)
        _LOGGER.debug("[Trace] < %s (%0.2fs)", label, perf_counter() - start)
