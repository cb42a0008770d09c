"""Structured logging helpers for resolution diagnostics.

Purpose
    Record which layer supplied each field, and why a resolution failed,
    without ever writing configuration values to the log (they are often
    secrets).

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the package logger (silent until the host
      application attaches handlers).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit entries whose
      structured fields travel in ``record.context``.
    - ``make_event``: builds the ``layer``/``path`` payload shared by events.

System Integration
    The dotenv adapter, the resolver, and the composition root log through
    these helpers; the domain layer stays free of logging.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_struct_trace_id", default=None)
"""Trace identifier attached to every entry emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_config_struct")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the ``lib_config_struct`` logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind *trace_id* for subsequent log entries; ``None`` clears the binding.

    Examples
    --------
    >>> bind_trace_id('startup-1')
    >>> TRACE_ID.get()
    'startup-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a debug event; configuration values never appear in *fields*."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit an info event tagged with the current trace id."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit an error event describing why a source or field was rejected."""

    _emit(logging.ERROR, message, fields)


def make_event(
    layer: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the keyword payload for a resolution event.

    Inputs
        layer: ``"env"``, ``"dotenv"``, ``"default"``, or a summary label.
        path: Dotenv file path, if the event concerns one.
        payload: Optional extra fields; they never replace ``layer``/``path``.

    Examples
    --------
    >>> make_event('dotenv', '.env', {'keys': 2})
    {'layer': 'dotenv', 'path': '.env', 'keys': 2}
    >>> make_event('final', None, {'layer': 'ignored'})
    {'layer': 'final', 'path': None}
    """

    extras = {key: value for key, value in (payload or {}).items() if key not in ("layer", "path")}
    return {"layer": layer, "path": path, **extras}


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send *message* through the package logger with the trace id in ``context``."""

    if not _LOGGER.isEnabledFor(level):
        return
    context = {"trace_id": TRACE_ID.get(), **fields}
    _LOGGER.log(level, message, extra={"context": context})
