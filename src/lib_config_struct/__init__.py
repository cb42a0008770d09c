"""Public package surface for ``lib_config_struct``.

Populate a dataclass from environment variables, an optional ``.env`` file,
and per-field defaults, in that order of precedence::

    @dataclass
    class Settings:
        port: int = setting("PORT", default="8080")

    settings = Settings()
    resolve(settings, ".env")
"""

from __future__ import annotations

from .core import (
    ConfigError,
    FieldDescriptor,
    FieldKind,
    InvalidFormat,
    InvalidValue,
    MissingValue,
    SourceInfo,
    SourceUnreadable,
    UnsupportedField,
    describe,
    load,
    read_dotenv,
    resolve,
    setting,
)
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConfigError",
    "FieldDescriptor",
    "FieldKind",
    "InvalidFormat",
    "InvalidValue",
    "MissingValue",
    "SourceInfo",
    "SourceUnreadable",
    "UnsupportedField",
    "bind_trace_id",
    "describe",
    "get_logger",
    "load",
    "read_dotenv",
    "resolve",
    "setting",
]
