"""Composition root for ``lib_config_struct``.

Purpose
-------
Provide the entry points that wire the dotenv parser, the environment adapter,
field descriptors, and the resolver into a single call.

Contents
--------
* :func:`resolve` – populate a dataclass instance in place and return
  provenance.
* :func:`load` – instantiate a dataclass and resolve it.
* :func:`read_dotenv` – the default dotenv parser as a plain function.

System Role
-----------
This module is the canonical place to change precedence wiring or swap
adapters. It emits the summary log events; adapters and the resolver emit the
per-file and per-field ones.
"""

from __future__ import annotations

import dataclasses
from os import PathLike
from pathlib import Path
from typing import Any, Mapping, TypeVar

from .adapters.dotenv.default import DefaultDotEnvParser
from .adapters.env.default import ProcessEnvironment
from .application.ports import DotEnvParser
from .application.resolve import resolve_fields
from .domain.errors import (
    ConfigError,
    InvalidFormat,
    InvalidValue,
    MissingValue,
    SourceUnreadable,
    UnsupportedField,
)
from .domain.fields import FieldDescriptor, FieldKind, SourceInfo, describe, setting
from .observability import bind_trace_id, log_debug, log_info, make_event

T = TypeVar("T")


def resolve(
    target: Any,
    path: str | PathLike[str],
    *,
    environ: Mapping[str, str] | None = None,
    parser: DotEnvParser | None = None,
) -> dict[str, SourceInfo]:
    """Populate the dataclass instance *target* from env, dotenv file, and defaults.

    Why
    ----
    Services read their settings once at startup; this call is the whole
    startup contract: every keyed field ends up set, or the first problem is
    raised.

    What
    ----
    Parses *path* (an absent file is an empty layer), builds descriptors from
    the dataclass metadata, then resolves each keyed field with precedence
    ``environment → dotenv → default``.

    Parameters
    ----------
    target:
        Non-frozen dataclass instance, mutated in place.
    path:
        Dotenv file, absolute or relative to the working directory.
    environ:
        Mapping used instead of :data:`os.environ`.
    parser:
        Alternative :class:`~lib_config_struct.application.ports.DotEnvParser`.

    Returns
    -------
    dict[str, SourceInfo]
        Provenance keyed by attribute name.

    Raises
    ------
    TypeError
        If *target* is a class, not a dataclass, or frozen.
    ConfigError
        :class:`SourceUnreadable`, :class:`InvalidFormat`,
        :class:`UnsupportedField`, :class:`MissingValue`, or
        :class:`InvalidValue`; fields resolved before the failure keep their
        values.

    Side Effects
    ------------
    Clears the active trace identifier and emits structured log events.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from tempfile import TemporaryDirectory
    >>> @dataclass
    ... class Settings:
    ...     env: str = setting("ENV", default="dev")
    ...     port: int = setting("PORT")
    ...     debug: bool = setting("DEBUG")
    >>> tmp = TemporaryDirectory()
    >>> dotenv = Path(tmp.name) / ".env"
    >>> _ = dotenv.write_text("PORT=3000\\nDEBUG=false\\n", encoding="utf-8")
    >>> settings = Settings()
    >>> meta = resolve(settings, dotenv, environ={"DEBUG": "true"})
    >>> settings.env, settings.port, settings.debug
    ('dev', 3000, True)
    >>> [meta[name]["layer"] for name in ("env", "port", "debug")]
    ['default', 'dotenv', 'env']
    >>> tmp.cleanup()
    """

    _ensure_writable_dataclass(target)
    bind_trace_id(None)

    descriptors = describe(target)
    source = str(Path(path))
    dotenv = (parser or DefaultDotEnvParser()).parse(source)
    log_debug("layer_loaded", **make_event("dotenv", source, {"keys": len(dotenv)}))

    meta = resolve_fields(
        target,
        descriptors,
        environment=ProcessEnvironment(environ=environ),
        dotenv=dotenv,
        dotenv_path=source,
    )
    log_info("configuration_resolved", **make_event("final", source, {"fields": len(meta)}))
    return meta


def load(cls: type[T], path: str | PathLike[str], *, environ: Mapping[str, str] | None = None) -> T:
    """Instantiate *cls* without arguments, resolve it, and return the instance.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Settings:
    ...     debug: bool = setting("DEBUG", default="false")
    >>> load(Settings, "does-not-exist.env", environ={"DEBUG": "TRUE"}).debug
    True
    """

    instance = cls()
    resolve(instance, path, environ=environ)
    return instance


def read_dotenv(path: str | PathLike[str]) -> dict[str, str]:
    """Return the Raw Value Mapping for *path* (``{}`` when the file is absent)."""

    return DefaultDotEnvParser().parse(path)


def _ensure_writable_dataclass(target: Any) -> None:
    """Reject classes, non-dataclasses, and frozen dataclasses before any work is done."""

    if isinstance(target, type) or not dataclasses.is_dataclass(target):
        raise TypeError(f"expected a dataclass instance, got {target!r}")
    params = getattr(type(target), "__dataclass_params__", None)
    if params is not None and params.frozen:
        raise TypeError(f"{type(target).__qualname__} is frozen and cannot be populated")


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
    "describe",
    "load",
    "read_dotenv",
    "resolve",
    "setting",
]
