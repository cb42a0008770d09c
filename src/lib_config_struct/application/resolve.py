"""Application-layer resolution policy.

Purpose
-------
Walk field descriptors, pick each field's raw string from the highest layer
that has it (``env → dotenv → default``), coerce it, and write the result into
the target while tracking provenance. The module performs no I/O so it can be
driven by any environment and dotenv implementation.

Contents
    - ``resolve_fields``: public entry point driven by a simple loop.
    - ``pick_raw``: precedence rule for a single descriptor.
    - ``_coerce_field``: wraps coercion failures with the lookup key.

System Role
-----------
Receives descriptors from :mod:`lib_config_struct.domain.fields` and layer
data from :mod:`lib_config_struct.core`; returns the provenance consumed by
callers and the CLI.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..domain.errors import InvalidValue, MissingValue
from ..domain.fields import FieldDescriptor, SourceInfo
from ..observability import log_debug, log_error
from .coerce import coerce
from .ports import Environment


def resolve_fields(
    target: Any,
    descriptors: Iterable[FieldDescriptor],
    *,
    environment: Environment,
    dotenv: Mapping[str, str],
    dotenv_path: str | None,
) -> dict[str, SourceInfo]:
    """Populate *target* from the layers and return provenance per field name.

    Why
    ----
    Keeping precedence and coercion in one loop guarantees the first failing
    field stops the run and earlier fields stay written.

    Parameters
    ----------
    target:
        Mutable object receiving attribute assignments.
    descriptors:
        Keyed fields in declaration order.
    environment:
        Highest-precedence layer.
    dotenv:
        Raw Value Mapping parsed from the dotenv file.
    dotenv_path:
        Path recorded in provenance for values taken from *dotenv*.

    Returns
    -------
    dict[str, SourceInfo]
        Provenance keyed by attribute name.

    Raises
    ------
    MissingValue
        A field has no value in any layer.
    InvalidValue
        A raw string does not fit the field's declared type.

    Examples
    --------
    >>> from types import SimpleNamespace
    >>> from lib_config_struct.adapters.env.default import ProcessEnvironment
    >>> from lib_config_struct.domain.fields import FieldKind
    >>> target = SimpleNamespace()
    >>> meta = resolve_fields(
    ...     target,
    ...     [
    ...         FieldDescriptor("port", "PORT", "8080", FieldKind.INTEGER),
    ...         FieldDescriptor("debug", "DEBUG", None, FieldKind.BOOLEAN),
    ...     ],
    ...     environment=ProcessEnvironment(environ={"DEBUG": "true"}),
    ...     dotenv={"PORT": "5432"},
    ...     dotenv_path=".env",
    ... )
    >>> target.port, target.debug
    (5432, True)
    >>> meta["port"]["layer"], meta["debug"]["layer"]
    ('dotenv', 'env')
    """

    meta: dict[str, SourceInfo] = {}
    for descriptor in descriptors:
        raw, layer = pick_raw(descriptor, environment=environment, dotenv=dotenv)
        value = _coerce_field(descriptor, raw, layer)
        setattr(target, descriptor.name, value)
        path = dotenv_path if layer == "dotenv" else None
        meta[descriptor.name] = {"layer": layer, "path": path, "key": descriptor.key}
        log_debug("field_resolved", layer=layer, path=path, key=descriptor.key)
    return meta


def pick_raw(
    descriptor: FieldDescriptor,
    *,
    environment: Environment,
    dotenv: Mapping[str, str],
) -> tuple[str, str]:
    """Return ``(raw_value, layer)`` for *descriptor* following layer precedence.

    Examples
    --------
    >>> from lib_config_struct.adapters.env.default import ProcessEnvironment
    >>> from lib_config_struct.domain.fields import FieldKind
    >>> descriptor = FieldDescriptor("env", "ENV", "dev", FieldKind.STRING)
    >>> pick_raw(descriptor, environment=ProcessEnvironment(environ={}), dotenv={})
    ('dev', 'default')
    >>> pick_raw(descriptor, environment=ProcessEnvironment(environ={"ENV": ""}), dotenv={"ENV": "staging"})
    ('', 'env')
    """

    from_env = environment.lookup(descriptor.key)
    if from_env is not None:
        return from_env, "env"
    if descriptor.key in dotenv:
        return dotenv[descriptor.key], "dotenv"
    if descriptor.default is not None:
        return descriptor.default, "default"
    log_error("field_missing", layer="none", path=None, key=descriptor.key)
    raise MissingValue(descriptor.key)


def _coerce_field(descriptor: FieldDescriptor, raw: str, layer: str) -> object:
    """Coerce *raw* for *descriptor*, naming the key and type on failure."""

    try:
        return coerce(raw, descriptor.kind)
    except ValueError as exc:
        log_error("field_invalid", layer=layer, path=None, key=descriptor.key, type=descriptor.kind.type_name)
        raise InvalidValue(descriptor.key, raw, descriptor.kind.type_name) from exc
