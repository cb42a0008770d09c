"""Domain-level field descriptors.

Purpose
-------
Translate a dataclass declaration into the ephemeral descriptors the resolver
walks: which attribute to write, which lookup key to search for, which default
to fall back on, and which semantic type to coerce into. The module contains no
I/O and is rebuilt on every resolution call.

Contents
--------
* :data:`ENV_METADATA` / :data:`DEFAULT_METADATA` – metadata keys read from
  ``dataclasses.field(metadata=...)``.
* :class:`FieldKind` – the four supported semantic types.
* :class:`FieldDescriptor` – immutable per-field description.
* :class:`SourceInfo` – provenance record returned by the resolver.
* :func:`setting` – ``dataclasses.field`` factory that stores the metadata.
* :func:`describe` – build descriptors for every keyed field of a dataclass.

System Role
-----------
Consumed by :mod:`lib_config_struct.application.resolve`; the metadata keys
are the declarative field-to-source mapping callers attach to their
configuration classes.
"""

from __future__ import annotations

import dataclasses
import inspect
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from types import UnionType
from typing import Any, Final, TypedDict, Union, get_args, get_origin, get_type_hints

from .errors import UnsupportedField

ENV_METADATA: Final[str] = "env"
DEFAULT_METADATA: Final[str] = "default"


class FieldKind(Enum):
    """Semantic types a field may declare; the value is the name used in error messages."""

    STRING = "str"
    INTEGER = "int"
    BOOLEAN = "bool"
    DURATION = "datetime.timedelta"

    @property
    def type_name(self) -> str:
        return self.value


_KINDS_BY_TYPE: Final[dict[object, FieldKind]] = {
    str: FieldKind.STRING,
    int: FieldKind.INTEGER,
    bool: FieldKind.BOOLEAN,
    timedelta: FieldKind.DURATION,
}


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describe how one attribute of the target is resolved.

    Attributes
    ----------
    name:
        Attribute name on the target instance.
    key:
        Lookup key searched in the environment and the dotenv mapping.
    default:
        Fallback raw string, ``None`` when the field declares no default. An
        empty string is a present default.
    kind:
        Semantic type the raw string is coerced into.
    """

    name: str
    key: str
    default: str | None
    kind: FieldKind


class SourceInfo(TypedDict):
    """Describe which layer supplied a resolved field.

    Attributes
    ----------
    layer:
        ``"env"``, ``"dotenv"``, or ``"default"``.
    path:
        Dotenv file path for the ``dotenv`` layer, otherwise ``None``.
    key:
        Lookup key used for the field.
    """

    layer: str
    path: str | None
    key: str


def setting(key: str, *, default: str | None = None) -> Any:
    """Return a dataclass field bound to environment *key* with an optional *default*.

    The attribute itself starts out as ``None`` so the dataclass can be
    instantiated without arguments and populated later by
    :func:`lib_config_struct.resolve`.

    Examples
    --------
    >>> from dataclasses import dataclass, fields
    >>> @dataclass
    ... class Demo:
    ...     port: int = setting("PORT", default="8080")
    >>> dict(fields(Demo)[0].metadata)
    {'env': 'PORT', 'default': '8080'}
    >>> Demo().port is None
    True
    """

    return dataclasses.field(default=None, metadata={ENV_METADATA: key, DEFAULT_METADATA: default})


def describe(target: Any) -> tuple[FieldDescriptor, ...]:
    """Return descriptors for every keyed field of the dataclass *target*.

    Why
    ----
    Field metadata is inspected at call time so callers declare the mapping
    once, next to the attribute it populates.

    Parameters
    ----------
    target:
        Dataclass type or instance.

    Returns
    -------
    tuple[FieldDescriptor, ...]
        Descriptors in declaration order. Fields without a lookup key are
        skipped and never type-checked.

    Raises
    ------
    TypeError
        If *target* is not a dataclass.
    UnsupportedField
        If a keyed field's annotation is not ``str``/``int``/``bool``/
        ``timedelta`` (optionally wrapped in ``Optional``) or its default is not
        a string.

    Examples
    --------
    >>> from dataclasses import dataclass, field
    >>> @dataclass
    ... class Demo:
    ...     name: str = setting("NAME", default="demo")
    ...     internal: object = None
    ...     retries: int = field(default=0, metadata={"env": "RETRIES"})
    >>> [(d.key, d.default, d.kind.type_name) for d in describe(Demo)]
    [('NAME', 'demo', 'str'), ('RETRIES', None, 'int')]
    """

    cls = target if isinstance(target, type) else type(target)
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__qualname__} is not a dataclass")
    descriptors: list[FieldDescriptor] = []
    for item in dataclasses.fields(cls):
        key = item.metadata.get(ENV_METADATA)
        if not key:
            continue
        default = item.metadata.get(DEFAULT_METADATA)
        if default is not None and not isinstance(default, str):
            raise UnsupportedField(f"default for {key} must be a string, got {type(default).__name__}")
        kind = _field_kind(_keyed_annotation(cls, item), key)
        descriptors.append(FieldDescriptor(name=item.name, key=key, default=default, kind=kind))
    return tuple(descriptors)


def _keyed_annotation(cls: type, item: dataclasses.Field[Any]) -> Any:
    """Evaluate the annotation of the single field *item*.

    Only this field's annotation is evaluated, in the namespace of the class
    that declares it, so keyless siblings may reference names that exist only
    for type checkers.
    """

    if not isinstance(item.type, str):
        return item.type
    owner = next((base for base in cls.__mro__ if item.name in inspect.get_annotations(base)), cls)
    shell = type(owner.__name__, (), {"__annotations__": {item.name: item.type}, "__module__": owner.__module__})
    try:
        return get_type_hints(shell, localns=dict(vars(owner)))[item.name]
    except (NameError, TypeError) as exc:
        raise UnsupportedField(f"cannot evaluate annotation of {owner.__qualname__}.{item.name}: {exc}") from exc


def _field_kind(annotation: Any, key: str) -> FieldKind:
    """Map *annotation* to a :class:`FieldKind`.

    Examples
    --------
    >>> from typing import Optional
    >>> _field_kind(Optional[timedelta], "TIMEOUT")
    <FieldKind.DURATION: 'datetime.timedelta'>
    >>> _field_kind(bool | None, "DEBUG")
    <FieldKind.BOOLEAN: 'bool'>
    """

    kind = _KINDS_BY_TYPE.get(_unwrap_optional(annotation))
    if kind is None:
        raise UnsupportedField(f"unsupported type {annotation!r} for env var {key}")
    return kind


def _unwrap_optional(annotation: Any) -> Any:
    """Return ``T`` for ``Optional[T]`` / ``T | None``; other annotations unchanged."""

    if get_origin(annotation) in (Union, UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation
