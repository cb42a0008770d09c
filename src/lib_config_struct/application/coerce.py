"""Application-layer coercion policy.

Purpose
-------
Convert resolved raw strings into the native value for a
:class:`~lib_config_struct.domain.fields.FieldKind`. Only the narrow textual
forms are accepted: plain decimal integers, ``true``/``false`` style booleans,
and ``<number><unit>`` durations.

Contents
    - ``coerce``: dispatch on the field kind.
    - ``parse_int`` / ``parse_bool`` / ``parse_duration``: one parser per kind,
      each raising :class:`ValueError` on malformed input.

System Role
-----------
Called by :mod:`lib_config_struct.application.resolve`, which turns the
``ValueError`` into :class:`~lib_config_struct.domain.errors.InvalidValue`
with the lookup key attached.
"""

from __future__ import annotations

import re
from datetime import timedelta
from fractions import Fraction
from typing import Callable, Final

from ..domain.fields import FieldKind

_INTEGER: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_DURATION_COMPONENT: Final[re.Pattern[str]] = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")

_TRUE: Final[frozenset[str]] = frozenset({"1", "t", "true"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "f", "false"})
_INT64_MIN: Final[int] = -(2**63)
_INT64_MAX: Final[int] = 2**63 - 1

# Nanoseconds per unit.
_UNIT_NANOS: Final[dict[str, int]] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3_600 * 1_000_000_000,
}


def parse_int(raw: str) -> int:
    """Parse a base-10 signed 64-bit integer with no surrounding whitespace or separators.

    Examples
    --------
    >>> parse_int('5432'), parse_int('-7'), parse_int('+3')
    (5432, -7, 3)
    >>> parse_int('1_000')
    Traceback (most recent call last):
    ...
    ValueError: not a base-10 integer: '1_000'
    >>> parse_int('9223372036854775808')
    Traceback (most recent call last):
    ...
    ValueError: out of 64-bit range: '9223372036854775808'
    """

    if _INTEGER.fullmatch(raw) is None:
        raise ValueError(f"not a base-10 integer: {raw!r}")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"out of 64-bit range: {raw!r}")
    return value


def parse_bool(raw: str) -> bool:
    """Parse ``1``/``t``/``true`` and ``0``/``f``/``false`` case-insensitively.

    Examples
    --------
    >>> parse_bool('TRUE'), parse_bool('f'), parse_bool('1')
    (True, False, True)
    """

    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def parse_duration(raw: str) -> timedelta:
    """Parse a compound duration such as ``"3s"``, ``"1h30m"`` or ``"-1.5h"``.

    Values are rounded to whole microseconds, the resolution of
    :class:`datetime.timedelta`.

    Examples
    --------
    >>> parse_duration('45m')
    datetime.timedelta(seconds=2700)
    >>> parse_duration('1h30m') == timedelta(minutes=90)
    True
    >>> parse_duration('1.5ms')
    datetime.timedelta(microseconds=1500)
    >>> parse_duration('0')
    datetime.timedelta(0)
    """

    text = raw
    negative = text[:1] == "-"
    if text[:1] in ("+", "-"):
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"not a duration: {raw!r}")

    nanos = Fraction(0)
    position = 0
    while position < len(text):
        match = _DURATION_COMPONENT.match(text, position)
        if match is None:
            raise ValueError(f"not a duration: {raw!r}")
        number, unit = match.groups()
        nanos += Fraction(number) * _UNIT_NANOS[unit]
        position = match.end()

    micros = round(nanos / 1_000)
    try:
        return timedelta(microseconds=-micros if negative else micros)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {raw!r}") from exc


_PARSERS: Final[dict[FieldKind, Callable[[str], object]]] = {
    FieldKind.STRING: str,
    FieldKind.INTEGER: parse_int,
    FieldKind.BOOLEAN: parse_bool,
    FieldKind.DURATION: parse_duration,
}


def coerce(raw: str, kind: FieldKind) -> object:
    """Convert *raw* into the native value for *kind*; strings pass through verbatim.

    Examples
    --------
    >>> coerce('  padded ', FieldKind.STRING)
    '  padded '
    >>> coerce('23s', FieldKind.DURATION).total_seconds()
    23.0
    """

    return _PARSERS[kind](raw)
