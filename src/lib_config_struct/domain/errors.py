"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the dotenv adapter, the resolver, and
consuming applications. The hierarchy lives in the domain layer so adapters and
the application layer can depend on it without depending on each other.

Contents
--------
* :class:`ConfigError` – umbrella base class for every library failure.
* :class:`SourceUnreadable` – the source file exists but cannot be read.
* :class:`InvalidFormat` – the source file is not valid dotenv text.
* :class:`MissingValue` – no environment, file, or default value for a key.
* :class:`InvalidValue` – a resolved string does not fit the declared type.
* :class:`UnsupportedField` – a field declaration cannot be turned into a
  descriptor.

System Role
-----------
Every error is terminal to a single resolution call. Callers that treat any
configuration problem as fatal to startup catch :class:`ConfigError`.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_config_struct``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class SourceUnreadable(ConfigError):
    """Raised when the dotenv file exists but reading it fails.

    The originating :class:`OSError` is chained as ``__cause__``.
    """


class InvalidFormat(ConfigError):
    """Raised when dotenv content cannot be parsed into key/value pairs.

    Typical Sources
    ---------------
    Lines without ``=``, empty keys, unterminated quoted values, and files that
    are not valid UTF-8.
    """


class MissingValue(ConfigError):
    """Raised when a required field has no value in any layer.

    Examples
    --------
    >>> str(MissingValue("PORT"))
    'missing env var PORT (no default provided)'
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"missing env var {key} (no default provided)")
        self.key = key


class InvalidValue(ConfigError):
    """Raised when a resolved raw string cannot be coerced into its field type.

    Examples
    --------
    >>> error = InvalidValue("PORT", "hello", "int")
    >>> str(error)
    'cannot parse hello as int (env var PORT)'
    >>> error.raw, error.type_name
    ('hello', 'int')
    """

    def __init__(self, key: str, raw: str, type_name: str) -> None:
        super().__init__(f"cannot parse {raw} as {type_name} (env var {key})")
        self.key = key
        self.raw = raw
        self.type_name = type_name


class UnsupportedField(ConfigError):
    """Raised when a keyed field declares a type or default the library cannot handle."""
