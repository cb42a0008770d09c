from __future__ import annotations

from lib_config_struct.domain.errors import (
    ConfigError,
    InvalidFormat,
    InvalidValue,
    MissingValue,
    SourceUnreadable,
    UnsupportedField,
)


def test_error_hierarchy() -> None:
    for error_cls in (InvalidFormat, InvalidValue, MissingValue, SourceUnreadable, UnsupportedField):
        assert issubclass(error_cls, ConfigError)


def test_missing_value_message() -> None:
    error = MissingValue("PORT")
    assert str(error) == "missing env var PORT (no default provided)"
    assert error.key == "PORT"


def test_invalid_value_message_names_raw_and_type() -> None:
    error = InvalidValue("TIMEOUT", "hello", "datetime.timedelta")
    assert "cannot parse hello as datetime.timedelta" in str(error)
    assert "TIMEOUT" in str(error)
