from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_config_struct.adapters.env.default import ProcessEnvironment
from lib_config_struct.application.resolve import pick_raw, resolve_fields
from lib_config_struct.domain.errors import InvalidValue, MissingValue
from lib_config_struct.domain.fields import FieldDescriptor, FieldKind

PORT = FieldDescriptor("port", "PORT", None, FieldKind.INTEGER)
ENV = FieldDescriptor("env", "ENV", "dev", FieldKind.STRING)
TIMEOUT = FieldDescriptor("timeout", "TIMEOUT", "5s", FieldKind.DURATION)


def _resolve(descriptors, environ=None, dotenv=None):
    target = SimpleNamespace()
    meta = resolve_fields(
        target,
        descriptors,
        environment=ProcessEnvironment(environ=environ or {}),
        dotenv=dotenv or {},
        dotenv_path="app.env",
    )
    return target, meta


def test_precedence_env_then_dotenv_then_default() -> None:
    target, meta = _resolve(
        [PORT, ENV, TIMEOUT],
        environ={"TIMEOUT": "3s"},
        dotenv={"PORT": "5432", "TIMEOUT": "10s"},
    )
    assert target.port == 5432
    assert target.env == "dev"
    assert target.timeout == timedelta(seconds=3)
    assert meta == {
        "port": {"layer": "dotenv", "path": "app.env", "key": "PORT"},
        "env": {"layer": "default", "path": None, "key": "ENV"},
        "timeout": {"layer": "env", "path": None, "key": "TIMEOUT"},
    }


def test_empty_environment_value_still_wins() -> None:
    target, meta = _resolve([ENV], environ={"ENV": ""}, dotenv={"ENV": "staging"})
    assert target.env == ""
    assert meta["env"]["layer"] == "env"


def test_empty_default_is_a_value() -> None:
    descriptor = FieldDescriptor("name", "NAME", "", FieldKind.STRING)
    target, _ = _resolve([descriptor])
    assert target.name == ""


def test_missing_value_names_key() -> None:
    with pytest.raises(MissingValue) as excinfo:
        _resolve([ENV, PORT])
    assert str(excinfo.value) == "missing env var PORT (no default provided)"
    assert excinfo.value.key == "PORT"


def test_first_failure_stops_and_keeps_earlier_fields() -> None:
    target = SimpleNamespace()
    later = FieldDescriptor("later", "LATER", "x", FieldKind.STRING)
    with pytest.raises(InvalidValue):
        resolve_fields(
            target,
            [ENV, PORT, later],
            environment=ProcessEnvironment(environ={"PORT": "hello"}),
            dotenv={},
            dotenv_path=None,
        )
    assert target.env == "dev"
    assert not hasattr(target, "port")
    assert not hasattr(target, "later")


@pytest.mark.parametrize(
    ("kind", "type_name"),
    [(FieldKind.INTEGER, "int"), (FieldKind.BOOLEAN, "bool"), (FieldKind.DURATION, "datetime.timedelta")],
)
def test_invalid_value_names_raw_value_and_type(kind: FieldKind, type_name: str) -> None:
    descriptor = FieldDescriptor("value", "VALUE", None, kind)
    with pytest.raises(InvalidValue) as excinfo:
        _resolve([descriptor], environ={"VALUE": "hello"})
    assert f"cannot parse hello as {type_name}" in str(excinfo.value)
    assert excinfo.value.key == "VALUE"
    assert excinfo.value.raw == "hello"
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_invalid_default_is_reported_like_any_value() -> None:
    descriptor = FieldDescriptor("port", "PORT", "eighty", FieldKind.INTEGER)
    with pytest.raises(InvalidValue, match="cannot parse eighty as int"):
        _resolve([descriptor])


LAYER_VALUE = st.one_of(st.none(), st.text(max_size=5))


@given(env=LAYER_VALUE, dotenv=LAYER_VALUE, default=LAYER_VALUE)
def test_pick_raw_uses_highest_present_layer(env, dotenv, default) -> None:
    descriptor = FieldDescriptor("name", "NAME", default, FieldKind.STRING)
    environment = ProcessEnvironment(environ={} if env is None else {"NAME": env})
    mapping = {} if dotenv is None else {"NAME": dotenv}

    if env is None and dotenv is None and default is None:
        with pytest.raises(MissingValue):
            pick_raw(descriptor, environment=environment, dotenv=mapping)
        return

    raw, layer = pick_raw(descriptor, environment=environment, dotenv=mapping)
    if env is not None:
        assert (raw, layer) == (env, "env")
    elif dotenv is not None:
        assert (raw, layer) == (dotenv, "dotenv")
    else:
        assert (raw, layer) == (default, "default")
