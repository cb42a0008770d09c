"""CLI adapter for ``lib_config_struct`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check what a service would see at startup without writing
Python: dump the parsed ``.env`` file, or resolve an ad-hoc list of fields
against the current environment and that file.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_parse` – prints the Raw Value Mapping of a dotenv file as JSON.
* :func:`cli_resolve` – resolves ``KEY:TYPE[=DEFAULT]`` fields and prints JSON
  (optionally with provenance).
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root
(:func:`lib_config_struct.core.resolve` / :func:`read_dotenv`) and never
reaches into adapters directly. ``lib_cli_exit_tools`` centralises exit codes
and error printing.
"""

from __future__ import annotations

import json
import sys
from dataclasses import make_dataclass
from datetime import timedelta
from importlib import metadata
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import read_dotenv, resolve, setting

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

FIELD_TYPES: Final[dict[str, type]] = {
    "str": str,
    "int": int,
    "bool": bool,
    "duration": timedelta,
}


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is unavailable."""

    try:
        return metadata.version("lib_config_struct")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Typed settings from environment, .env file, and defaults",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_struct",
    message="lib_config_struct version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_struct")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_struct (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_struct')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("parse", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("dotenv", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_parse(dotenv: Path, indent: Optional[int]) -> None:
    """Print the key/value pairs of DOTENV as JSON (``{}`` if it does not exist)."""

    click.echo(json.dumps(read_dotenv(dotenv), indent=indent, sort_keys=True))


@cli.command("resolve", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("dotenv", type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--field",
    "fields",
    multiple=True,
    required=True,
    metavar="KEY:TYPE[=DEFAULT]",
    help="Field to resolve; TYPE is one of str, int, bool, duration (repeatable)",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
@click.option(
    "--provenance/--no-provenance",
    default=False,
    help="Include the layer that supplied each key in the output",
)
def cli_resolve(dotenv: Path, fields: Sequence[str], indent: Optional[int], provenance: bool) -> None:
    """Resolve the given fields against the environment, DOTENV, and defaults.

    Durations are printed as seconds.

    \f
    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(
    ...     cli, ["resolve", "missing.env", "--field", "PORT:int=8080"], env={"PORT": None}
    ... )
    >>> result.output.strip()
    '{"PORT": 8080}'
    """

    specs = [_parse_field_spec(raw) for raw in fields]
    settings_cls = make_dataclass(
        "CliSettings",
        [(f"field_{index}", kind, setting(key, default=default)) for index, (key, kind, default) in enumerate(specs)],
    )
    settings = settings_cls()
    meta = resolve(settings, dotenv)

    config = {key: getattr(settings, f"field_{index}") for index, (key, _, _) in enumerate(specs)}
    if provenance:
        by_key = {key: meta[f"field_{index}"] for index, (key, _, _) in enumerate(specs)}
        payload: Any = {"config": config, "provenance": by_key}
    else:
        payload = config
    click.echo(json.dumps(payload, indent=indent, default=_json_default))


def _parse_field_spec(raw: str) -> tuple[str, type, Optional[str]]:
    """Split ``KEY:TYPE[=DEFAULT]`` into its parts.

    Examples
    --------
    >>> _parse_field_spec("TIMEOUT:duration=5s")
    ('TIMEOUT', <class 'datetime.timedelta'>, '5s')
    >>> _parse_field_spec("NAME:str=")
    ('NAME', <class 'str'>, '')
    """

    declaration, has_default, default = raw.partition("=")
    key, _, type_name = declaration.partition(":")
    kind = FIELD_TYPES.get(type_name.strip().lower())
    if not key.strip() or kind is None:
        raise click.BadParameter(
            f"{raw!r} is not KEY:TYPE[=DEFAULT] with TYPE one of: {', '.join(FIELD_TYPES)}",
            param_hint="--field",
        )
    return key.strip(), kind, default if has_default else None


def _json_default(value: object) -> object:
    """Serialise durations as float seconds."""

    if isinstance(value, timedelta):
        return value.total_seconds()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_struct",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
