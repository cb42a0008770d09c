"""`.env` adapter.

Purpose
-------
Implement the :class:`lib_config_struct.application.ports.DotEnvParser`
protocol: read one caller-named dotenv file into a flat ``key -> value``
mapping.

Contents
--------
* :class:`DefaultDotEnvParser` – entry point used by the composition root.
* Helper functions (`_parse_lines`, `_split_assignment`, `_read_value`, etc.)
  that perform line parsing and quote handling.

System Role
-----------
Feeds the ``dotenv`` layer of the resolver. A missing file is an empty layer;
an unreadable file is fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Sequence

from ...domain.errors import InvalidFormat, SourceUnreadable
from ...observability import log_debug, log_error

_QUOTES = frozenset({'"', "'"})
_EXPORT_PREFIX = "export "


class DefaultDotEnvParser:
    """Parse a dotenv file into a flat dictionary of strings."""

    def parse(self, path: str | Path) -> dict[str, str]:
        """Return the assignments found in *path*, or ``{}`` when it does not exist.

        Why
        ----
        The dotenv layer is optional: services run unchanged whether or not a
        developer keeps a local ``.env`` next to them.

        Parameters
        ----------
        path:
            File path, absolute or relative to the working directory.

        Returns
        -------
        dict[str, str]
            One entry per assignment; later lines win over earlier ones.

        Raises
        ------
        SourceUnreadable
            If the path exists but cannot be read.
        InvalidFormat
            If the content is not UTF-8 or contains malformed lines.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> path = Path(tmp.name) / '.env'
        >>> _ = path.write_text('# db\\nHOST=localhost\\nPASSWORD="s3cret"\\n', encoding='utf-8')
        >>> DefaultDotEnvParser().parse(path)
        {'HOST': 'localhost', 'PASSWORD': 's3cret'}
        >>> DefaultDotEnvParser().parse(Path(tmp.name) / 'missing.env')
        {}
        >>> tmp.cleanup()
        """

        file_path = Path(path)
        text = _read_text(file_path)
        if text is None:
            log_debug("dotenv_not_found", layer="dotenv", path=str(file_path))
            return {}
        data = _parse_lines(text.splitlines(), file_path)
        log_debug("dotenv_loaded", layer="dotenv", path=str(file_path), keys=sorted(data.keys()))
        return data


def _read_text(path: Path) -> str | None:
    """Read *path* as UTF-8, returning ``None`` when it does not exist."""

    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        return None
    except UnicodeDecodeError as exc:
        log_error("dotenv_unreadable", layer="dotenv", path=str(path), error=str(exc))
        raise InvalidFormat(f"{path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        log_error("dotenv_unreadable", layer="dotenv", path=str(path), error=str(exc))
        raise SourceUnreadable(f"Cannot read {path}: {exc}") from exc


def _parse_lines(lines: Sequence[str], path: Path) -> dict[str, str]:
    """Parse already split *lines* into a mapping.

    Examples
    --------
    >>> _parse_lines(['A=1', '  # note', '', "B='two words'", 'A=3'], Path('demo.env'))
    {'A': '3', 'B': 'two words'}
    >>> _parse_lines(['KEY="line one', 'line two"'], Path('demo.env'))
    {'KEY': 'line one\\nline two'}
    """

    result: dict[str, str] = {}
    cursor = iter(enumerate(lines, start=1))
    for line_number, line in cursor:
        stripped = line.lstrip()
        if not stripped or stripped.startswith("#"):
            continue
        key, raw_value = _split_assignment(stripped, line_number, path)
        result[key] = _read_value(key, raw_value, line_number, cursor, path)
    return result


def _split_assignment(line: str, line_number: int, path: Path) -> tuple[str, str]:
    """Split ``KEY=VALUE`` at the first ``=``, tolerating a leading ``export``.

    Examples
    --------
    >>> _split_assignment('export URL=https://x?a=b', 1, Path('demo.env'))
    ('URL', 'https://x?a=b')
    """

    if "=" not in line:
        log_error("dotenv_invalid_line", layer="dotenv", path=str(path), line=line_number)
        raise InvalidFormat(f"Malformed line {line_number} in {path}")
    key, value = line.split("=", 1)
    key = key.strip()
    if key.startswith(_EXPORT_PREFIX):
        key = key[len(_EXPORT_PREFIX) :].strip()
    if not key:
        log_error("dotenv_invalid_line", layer="dotenv", path=str(path), line=line_number)
        raise InvalidFormat(f"Empty key on line {line_number} in {path}")
    return key, value


def _read_value(
    key: str,
    raw_value: str,
    line_number: int,
    cursor: Iterator[tuple[int, str]],
    path: Path,
) -> str:
    """Return the unquoted value, pulling further lines from *cursor* for open quotes.

    Text between the quotes is kept verbatim, trailing whitespace included.
    """

    value = raw_value.lstrip()
    if not value or value[0] not in _QUOTES:
        return value.rstrip()
    quote = value[0]
    body = value[1:]
    closing = _closing_quote(body, quote)
    if closing != -1:
        return body[:closing]
    collected = [body]
    for _, continuation in cursor:
        closing = _closing_quote(continuation, quote)
        if closing != -1:
            collected.append(continuation[:closing])
            return "\n".join(collected)
        collected.append(continuation)
    log_error("dotenv_invalid_line", layer="dotenv", path=str(path), line=line_number)
    raise InvalidFormat(f"Unterminated quoted value for {key} starting on line {line_number} in {path}")


def _closing_quote(text: str, quote: str) -> int:
    """Return the index of the quote that closes a value on *text*, or ``-1``.

    The first *quote* followed only by whitespace or a ``#`` comment wins;
    otherwise the last *quote* on the line closes the value.

    Examples
    --------
    >>> _closing_quote('a" # it\\'s "x"', '"')
    1
    >>> _closing_quote('a"b"', '"')
    3
    >>> _closing_quote('a" trailing', '"')
    1
    >>> _closing_quote('open', '"')
    -1
    """

    index = text.find(quote)
    while index != -1:
        rest = text[index + 1 :].lstrip()
        if not rest or rest.startswith("#"):
            return index
        index = text.find(quote, index + 1)
    return text.rfind(quote)
