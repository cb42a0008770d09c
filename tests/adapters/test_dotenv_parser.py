from __future__ import annotations

import os
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from lib_config_struct.adapters.dotenv.default import DefaultDotEnvParser
from lib_config_struct.domain.errors import InvalidFormat, SourceUnreadable
from tests.support import COMPLEX_DOTENV, PRIVATE_KEY, PUBLIC_KEY, write_dotenv


def test_parser_reads_plain_and_quoted_values(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, COMPLEX_DOTENV)
    data = DefaultDotEnvParser().parse(path)
    assert data["NO_QUOTES"] == "https://search.brave.com/search?q=somesearch&source=desktop"
    assert data["DOUBLE_QUOTES"] == "mongodb://127.0.0.1:27017/test?directConnection=true"
    assert data["SINGLE_QUOTES"] == "https://api.github.com/"
    assert data["TIMEOUT"] == "10s"
    assert data["PORT"] == "5432"


def test_parser_keeps_multiline_pem_blocks(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, COMPLEX_DOTENV)
    data = DefaultDotEnvParser().parse(path)
    assert data["PUBLIC_KEY"] == PUBLIC_KEY
    assert data["PRIVATE_KEY"] == PRIVATE_KEY
    assert "\n" in data["PUBLIC_KEY"]


def test_parser_returns_empty_when_file_absent(tmp_path: Path) -> None:
    assert DefaultDotEnvParser().parse(tmp_path / "nope.env") == {}


def test_parser_skips_comments_and_blank_lines(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, "\n   \n# FOO=commented\n  # indented comment\nFOO=bar\n")
    assert DefaultDotEnvParser().parse(path) == {"FOO": "bar"}


def test_parser_later_lines_win(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, "FOO=first\nFOO=second\n")
    assert DefaultDotEnvParser().parse(path) == {"FOO": "second"}


def test_parser_splits_on_first_equals_and_trims_unquoted(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, "URL =  https://x.example/?a=b&c=d  \nEMPTY=\n")
    assert DefaultDotEnvParser().parse(path) == {"URL": "https://x.example/?a=b&c=d", "EMPTY": ""}


def test_parser_keeps_quoted_content_literally(tmp_path: Path) -> None:
    path = write_dotenv(
        tmp_path,
        "PADDED=\"  spaced  \"\nHASH='a # not a comment'\nESCAPES=\"no\\nescape\"\nTRAILING=\"v\" # note\n",
    )
    data = DefaultDotEnvParser().parse(path)
    assert data["PADDED"] == "  spaced  "
    assert data["HASH"] == "a # not a comment"
    assert data["ESCAPES"] == "no\\nescape"
    assert data["TRAILING"] == "v"


def test_parser_multiline_preserves_continuation_lines_verbatim(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, 'BLOCK="first\n  # indented, not a comment\n\nlast"\nAFTER=1\n')
    data = DefaultDotEnvParser().parse(path)
    assert data["BLOCK"] == "first\n  # indented, not a comment\n\nlast"
    assert data["AFTER"] == "1"


def test_parser_accepts_export_prefix_and_crlf(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_bytes(b"export FOO=bar\r\nBAR=baz\r\n")
    assert DefaultDotEnvParser().parse(path) == {"FOO": "bar", "BAR": "baz"}


@pytest.mark.parametrize("body", ["JUSTAKEY\n", "=value\n"])
def test_parser_rejects_malformed_lines(tmp_path: Path, body: str) -> None:
    path = write_dotenv(tmp_path, "OK=1\n" + body)
    with pytest.raises(InvalidFormat, match="line 2"):
        DefaultDotEnvParser().parse(path)


def test_parser_rejects_unterminated_quote(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, 'KEY="never closed\nmore text\n')
    with pytest.raises(InvalidFormat, match="Unterminated quoted value for KEY"):
        DefaultDotEnvParser().parse(path)


def test_parser_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_bytes(b"KEY=\xff\xfe\n")
    with pytest.raises(InvalidFormat, match="UTF-8"):
        DefaultDotEnvParser().parse(path)


def test_parser_reports_unreadable_path(tmp_path: Path) -> None:
    directory = tmp_path / "dir.env"
    directory.mkdir()
    with pytest.raises(SourceUnreadable) as excinfo:
        DefaultDotEnvParser().parse(directory)
    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
def test_parser_reports_permission_denied(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, "KEY=value\n")
    path.chmod(0)
    try:
        with pytest.raises(SourceUnreadable, match="Cannot read"):
            DefaultDotEnvParser().parse(path)
    finally:
        path.chmod(0o600)


def test_parser_keeps_trailing_whitespace_on_opening_line(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, 'K="a   \nb"\n')
    assert DefaultDotEnvParser().parse(path) == {"K": "a   \nb"}


def test_parser_stops_at_quote_before_trailing_comment(tmp_path: Path) -> None:
    path = write_dotenv(tmp_path, "K=\"a\" # it's \"x\"\nJ='b'c'\n")
    assert DefaultDotEnvParser().parse(path) == {"K": "a", "J": "b'c"}


def test_parser_wraps_os_errors_raised_while_opening(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def deny(self: Path, *args: object, **kwargs: object) -> str:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_text", deny)
    with pytest.raises(SourceUnreadable, match="Cannot read") as excinfo:
        DefaultDotEnvParser().parse(tmp_path / "locked" / ".env")
    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_parser_treats_file_as_directory_component_as_absent(tmp_path: Path) -> None:
    blocker = write_dotenv(tmp_path, "A=1\n", name="plain")
    assert DefaultDotEnvParser().parse(blocker / ".env") == {}


KEY = st.text(min_size=1, max_size=8, alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZ_0123456789"))
VALUE = st.text(max_size=12, alphabet=st.sampled_from("abcxyz0123456789:/?&.-_ "))


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(entries=st.dictionaries(KEY, VALUE, min_size=1, max_size=6), quote=st.sampled_from(["", '"', "'"]))
def test_parser_handles_random_assignments(entries: dict[str, str], quote: str, tmp_path: Path) -> None:
    lines = [f"{key}={quote}{value}{quote}" for key, value in entries.items()]
    path = write_dotenv(tmp_path, "\n".join(lines) + "\n")

    data = DefaultDotEnvParser().parse(path)

    expected = {key: value if quote else value.strip() for key, value in entries.items()}
    assert data == expected
