"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the resolver and
the composition root can orchestrate behaviour without depending on concrete
implementations.

Contents
--------
* :class:`DotEnvParser` – turns a dotenv file into a flat mapping.
* :class:`Environment` – answers single-variable lookups.

System Role
-----------
These protocols keep the resolver free of I/O. Each adapter implements one
protocol; tests can pass any object with the same shape.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class DotEnvParser(Protocol):
    """Parse a caller-named dotenv file.

    Why
    ----
    Segregate file parsing from precedence logic so alternative formats can
    feed the same ``dotenv`` layer.
    """

    def parse(self, path: str | Path) -> Mapping[str, str]:
        """Return the assignments in *path*, ``{}`` when the file does not exist."""


@runtime_checkable
class Environment(Protocol):
    """Answer lookups against the highest-precedence layer.

    Why
    ----
    Global process state is an implicit dependency; hiding it behind a lookup
    lets tests run against fake environments.
    """

    def lookup(self, key: str) -> str | None:
        """Return the value for *key*, or ``None`` when the variable is unset."""
