"""Environment variable adapter.

Purpose
-------
Expose the process environment as the highest-precedence layer through the
:class:`lib_config_struct.application.ports.Environment` protocol, so tests
can substitute a plain dictionary instead of mutating ``os.environ``.

Key behaviours
--------------
* Exact, case-sensitive key lookups; no prefixing or nesting.
* A variable that is set to the empty string is still present.
* Read-only: the adapter never writes to the wrapped mapping.
"""

from __future__ import annotations

import os
from typing import Mapping


class ProcessEnvironment:
    """Look up variables in a mapping that defaults to :data:`os.environ`."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the adapter with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`; an empty
            mapping is honoured as an empty environment.
        """

        self._environ = os.environ if environ is None else environ

    def lookup(self, key: str) -> str | None:
        """Return the value of *key*, or ``None`` when the variable is not set.

        Examples
        --------
        >>> env = ProcessEnvironment(environ={'PORT': '8080', 'EMPTY': ''})
        >>> env.lookup('PORT'), env.lookup('EMPTY'), env.lookup('MISSING')
        ('8080', '', None)
        """

        return self._environ.get(key)
