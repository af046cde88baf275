"""Environment variables — process configuration via key-value pairs.

Every process has an environment: a set of ``KEY=VALUE`` string pairs
inherited from its parent.  Common examples include ``PATH`` (where to
find executables), ``HOME`` (the user's home directory), and ``USER``
(current username).  Python exposes it as ``os.environ``.

Key design properties:
    - **Copy-on-spawn** — a child process gets a *copy* of its parent's
      environment.  Changes in the child never reach the parent, which
      is why a script cannot ``export`` into the shell that ran it.
    - **Strings only** — both keys and values are strings (no types).
    - **Convention over enforcement** — uppercase names, no spaces in
      keys, but these are conventions, not hard rules.

Our ``Environment`` class wraps a plain dict.  ``from_os()`` takes a
snapshot of ``os.environ``; nothing in this module ever writes back to
it.  ``.env`` files are read with python-dotenv.
"""

from __future__ import annotations

import errno
import os
import re
from pathlib import Path

from dotenv import dotenv_values

_VAR_PATTERN = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")


class Environment:
    """A key-value store for environment variables.

    Each instance is an independent copy — modifying one does not
    affect any other.  This mirrors how Unix processes each have
    their own environment block.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create an environment, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).

        """
        self._vars: dict[str, str] = dict(initial) if initial else {}

    @classmethod
    def from_os(cls) -> Environment:
        """Snapshot the real process environment."""
        return cls(initial=dict(os.environ))

    @classmethod
    def from_dotenv(cls, path: str | Path) -> Environment:
        """Create an environment from a ``.env`` file.

        Keys declared without a value (a bare ``NAME`` line) are skipped.
        """
        env = cls()
        env.update_from_dotenv(path)
        return env

    def update_from_dotenv(self, path: str | Path) -> int:
        """Layer the variables of a ``.env`` file over this environment.

        Returns:
            The number of variables set.

        Raises:
            FileNotFoundError: If *path* is not a file.

        """
        # dotenv_values() quietly returns nothing for a missing file.
        if not Path(path).is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
        loaded = {k: v for k, v in dotenv_values(path).items() if v is not None}
        self._vars.update(loaded)
        return len(loaded)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if not set."""
        return self._vars.get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value* (creates or overwrites)."""
        self._vars[key] = value

    def delete(self, key: str) -> None:
        """Remove *key* from the environment.

        Raises:
            KeyError: If *key* does not exist.

        """
        del self._vars[key]

    def items(self) -> list[tuple[str, str]]:
        """Return all (key, value) pairs, sorted by key."""
        return sorted(self._vars.items())

    def copy(self) -> Environment:
        """Return an independent copy of this environment."""
        return Environment(initial=self._vars)

    def expand(self, text: str) -> str:
        """Replace ``$NAME`` and ``${NAME}`` references with their values.

        Undefined variables expand to the empty string, like ``sh``
        with unset variables.
        """

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1) or match.group(2)
            return self._vars.get(name, "")

        return _VAR_PATTERN.sub(_replace, text)

    def with_prefix(self, prefix: str) -> dict[str, str]:
        """Return variables starting with *prefix*, prefix stripped, lower-cased."""
        return {
            key[len(prefix) :].lower(): value
            for key, value in self._vars.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        }

    def __contains__(self, key: object) -> bool:
        """Return whether *key* is set."""
        return key in self._vars

    def __len__(self) -> int:
        """Return the number of variables."""
        return len(self._vars)
