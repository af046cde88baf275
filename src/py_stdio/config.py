"""Configuration files — settings that outlive a single invocation.

Arguments change every run and environment variables change per shell
session; configuration files hold the settings a user wants to keep.
Python's standard library reads the three common formats:

- **TOML** via ``tomllib`` — typed values, nested tables, comments.
- **INI** via ``configparser`` — sections of string values.
- **JSON** via ``json`` — typed values, no comments.

Real programs rarely use just one source.  ``LayeredConfig`` stacks
them, each layer overriding the one before:

    defaults < config file < environment < command-line overrides

Environment variables reach into nested tables with a double
underscore: with prefix ``APP_``, ``APP_SERVER__PORT=9000`` sets
``server.port``.  Command-line overrides use dots: ``server.port=9000``.
"""

from __future__ import annotations

import configparser
import copy
import json
import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Any

from py_stdio.env import Environment

_ENV_NESTING = "__"


class ConfigFormat(StrEnum):
    """Supported configuration file formats."""

    TOML = "toml"
    INI = "ini"
    JSON = "json"


_SUFFIXES: dict[str, ConfigFormat] = {
    ".toml": ConfigFormat.TOML,
    ".ini": ConfigFormat.INI,
    ".cfg": ConfigFormat.INI,
    ".json": ConfigFormat.JSON,
}


class ConfigError(Exception):
    """Raise when configuration cannot be read or parsed.

    Attributes:
        source: Where the text came from (a path or ``<string>``).

    """

    def __init__(self, message: str, *, source: str = "<string>") -> None:
        """Create an error tagged with the text's source."""
        super().__init__(f"{source}: {message}")
        self.source = source


def detect_format(path: str | Path) -> ConfigFormat:
    """Guess the format of *path* from its suffix.

    Raises:
        ConfigError: If the suffix is not recognised.

    """
    suffix = Path(path).suffix.lower()
    fmt = _SUFFIXES.get(suffix)
    if fmt is None:
        msg = f"unknown config format '{suffix or '(no suffix)'}'"
        raise ConfigError(msg, source=str(path))
    return fmt


def _as_format(fmt: ConfigFormat | str, *, source: str) -> ConfigFormat:
    try:
        return ConfigFormat(fmt)
    except ValueError:
        msg = f"unknown config format '{fmt}'"
        raise ConfigError(msg, source=source) from None


def parse_config(text: str, fmt: ConfigFormat | str, *, source: str = "<string>") -> dict[str, Any]:
    """Parse configuration *text* in the given format.

    Args:
        text: The raw file contents.
        fmt: One of ``toml``, ``ini``, ``json``.
        source: Name used in error messages.

    Returns:
        The configuration as nested dicts.

    Raises:
        ConfigError: If the format is unknown or the text is malformed.

    """
    fmt = _as_format(fmt, source=source)

    if fmt is ConfigFormat.TOML:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(str(e), source=source) from e

    if fmt is ConfigFormat.INI:
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(text, source=source)
        except configparser.Error as e:
            raise ConfigError(str(e), source=source) from e
        return {section: dict(parser[section]) for section in parser.sections()}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(str(e), source=source) from e
    if not isinstance(data, dict):
        msg = f"top level must be an object, got {type(data).__name__}"
        raise ConfigError(msg, source=source)
    return data


def load_config(path: str | Path, fmt: ConfigFormat | str | None = None) -> dict[str, Any]:
    """Read and parse the configuration file at *path*.

    Raises:
        ConfigError: If the format is unknown, or the file is missing,
            unreadable, not UTF-8, or malformed.

    """
    path = Path(path)
    resolved = _as_format(fmt, source=str(path)) if fmt is not None else detect_format(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(e.strerror or str(e), source=str(path)) from e
    except UnicodeDecodeError as e:
        msg = f"not UTF-8 text ({e.reason} at byte {e.start})"
        raise ConfigError(msg, source=str(path)) from e
    return parse_config(text, resolved, source=str(path))


def merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated recursively with *overlay* (inputs untouched)."""
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _nest(path: list[str], value: Any) -> dict[str, Any]:
    nested: dict[str, Any] = {path[-1]: value}
    for part in reversed(path[:-1]):
        nested = {part: nested}
    return nested


class LayeredConfig:
    """Configuration assembled from several sources in precedence order.

    Layers are applied as they are added, so callers add them from the
    lowest precedence to the highest.  ``sources`` records the order.
    """

    def __init__(self, defaults: dict[str, Any] | None = None) -> None:
        """Create a config, optionally seeded with defaults."""
        self._data: dict[str, Any] = copy.deepcopy(defaults) if defaults else {}
        self._sources: list[str] = ["defaults"] if defaults else []

    @property
    def sources(self) -> list[str]:
        """Return the names of the applied layers, lowest first."""
        return list(self._sources)

    def add_layer(self, name: str, data: dict[str, Any]) -> None:
        """Apply *data* on top of everything added so far."""
        self._data = merge(self._data, data)
        self._sources.append(name)

    def add_file(self, path: str | Path, fmt: ConfigFormat | str | None = None) -> None:
        """Apply a configuration file layer."""
        self.add_layer(str(path), load_config(path, fmt))

    def add_env(self, env: Environment, prefix: str) -> None:
        """Apply variables named ``PREFIX_SECTION__KEY`` as a layer."""
        data: dict[str, Any] = {}
        for key, value in env.with_prefix(prefix).items():
            data = merge(data, _nest(key.split(_ENV_NESTING), value))
        self.add_layer(f"env:{prefix}", data)

    def set_override(self, text: str) -> None:
        """Apply a ``dotted.key=value`` override.

        Raises:
            ConfigError: If *text* has no ``=`` or an empty key segment.

        """
        key, sep, value = text.partition("=")
        parts = key.strip().split(".")
        if not sep or not all(parts):
            msg = f"override must look like 'section.key=value', got '{text}'"
            raise ConfigError(msg, source="<override>")
        self.add_layer(f"override:{key.strip()}", _nest(parts, value))

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Look up ``a.b.c`` through nested tables."""
        node: Any = self._data
        for part in dotted_key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def as_dict(self) -> dict[str, Any]:
        """Return a deep copy of the merged configuration."""
        return copy.deepcopy(self._data)

    def flatten(self) -> list[tuple[str, Any]]:
        """Return ``(dotted_key, value)`` pairs for every leaf, sorted."""
        pairs: list[tuple[str, Any]] = []

        def _walk(node: dict[str, Any], prefix: str) -> None:
            for key, value in node.items():
                dotted = f"{prefix}{key}"
                if isinstance(value, dict) and value:
                    _walk(value, dotted + ".")
                else:
                    pairs.append((dotted, value))

        _walk(self._data, "")
        return sorted(pairs)
