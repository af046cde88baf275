"""Tests for the environment variable store.

Environment variables are key-value string pairs that configure process
behaviour.  Each process gets its own copy — changes don't leak to the
parent or siblings, and nothing here ever writes to ``os.environ``.
"""

import os
from pathlib import Path

import pytest

from py_stdio.env import Environment


class TestEnvironment:
    """Verify the Environment key-value store."""

    def test_get_and_set(self) -> None:
        """Setting a variable should make it retrievable."""
        env = Environment()
        env.set("HOME", "/root")
        assert env.get("HOME") == "/root"

    def test_get_missing_returns_none(self) -> None:
        """Getting a missing key should return None."""
        env = Environment()
        assert env.get("MISSING") is None

    def test_get_missing_with_default(self) -> None:
        """Getting a missing key with a default should return the default."""
        env = Environment()
        assert env.get("MISSING", "fallback") == "fallback"

    def test_delete(self) -> None:
        """Deleting a variable should remove it."""
        env = Environment({"X": "val"})
        env.delete("X")
        assert "X" not in env

    def test_delete_missing_raises(self) -> None:
        """Deleting a non-existent key should raise KeyError."""
        env = Environment()
        with pytest.raises(KeyError):
            env.delete("NOPE")

    def test_items_sorted(self) -> None:
        """Items should come back sorted by name."""
        env = Environment({"B": "2", "A": "1"})
        assert env.items() == [("A", "1"), ("B", "2")]

    def test_copy_is_independent(self) -> None:
        """A copied environment should be independent of the original."""
        env = Environment({"X": "original"})
        child = env.copy()
        child.set("X", "modified")
        assert env.get("X") == "original"
        assert child.get("X") == "modified"

    def test_initial_dict_is_copied(self) -> None:
        """Mutating the seed dict should not change the environment."""
        seed = {"A": "1"}
        env = Environment(seed)
        seed["A"] = "changed"
        assert env.get("A") == "1"

    def test_len(self) -> None:
        """len() should return the number of variables."""
        env = Environment()
        assert len(env) == 0
        env.set("X", "1")
        assert len(env) == 1


class TestProcessEnvironment:
    """Verify the snapshot of the real process environment."""

    def test_from_os_sees_real_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """from_os() should contain what os.environ contains."""
        monkeypatch.setenv("PY_STDIO_TEST_VAR", "present")
        env = Environment.from_os()
        assert env.get("PY_STDIO_TEST_VAR") == "present"

    def test_changes_do_not_reach_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Setting a variable on the snapshot must not touch os.environ."""
        monkeypatch.delenv("PY_STDIO_TEST_VAR", raising=False)
        env = Environment.from_os()
        env.set("PY_STDIO_TEST_VAR", "local only")
        assert "PY_STDIO_TEST_VAR" not in os.environ


class TestDotenv:
    """Verify loading .env files."""

    def test_from_dotenv(self, tmp_path: Path) -> None:
        """Variables in a .env file should be loaded."""
        path = tmp_path / ".env"
        path.write_text('GREETING=hello\nQUOTED="two words"\n# comment\n')
        env = Environment.from_dotenv(path)
        assert env.get("GREETING") == "hello"
        assert env.get("QUOTED") == "two words"

    def test_bare_key_skipped(self, tmp_path: Path) -> None:
        """A key with no value should not be set."""
        path = tmp_path / ".env"
        path.write_text("EMPTY\nSET=1\n")
        env = Environment.from_dotenv(path)
        assert "EMPTY" not in env
        assert env.get("SET") == "1"

    def test_update_overrides_existing(self, tmp_path: Path) -> None:
        """A .env layer should override variables already present."""
        path = tmp_path / ".env"
        path.write_text("MODE=dev\n")
        env = Environment({"MODE": "prod", "OTHER": "kept"})
        assert env.update_from_dotenv(path) == 1
        assert env.get("MODE") == "dev"
        assert env.get("OTHER") == "kept"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """A missing .env file should raise instead of loading nothing."""
        env = Environment({"KEEP": "1"})
        with pytest.raises(FileNotFoundError):
            env.update_from_dotenv(tmp_path / "absent.env")
        assert env.items() == [("KEEP", "1")]


class TestExpansion:
    """Verify $VAR expansion."""

    def test_plain_reference(self) -> None:
        """$NAME should be replaced by its value."""
        env = Environment({"USER": "ada"})
        assert env.expand("hello $USER") == "hello ada"

    def test_braced_reference(self) -> None:
        """${NAME} should allow text right after the name."""
        env = Environment({"USER": "ada"})
        assert env.expand("${USER}_home") == "ada_home"

    def test_unset_expands_to_empty(self) -> None:
        """An unset variable should expand to nothing."""
        env = Environment()
        assert env.expand("[$NOPE]") == "[]"

    def test_lone_dollar_kept(self) -> None:
        """A dollar not followed by a name should stay."""
        env = Environment()
        assert env.expand("costs $5") == "costs $5"


class TestPrefix:
    """Verify prefix selection for the config layer."""

    def test_with_prefix(self) -> None:
        """Matching keys should be returned stripped and lower-cased."""
        env = Environment({"APP_PORT": "1", "APP_SERVER__HOST": "h", "OTHER": "x"})
        assert env.with_prefix("APP_") == {"port": "1", "server__host": "h"}

    def test_prefix_alone_ignored(self) -> None:
        """A variable named exactly the prefix has no key."""
        env = Environment({"APP_": "x"})
        assert env.with_prefix("APP_") == {}
