"""Configuration Management Package

A ConfigStore holds a nested JSON tree addressed by dot-delimited keys
("generators.ollama.model"). Sources are layered in this order:

1. Built-in defaults
2. ~/.ai-commit/.ai-commit.json (global)
3. ./.ai-commit.json (local, project-specific)

The config command always operates on exactly one of these files, chosen
by resolve_active_path().
"""

import copy
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from ai_commit import CONFIG_FILENAME, GLOBAL_CONFIG_DIRNAME
from ai_commit.config.defaults import DEFAULTS


class ConfigError(Exception):
    """Base class for config store failures."""


class ConfigIOError(ConfigError):
    """Raised when a config file cannot be read, parsed or written."""


class TypeConflictError(ConfigError):
    """Raised when set() would have to descend through a non-mapping value."""


class InvalidKeyError(ConfigError, ValueError):
    """Raised for empty keys or keys with empty segments ("a..b")."""


class _NotFound:
    """Sentinel returned by get() for keys that are not set."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


NOT_FOUND = _NotFound()


def split_key(key: str, delimiter: str = ".") -> list[str]:
    """Split a key path into segments, rejecting malformed keys."""
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(f"Invalid config key: {key!r}")
    segments = key.split(delimiter)
    if any(segment == "" for segment in segments):
        raise InvalidKeyError(f"Invalid config key: {key!r}")
    return segments


def check_string_keys(value: Any, key: str) -> None:
    """Reject mappings with non-string keys anywhere inside value.

    JSON objects only have string keys, so {1: "x"} would load back as {"1": "x"}.
    """
    if isinstance(value, dict):
        for name, child in value.items():
            if not isinstance(name, str):
                raise InvalidKeyError(f"Invalid config key {name!r} under '{key}': keys must be strings")
            check_string_keys(child, f"{key}.{name}")
    elif isinstance(value, (list, tuple)):
        for child in value:
            check_string_keys(child, key)


def flatten(tree: dict, delimiter: str = ".", prefix: Optional[str] = None) -> dict:
    """Flatten nested mappings into {"a.b.c": leaf}.

    Lists and scalars are leaves. Empty mappings contribute no entries.
    """
    result = {}
    for key, value in tree.items():
        full_key = key if prefix is None else f"{prefix}{delimiter}{key}"
        if isinstance(value, dict):
            result.update(flatten(value, delimiter, full_key))
        else:
            result[full_key] = value
    return result


def merge_into(target: dict, source: dict) -> dict:
    """Recursively merge source over target in place.

    Mappings merge key by key; every other value replaces what was there.
    """
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            merge_into(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def to_command_str(value: Any) -> str:
    """Render a config value the way `config get` and `config list` print it."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=4, ensure_ascii=False)
    return str(value)


class ConfigStore:
    """Nested key/value store backed by a JSON file."""

    def __init__(self, values: Optional[dict] = None):
        self._values: dict = copy.deepcopy(values) if values else {}
        self.source_path: Optional[Path] = None

    @classmethod
    def with_defaults(cls) -> 'ConfigStore':
        return cls(DEFAULTS)

    @classmethod
    def layered(cls, cwd: Optional[Path] = None) -> 'ConfigStore':
        """Defaults, then the global file, then the local file."""
        store = cls.with_defaults()
        store.load(cls.global_path())
        store.load(cls.local_path(cwd))
        return store

    # -- well-known locations -------------------------------------------------

    @staticmethod
    def global_path() -> Path:
        return Path.home() / GLOBAL_CONFIG_DIRNAME / CONFIG_FILENAME

    @staticmethod
    def local_path(cwd: Optional[Path] = None) -> Path:
        return Path(cwd or Path.cwd()) / CONFIG_FILENAME

    @staticmethod
    def resolve_active_path(explicit_file, use_global: bool, default_local_path) -> Path:
        """Pick the one file a command operates on: --file > --global > local."""
        if explicit_file:
            return Path(explicit_file)
        if use_global:
            return ConfigStore.global_path()
        return Path(default_local_path)

    def ensure_global_seeded(self) -> bool:
        """Write the built-in defaults to the global file if it is missing.

        Returns True when the file was written, False when it already existed.
        """
        path = self.global_path()
        if path.exists():
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigIOError(f"Could not create {path.parent}: {e}") from e
        ConfigStore(DEFAULTS).persist(path)
        return True

    # -- file I/O -------------------------------------------------------------

    def load(self, path) -> 'ConfigStore':
        """Merge the JSON file at path over the current values.

        A missing file is not an error: the current values stay as they are.
        """
        path = Path(path)
        if not path.exists():
            return self
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigIOError(f"Could not parse {path}: {e}") from e
        except OSError as e:
            raise ConfigIOError(f"Could not read {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigIOError(f"Could not parse {path}: top level must be a JSON object")
        merge_into(self._values, data)
        self.source_path = path
        return self

    def persist(self, path=None) -> Path:
        """Write the whole tree to path, replacing the file atomically."""
        target = Path(path) if path is not None else self.source_path
        if target is None:
            raise ConfigIOError("No config file to write to")

        payload = json.dumps(self._values, indent=2, ensure_ascii=False) + "\n"
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
        except OSError as e:
            raise ConfigIOError(f"Could not write {target}: {e}") from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise ConfigIOError(f"Could not write {target}: {e}") from e

        self.source_path = target
        return target

    # -- key access -----------------------------------------------------------

    def all(self) -> dict:
        return copy.deepcopy(self._values)

    def get(self, key: Optional[str] = None) -> Any:
        """Value at key, the whole tree when key is None, or NOT_FOUND."""
        if key is None:
            return self.all()
        node: Any = self._values
        for segment in split_key(key):
            if not isinstance(node, dict) or segment not in node:
                return NOT_FOUND
            node = node[segment]
        return copy.deepcopy(node)

    def has(self, key: str) -> bool:
        return self.get(key) is not NOT_FOUND

    def set(self, key: str, value: Any) -> None:
        *parents, leaf = split_key(key)
        check_string_keys(value, key)
        node = self._values
        walked = []
        for segment in parents:
            walked.append(segment)
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise TypeConflictError(
                    f"Cannot set '{key}': '{'.'.join(walked)}' holds a {type(child).__name__}, not a mapping"
                )
            node = child
        node[leaf] = copy.deepcopy(value)

    def unset(self, key: str) -> None:
        """Remove key if present. Parent mappings are left in place, even when emptied."""
        *parents, leaf = split_key(key)
        node = self._values
        for segment in parents:
            node = node.get(segment)
            if not isinstance(node, dict):
                return
        node.pop(leaf, None)

    def merge(self, mapping: dict) -> None:
        check_string_keys(mapping, "<root>")
        merge_into(self._values, mapping)

    def flatten(self, delimiter: str = ".") -> dict:
        return flatten(self._values, delimiter)


__all__ = [
    "ConfigStore",
    "ConfigError",
    "ConfigIOError",
    "TypeConflictError",
    "InvalidKeyError",
    "NOT_FOUND",
    "DEFAULTS",
    "flatten",
    "merge_into",
    "split_key",
    "to_command_str",
]
