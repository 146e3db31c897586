"""The `config` command: set, get, unset, list and edit config options."""

import json
import os
import shlex
import shutil
import sys
from pathlib import Path
from typing import Any, Optional

from ai_commit.cli.args import CONFIG_ACTIONS
from ai_commit.config import NOT_FOUND, ConfigStore, to_command_str
from ai_commit.output import comment, info, print_error, print_info, print_success
from ai_commit.process import ProcessRunner

# Tried in order when neither --editor nor $VISUAL/$EDITOR is set
FALLBACK_EDITORS = ['editor', 'vim', 'vi', 'nano', 'pico', 'ed']


class UnsupportedActionError(Exception):
    """Raised for a config action outside CONFIG_ACTIONS."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"The action({action}) is not supported. Use one of: {', '.join(CONFIG_ACTIONS)}")


class NoEditorFoundError(Exception):
    """Raised when the edit action cannot find any editor."""


def parse_value(raw: Optional[str]) -> Any:
    """Interpret a command-line value as JSON, falling back to the raw string.

    "3" -> 3, "true" -> True, "null" -> None, "openai" -> "openai".
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def find_editor(explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if editor:
        return editor
    if sys.platform == 'win32':
        return 'notepad'
    for candidate in FALLBACK_EDITORS:
        if shutil.which(candidate):
            return candidate
    raise NoEditorFoundError("No editor found or specified.")


class ConfigCommand:
    """Operates on exactly one config file per invocation."""

    def __init__(self, store: ConfigStore, runner: ProcessRunner):
        self.store = store
        self.runner = runner

    def handle(self, args) -> int:
        self.store.ensure_global_seeded()

        path = ConfigStore.resolve_active_path(args.file, args.use_global, ConfigStore.local_path())
        print_info(f"The config file({path}) is being operated.")
        if not path.exists():
            ConfigStore.with_defaults().persist(path)
        self.store.load(path)

        action, key = args.action, args.key
        if action in ('set', 'unset') and key is None:
            print_error("Please specify the parameter key.")
            return 1

        if action == 'set':
            self.store.set(key, parse_value(args.value))
            self.store.persist(path)
        elif action == 'get':
            value = self.store.get(key)
            if value is NOT_FOUND:
                print_error(f"The config key({key}) does not exist.")
                return 1
            print(to_command_str(value))
        elif action == 'unset':
            self.store.unset(key)
            self.store.persist(path)
        elif action == 'list':
            for flat_key, value in self.store.flatten().items():
                print(f"{comment(f'[{flat_key}]')} {info(to_command_str(value))}")
        elif action == 'edit':
            self.edit(path, args.editor)
        else:
            raise UnsupportedActionError(action)

        print_success("Operate successfully.")
        return 0

    def edit(self, path: Path, editor: Optional[str] = None) -> None:
        editor = find_editor(editor)
        quoted = f'"{path}"' if sys.platform == 'win32' else shlex.quote(str(path))
        self.runner.run_interactive(f"{editor} {quoted}", f"The editor({editor}) exited with an error.")
