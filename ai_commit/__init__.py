"""
ai-commit

Generate commit messages from staged git changes with an AI backend,
driven by a layered JSON config.
"""

__version__ = "1.0.0"

# Config file locations, relative to the home dir (global) and cwd (local)
GLOBAL_CONFIG_DIRNAME = ".ai-commit"
CONFIG_FILENAME = ".ai-commit.json"
