"""Commit Message Generators Package"""

from ai_commit.config import NOT_FOUND, ConfigStore
from ai_commit.generators.base import Generator, GeneratorError, sanitize_json
from ai_commit.generators.claude import ClaudeGenerator
from ai_commit.generators.command import CommandGenerator
from ai_commit.generators.ollama import OllamaGenerator
from ai_commit.process import ProcessRunner

DRIVERS = {
    "claude": ClaudeGenerator,
    "ollama": OllamaGenerator,
    "command": CommandGenerator,
}


def get_generator(name: str | None, store: ConfigStore, runner: ProcessRunner | None = None) -> Generator:
    """Build the generator configured under generators.<name>.

    name defaults to the top-level "generator" key.
    """
    if not name:
        name = store.get("generator")
    if not name or name is NOT_FOUND:
        raise GeneratorError("No generator configured. Set one with: ai-commit config set generator <name>")

    config = store.get(f"generators.{name}")
    if config is NOT_FOUND or not isinstance(config, dict):
        raise GeneratorError(f"Unknown generator: {name}. Configure it under generators.{name}")

    driver = config.get("driver", name)
    if driver not in DRIVERS:
        raise GeneratorError(f"Unknown driver '{driver}' for generator {name}. Use one of: {', '.join(DRIVERS)}")

    return DRIVERS[driver](config, runner)


__all__ = [
    "Generator",
    "GeneratorError",
    "ClaudeGenerator",
    "OllamaGenerator",
    "CommandGenerator",
    "get_generator",
    "sanitize_json",
    "DRIVERS",
]
