"""CLI Main Entry Point"""

import sys

from ai_commit.cli.args import parse_args
from ai_commit.cli.commit_command import CommitCommand
from ai_commit.cli.config_command import ConfigCommand, NoEditorFoundError, UnsupportedActionError
from ai_commit.config import ConfigError, ConfigStore
from ai_commit.generators import GeneratorError
from ai_commit.git import GitError
from ai_commit.logging_utils import configure_logging
from ai_commit.output import print_error
from ai_commit.process import ProcessError, ProcessRunner

# Failures that end the run with a single message and exit code 1
HANDLED_ERRORS = (
    ConfigError,
    ProcessError,
    GitError,
    GeneratorError,
    UnsupportedActionError,
    NoEditorFoundError,
)


def _build_command(args, runner: ProcessRunner):
    """Wire a command handler with its store. config works on one file; commit sees all layers."""
    if args.command == 'config':
        return ConfigCommand(ConfigStore(), runner)
    return CommitCommand(ConfigStore.layered(), runner)


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    runner = ProcessRunner()

    try:
        command = _build_command(args, runner)
        return command.handle(args)
    except HANDLED_ERRORS as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
