"""Git Operations - staged diff extraction and committing via ProcessRunner."""

from pathlib import Path
from typing import Optional, Sequence

from ai_commit.process import ProcessError, ProcessRunner, ProcessState


class GitError(Exception):
    """Raised when git operations fail."""
    pass


def split_diff_options(options: Sequence[str]) -> tuple[list[str], list[str]]:
    """Separate flags ("--unified=3") from pathspecs (":(exclude)yarn.lock")."""
    flags = [opt for opt in options if opt.startswith('-')]
    pathspecs = [opt for opt in options if not opt.startswith('-')]
    return flags, pathspecs


class GitRepository:
    """Thin wrapper over the git CLI for one working directory."""

    def __init__(self, runner: ProcessRunner, cwd: Optional[Path] = None):
        self.runner = runner
        self.cwd = cwd

    def ensure_repository(self) -> None:
        """Fail fast if git is missing or cwd is not inside a repository."""
        result = self.runner.run(['git', 'rev-parse', '--git-dir'], cwd=self.cwd)
        if result.state is ProcessState.START_ERROR:
            raise GitError("Git is not installed or not in PATH")
        if not result.succeeded:
            raise GitError("Not inside a git repository")

    def staged_diff(self, options: Sequence[str] = ()) -> str:
        flags, pathspecs = split_diff_options(options)
        cmd = ['git', 'diff', '--cached', *flags]
        if pathspecs:
            cmd += ['--', *pathspecs]
        try:
            result = self.runner.must_run(cmd, "Failed to read the staged diff.", cwd=self.cwd)
        except ProcessError as e:
            raise GitError(str(e)) from e
        return result.output

    def commit(self, message: str, no_verify: bool = False) -> None:
        """Commit the staged changes, streaming git's output to the log."""
        cmd = ['git', 'commit', '--file=-']
        if no_verify:
            cmd.append('--no-verify')
        try:
            self.runner.must_run(
                cmd,
                "Failed to create the commit.",
                self.runner.default_output_sink(),
                cwd=self.cwd,
                input=message,
            )
        except ProcessError as e:
            raise GitError(str(e)) from e


__all__ = ["GitRepository", "GitError", "split_diff_options"]
