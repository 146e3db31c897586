import shutil
import subprocess

import pytest

from ai_commit.git import GitError, GitRepository, split_diff_options
from ai_commit.process import ProcessResult, ProcessRunner, ProcessState


class FakeRunner(ProcessRunner):
    """Records commands and answers with a canned result."""

    def __init__(self, result):
        super().__init__()
        self.result = result
        self.calls = []

    def run(self, command, error_message=None, output_sink=None, verbosity=None, **kwargs):
        self.calls.append((command, kwargs))
        self.result.command = command
        return self.result


def test_split_diff_options():
    flags, pathspecs = split_diff_options(["--unified=1", ":(exclude)yarn.lock", "src/"])
    assert flags == ["--unified=1"]
    assert pathspecs == [":(exclude)yarn.lock", "src/"]


def test_staged_diff_puts_pathspecs_after_separator():
    runner = FakeRunner(ProcessResult(command=[], state=ProcessState.SUCCEEDED, exit_code=0, output="+x"))
    diff = GitRepository(runner).staged_diff([":(exclude)yarn.lock", "--stat"])
    assert diff == "+x"
    assert runner.calls[0][0] == ["git", "diff", "--cached", "--stat", "--", ":(exclude)yarn.lock"]


def test_staged_diff_failure_raises_git_error():
    runner = FakeRunner(ProcessResult(
        command=[], state=ProcessState.FAILED, exit_code=128, error_output="fatal: bad revision",
    ))
    with pytest.raises(GitError) as exc_info:
        GitRepository(runner).staged_diff()
    assert "fatal: bad revision" in str(exc_info.value)
    assert "git diff --cached" in str(exc_info.value)


def test_ensure_repository_reports_missing_git():
    runner = FakeRunner(ProcessResult(command=[], state=ProcessState.START_ERROR, start_error="not found"))
    with pytest.raises(GitError, match="not installed"):
        GitRepository(runner).ensure_repository()


def test_ensure_repository_reports_not_a_repo():
    runner = FakeRunner(ProcessResult(command=[], state=ProcessState.FAILED, exit_code=128))
    with pytest.raises(GitError, match="Not inside a git repository"):
        GitRepository(runner).ensure_repository()


def test_commit_passes_message_on_stdin():
    runner = FakeRunner(ProcessResult(command=[], state=ProcessState.SUCCEEDED, exit_code=0))
    GitRepository(runner).commit("feat: x\n\n- y", no_verify=True)
    command, kwargs = runner.calls[0]
    assert command == ["git", "commit", "--file=-", "--no-verify"]
    assert kwargs["input"] == "feat: x\n\n- y"


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_real_repository_round_trip(tmp_path, monkeypatch):
    for var, value in {
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@example.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@example.com",
    }.items():
        monkeypatch.setenv(var, value)
    subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
    (tmp_path / "app.py").write_text("print('hi')\n")
    (tmp_path / "yarn.lock").write_text("lock\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, check=True)

    repo = GitRepository(ProcessRunner(), cwd=tmp_path)
    repo.ensure_repository()
    diff = repo.staged_diff([":(exclude)yarn.lock"])
    assert "app.py" in diff
    assert "yarn.lock" not in diff

    repo.commit("feat: add app\n\n- print greeting", no_verify=True)
    log = subprocess.run(
        ["git", "log", "--format=%B", "-1"], cwd=tmp_path, check=True, capture_output=True, text=True
    ).stdout
    assert log.strip() == "feat: add app\n\n- print greeting"
