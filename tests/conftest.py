import pytest


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Fake home directory; the global config lives under it."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    # Also patch Path.home for Windows
    monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)
    return fake_home


@pytest.fixture
def project(tmp_path, monkeypatch, home):
    """Working directory for local config files."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.chdir(project_dir)
    return project_dir
