"""Shared fixtures for buildinfo tests."""

import os
import shutil
import subprocess
import sys
import uuid

import pytest

from buildinfo.models import FactSet, VcsFacts


@pytest.fixture(autouse=True)
def _clean_buildinfo_env(monkeypatch):
    """Keep BUILDINFO_* variables from the outer shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("BUILDINFO_"):
            monkeypatch.delenv(key)


@pytest.fixture
def full_facts() -> FactSet:
    return FactSet(
        package_version="1.2.3",
        vcs=VcsFacts(commit_hash="abc123", branch="main", dirty=False),
        os="linux",
        arch="x86_64",
        compiler_version="1.75.0",
    )


@pytest.fixture
def no_vcs_facts() -> FactSet:
    return FactSet(
        package_version="0.1.0",
        vcs=None,
        os="macos",
        arch="aarch64",
        compiler_version="1.75.0",
    )


@pytest.fixture
def module_dir(tmp_path, monkeypatch):
    """Directory on sys.path for generated modules."""
    path = tmp_path / "modules"
    path.mkdir()
    monkeypatch.syspath_prepend(str(path))
    return path


@pytest.fixture
def module_name():
    """Unique module name, dropped from sys.modules after the test."""
    name = f"_build_info_{uuid.uuid4().hex}"
    yield name
    sys.modules.pop(name, None)


def _run_git(repo, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c",
            "user.name=Build Bot",
            "-c",
            "user.email=build@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """A git repository on branch 'main' with one commit."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    repo = tmp_path / "repo"
    repo.mkdir()
    _run_git(repo, "init", "-q")
    _run_git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "pyproject.toml").write_text('[project]\nname = "demo"\nversion = "1.2.3"\n')
    _run_git(repo, "add", "pyproject.toml")
    _run_git(repo, "commit", "-q", "-m", "initial")
    return repo
