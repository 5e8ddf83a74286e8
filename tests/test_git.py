import os
import re
import subprocess

import pytest

from baur.git import (
    GitError,
    RepositoryState,
    command_is_installed,
    commit_id,
    is_git_dir,
    ls_files,
    split_args,
    worktree_is_dirty,
)

_GIT_ENV = {
    **os.environ,
    "GIT_AUTHOR_NAME": "baur",
    "GIT_AUTHOR_EMAIL": "baur@example.com",
    "GIT_COMMITTER_NAME": "baur",
    "GIT_COMMITTER_EMAIL": "baur@example.com",
}


def _git(directory, *args):
    proc = subprocess.run(
        ["git", *args],
        cwd=directory,
        env=_GIT_ENV,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=True,
    )
    return proc.stdout.decode()


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data)


def _commit_all(directory):
    _git(directory, "add", "-A")
    _git(directory, "commit", "-a", "-m", "baur commit")


@pytest.fixture
def repo(tmp_path):
    _git(tmp_path, "init", ".")
    return tmp_path


def test_split_args_max_bigger_than_first_elem():
    spl, remaining = split_args(["/etc/", "/tmp/"], 2)
    assert spl == ["/etc/"]
    assert remaining == ["/tmp/"]

    spl, remaining = split_args(remaining, 2)
    assert spl == ["/tmp/"]
    assert remaining == []


def test_split_args_max_bigger_than_all():
    spl, remaining = split_args(["/etc/", "/tmp/"], 100)
    assert spl == ["/etc/", "/tmp/"]
    assert remaining == []


def test_split_args_max_exact():
    spl, remaining = split_args(["/etc/", "/tmp/"], 10)
    assert spl == ["/etc/", "/tmp/"]
    assert remaining == []


@pytest.mark.parametrize("max_len", range(1, len("hello.txt") + len("bye.txt") + 2))
def test_ls_files(repo, max_len):
    _write(repo / "hello.txt", "1")
    _write(repo / "bye.txt", "2")
    _commit_all(repo)

    res = ls_files(repo, "hello.txt", "bye.txt", max_arg_length=max_len)
    assert sorted(res) == sorted(["hello.txt", "bye.txt"])


def test_ls_files_no_output_resolves_to_no_paths(repo):
    _write(repo / "hello.txt", "1")
    _commit_all(repo)

    assert ls_files(repo, "*.txt") == []


def test_ls_files_outside_repository_fails(tmp_path):
    with pytest.raises(GitError):
        ls_files(tmp_path, "file.txt")


def test_command_is_installed():
    assert command_is_installed() is True


def test_is_git_dir(repo, tmp_path_factory):
    assert is_git_dir(repo) is True
    assert is_git_dir(tmp_path_factory.mktemp("nogit")) is False


def test_commit_id_matches_head(repo):
    _write(repo / "a.txt", "a")
    _commit_all(repo)

    cid = commit_id(repo)
    assert re.fullmatch(r"[0-9a-f]{40}", cid)
    assert cid == _git(repo, "rev-parse", "HEAD").strip()


def test_commit_id_without_commits_fails(repo):
    with pytest.raises(GitError):
        commit_id(repo)


def test_worktree_is_dirty(repo):
    _write(repo / "a.txt", "a")
    _commit_all(repo)
    assert worktree_is_dirty(repo) is False

    _write(repo / "b.txt", "b")
    assert worktree_is_dirty(repo) is True


def test_repository_state_caches_values(repo):
    _write(repo / "a.txt", "a")
    _commit_all(repo)

    state = RepositoryState(repo)
    first = state.commit_id()
    assert state.worktree_is_dirty() is False

    _write(repo / "b.txt", "b")
    _commit_all(repo)

    assert state.commit_id() == first
    assert first != commit_id(repo)
    assert state.worktree_is_dirty() is False