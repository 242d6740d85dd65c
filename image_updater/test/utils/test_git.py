from unittest.mock import (
    Mock,
    call,
)

import pytest
from pytest_mock import MockerFixture

from image_updater.exceptions import VcsCommandFailed
from image_updater.utils.git import GitWorkTree


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> Mock:
    return Mock(returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def run(mocker: MockerFixture) -> Mock:
    return mocker.patch(
        "image_updater.utils.git.subprocess.run", return_value=completed()
    )


def git_call(*args: str, wd: str = "/repo") -> object:
    return call(
        ["git", *args], cwd=wd, capture_output=True, text=True, check=False
    )


def test_run_in_work_tree(run: Mock) -> None:
    run.return_value = completed(stdout="abc\n")
    assert GitWorkTree("/repo").run("rev-parse", "HEAD") == "abc\n"
    run.assert_called_once_with(
        ["git", "rev-parse", "HEAD"],
        cwd="/repo",
        capture_output=True,
        text=True,
        check=False,
    )


def test_run_failure(run: Mock) -> None:
    run.return_value = completed(returncode=128, stderr="fatal: not a git repo\n")
    with pytest.raises(VcsCommandFailed) as e:
        GitWorkTree("/repo").checkout("main")
    assert e.value.returncode == 128
    assert e.value.command == ["git", "checkout", "main"]
    assert str(e.value) == (
        "git checkout main failed with exit code 128: fatal: not a git repo"
    )


def test_branch_commands(run: Mock) -> None:
    git = GitWorkTree("/repo", remote="upstream")
    git.discard_changes()
    git.fetch("main")
    git.reset_hard(git.remote_ref("main"))
    git.checkout_branch("automated/x", start_point="upstream/main")

    assert run.call_args_list == [
        git_call("reset", "--hard", "HEAD"),
        git_call("fetch", "upstream", "main"),
        git_call("reset", "--hard", "upstream/main"),
        git_call("checkout", "-B", "automated/x", "upstream/main"),
    ]


def test_publish_commands(run: Mock) -> None:
    git = GitWorkTree("/repo")
    git.add("t/a/e/images.yaml")
    git.commit("feat: Image values updated")
    git.push("automated/x", force=True)
    git.push("automated/x")

    assert run.call_args_list == [
        git_call("add", "--", "t/a/e/images.yaml"),
        git_call("commit", "-m", "feat: Image values updated"),
        git_call("push", "--force", "origin", "automated/x"),
        git_call("push", "origin", "automated/x"),
    ]


def test_configure_identity(run: Mock) -> None:
    GitWorkTree("/repo").configure_identity("bot", "bot@example.com")
    assert run.call_args_list == [
        git_call("config", "user.name", "bot"),
        git_call("config", "user.email", "bot@example.com"),
    ]


def test_remote_branch_exists(run: Mock) -> None:
    run.return_value = completed(stdout="sha\trefs/heads/automated/x\n")
    assert GitWorkTree("/repo").remote_branch_exists("automated/x")
    run.assert_called_once_with(
        ["git", "ls-remote", "--exit-code", "--heads", "origin", "automated/x"],
        cwd="/repo",
        capture_output=True,
        text=True,
        check=False,
    )


def test_remote_branch_missing(run: Mock) -> None:
    run.return_value = completed(returncode=2)
    assert not GitWorkTree("/repo").remote_branch_exists("automated/x")


def test_remote_branch_lookup_failure(run: Mock) -> None:
    run.return_value = completed(returncode=128, stderr="fatal: could not read")
    with pytest.raises(VcsCommandFailed):
        GitWorkTree("/repo").remote_branch_exists("automated/x")
