import logging
import subprocess
from collections.abc import Sequence

from image_updater.exceptions import VcsCommandFailed


def run(args: Sequence[str], wd: str) -> str:
    cmd = ["git", *args]
    logging.debug(f"running {' '.join(cmd)} in {wd}")
    result = subprocess.run(cmd, cwd=wd, capture_output=True, text=True, check=False)
    if result.returncode != 0:
        raise VcsCommandFailed(cmd, result.returncode, result.stderr)
    return result.stdout


class GitWorkTree:
    """
    Thin wrapper around a local checkout. Every method is one blocking
    git invocation; failures raise VcsCommandFailed.

    :param wd: path of the checkout
    :param remote: name of the remote branches are pushed to
    """

    def __init__(self, wd: str, remote: str = "origin"):
        self.wd = wd
        self.remote = remote

    def run(self, *args: str) -> str:
        return run(args, self.wd)

    def remote_ref(self, branch: str) -> str:
        return f"{self.remote}/{branch}"

    def configure_identity(self, user_name: str, user_email: str) -> None:
        self.run("config", "user.name", user_name)
        self.run("config", "user.email", user_email)

    def discard_changes(self) -> None:
        # drops uncommitted changes to tracked files, untracked files stay
        self.run("reset", "--hard", "HEAD")

    def fetch(self, ref: str) -> None:
        self.run("fetch", self.remote, ref)

    def checkout(self, ref: str) -> None:
        self.run("checkout", ref)

    def checkout_branch(self, branch: str, start_point: str) -> None:
        # -B creates the branch or resets an existing local one
        self.run("checkout", "-B", branch, start_point)

    def reset_hard(self, ref: str) -> None:
        self.run("reset", "--hard", ref)

    def remote_branch_exists(self, branch: str) -> bool:
        try:
            self.run("ls-remote", "--exit-code", "--heads", self.remote, branch)
        except VcsCommandFailed as e:
            # ls-remote --exit-code signals "no matching refs" with 2
            if e.returncode == 2:
                return False
            raise
        return True

    def add(self, *paths: str) -> None:
        self.run("add", "--", *paths)

    def commit(self, message: str) -> None:
        self.run("commit", "-m", message)

    def push(self, branch: str, force: bool = False) -> None:
        args = ["push"]
        if force:
            args.append("--force")
        args += [self.remote, branch]
        self.run(*args)
