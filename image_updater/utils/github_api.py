import logging
import os
from collections.abc import (
    Generator,
    Iterable,
)
from contextlib import contextmanager
from types import TracebackType
from urllib.parse import urlparse

from github import (
    Github,
    GithubException,
)
from github.PullRequest import PullRequest
from sretoolbox.utils import retry

from image_updater.exceptions import HostingApiFailed

GH_BASE_URL = os.environ.get("GITHUB_API", "https://api.github.com")

DEFAULT_LABEL_COLOR = "ededed"


@contextmanager
def _api_call(action: str) -> Generator[None, None, None]:
    try:
        yield
    except GithubException as e:
        raise HostingApiFailed(action, e) from e


class GithubPullRequestApi:
    """
    Github client for the pull request workflow of a single repository.
    Owner, repository and base branch are resolved once and used for
    every call.

    :param repo_url: the Github repository URL (or owner/name)
    :param token: auth token for Github
    :param base_branch: branch pull requests target, defaults to the
        repository's default branch
    """

    def __init__(
        self,
        repo_url: str,
        token: str,
        base_branch: str | None = None,
        timeout: int = 30,
        github: Github | None = None,
    ):
        parsed_repo_url = urlparse(repo_url)
        repo = parsed_repo_url.path.strip("/")

        git_cli = github
        if not git_cli:
            git_cli = Github(token, base_url=GH_BASE_URL, timeout=timeout)
        with _api_call(f"get repository {repo}"):
            self._repo = git_cli.get_repo(repo)
            self.owner = self._repo.owner.login
            self.base_branch = base_branch or self._repo.default_branch

    def __enter__(self) -> "GithubPullRequestApi":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.cleanup()

    def __str__(self) -> str:
        return self._repo.html_url

    def cleanup(self) -> None:
        """
        Nothing to release; kept for use as a context manager
        """

    def _get_pull(self, number: int) -> PullRequest:
        return self._repo.get_pull(number)

    @retry(exceptions=HostingApiFailed)
    def find_open_pull_request(self, branch: str) -> int | None:
        with _api_call(f"list open pull requests for {branch}"):
            pulls = self._repo.get_pulls(
                state="open", head=f"{self.owner}:{branch}", base=self.base_branch
            )
            for pr in pulls:
                return pr.number
        return None

    def create_pull_request(self, branch: str, title: str, body: str) -> int:
        with _api_call(f"create pull request for {branch}"):
            pr = self._repo.create_pull(
                title=title, body=body, base=self.base_branch, head=branch
            )
        return pr.number

    @retry(exceptions=HostingApiFailed)
    def _ensure_labels_exist(self, labels: Iterable[str]) -> None:
        with _api_call("list repository labels"):
            existing = {label.name for label in self._repo.get_labels()}
        for label in labels:
            if label in existing:
                continue
            logging.info(f"creating label {label} in {self._repo.full_name}")
            with _api_call(f"create label {label}"):
                self._repo.create_label(name=label, color=DEFAULT_LABEL_COLOR)

    def set_labels(self, number: int, labels: Iterable[str]) -> None:
        """
        Replaces the whole label set of the pull request.
        """
        labels = list(labels)
        self._ensure_labels_exist(labels)
        with _api_call(f"set labels on pull request #{number}"):
            self._get_pull(number).set_labels(*labels)

    def request_reviewers(self, number: int, reviewers: Iterable[str]) -> None:
        with _api_call(f"request reviewers on pull request #{number}"):
            self._get_pull(number).create_review_request(reviewers=list(reviewers))

    def merge_pull_request(self, number: int) -> bool:
        with _api_call(f"merge pull request #{number}"):
            status = self._get_pull(number).merge()
        return bool(status.merged)
