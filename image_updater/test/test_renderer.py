import pytest

from image_updater.models import UpdateRequest
from image_updater.renderer import (
    Renderer,
    ci_run_url,
)


@pytest.fixture
def request_() -> UpdateRequest:
    return UpdateRequest(
        tenant="tenant1",
        application="release1",
        environment="pro",
        service="app-server",
        new_image="foo/common:2",
    )


def test_labels(request_: UpdateRequest) -> None:
    assert Renderer.labels(request_) == [
        "tenant/tenant1",
        "app/release1",
        "env/pro",
        "service/app-server",
    ]


def test_title(request_: UpdateRequest) -> None:
    title = Renderer.title(request_)
    assert "`foo/common:2`" in title
    assert "tenant1/release1/pro/app-server" in title


def test_commit_message(request_: UpdateRequest) -> None:
    assert Renderer.commit_message(request_).startswith("feat: Image values updated")


def test_body_with_run_url(request_: UpdateRequest) -> None:
    body = Renderer(run_url="https://github.com/o/r/actions/runs/1").body(
        request_, old_image="foo/common:1", branch="automated/b"
    )
    assert "[this](https://github.com/o/r/actions/runs/1)" in body
    assert "Updated image `foo/common:1` to `foo/common:2` in service `app-server`" in (
        body
    )
    assert "| tenant1 | release1 | pro | app-server |" in body
    assert "`automated/b`" in body


def test_body_without_run_url(request_: UpdateRequest) -> None:
    body = Renderer().body(request_, old_image="foo/common:1", branch="automated/b")
    assert "[this]" not in body
    assert "Automated PR" in body


def test_ci_run_url() -> None:
    env = {
        "GITHUB_SERVER_URL": "https://github.com",
        "GITHUB_REPOSITORY": "o/r",
        "GITHUB_RUN_ID": "123",
    }
    assert ci_run_url(env) == "https://github.com/o/r/actions/runs/123"


def test_ci_run_url_outside_ci() -> None:
    assert ci_run_url({}) is None
