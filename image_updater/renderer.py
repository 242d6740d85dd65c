import os
from collections.abc import Mapping
from pathlib import Path

from jinja2 import Template

from image_updater.models import UpdateRequest

PULL_REQUEST_TEMPLATE = Path(__file__).parent / "templates" / "pull_request.md.j2"

COMMIT_MESSAGE = "feat: Image values updated"

TENANT_LABEL_PREFIX = "tenant"
APP_LABEL_PREFIX = "app"
ENV_LABEL_PREFIX = "env"
SERVICE_LABEL_PREFIX = "service"


def ci_run_url(env: Mapping[str, str] = os.environ) -> str | None:
    """
    Link to the CI run we are part of, if any.
    """
    try:
        return (
            f"{env['GITHUB_SERVER_URL']}/{env['GITHUB_REPOSITORY']}"
            f"/actions/runs/{env['GITHUB_RUN_ID']}"
        )
    except KeyError:
        return None


class Renderer:
    """
    Renders the texts of an update: commit message, pull request
    title and body, and the labels of a coordinate.
    """

    def __init__(self, run_url: str | None = None):
        self._run_url = run_url
        with open(PULL_REQUEST_TEMPLATE, encoding="utf-8") as file_obj:
            self._body_template = Template(
                file_obj.read(), keep_trailing_newline=True, trim_blocks=True
            )

    @staticmethod
    def commit_message(request: UpdateRequest) -> str:
        return f"{COMMIT_MESSAGE}\n\n{request.coordinate}: {request.new_image}"

    @staticmethod
    def title(request: UpdateRequest) -> str:
        return (
            f"📦 Service image update `{request.new_image}` "
            f"({request.coordinate})"
        )

    def body(self, request: UpdateRequest, old_image: str | None, branch: str) -> str:
        return self._body_template.render(
            RUN_URL=self._run_url,
            OLD_IMAGE=old_image,
            NEW_IMAGE=request.new_image,
            TENANT=request.tenant,
            APPLICATION=request.application,
            ENVIRONMENT=request.environment,
            SERVICE=request.service,
            BRANCH=branch,
        )

    @staticmethod
    def labels(request: UpdateRequest) -> list[str]:
        return [
            f"{TENANT_LABEL_PREFIX}/{request.tenant}",
            f"{APP_LABEL_PREFIX}/{request.application}",
            f"{ENV_LABEL_PREFIX}/{request.environment}",
            f"{SERVICE_LABEL_PREFIX}/{request.service}",
        ]
