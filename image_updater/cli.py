import json
import logging
import os
import sys
from collections.abc import Callable
from io import TextIOWrapper

import click
import sentry_sdk
from pydantic import ValidationError
from sentry_sdk.integrations.logging import LoggingIntegration

from image_updater import metrics
from image_updater.batch_runner import (
    BatchRunner,
    has_failures,
    log_summary,
)
from image_updater.coordinator import UpdateCoordinator
from image_updater.exceptions import ImageUpdaterError
from image_updater.manifest_store import ManifestStore
from image_updater.models import (
    UpdateRequest,
    parse_input_matrix,
)
from image_updater.policy_resolver import PolicyResolver
from image_updater.renderer import (
    Renderer,
    ci_run_url,
)
from image_updater.settings import (
    Settings,
    load_settings,
)
from image_updater.status import ExitCodes
from image_updater.utils.config import ConfigNotFound
from image_updater.utils.environment import (
    IMAGE_UPDATER_CONFIG,
    init_env,
)
from image_updater.utils.git import GitWorkTree
from image_updater.utils.github_api import GithubPullRequestApi


def init_sentry() -> None:
    if not os.getenv("SENTRY_DSN"):
        return
    match os.environ.get("SENTRY_EVENT_LEVEL", "CRITICAL").upper():
        case "CRITICAL":
            sentry_event_level = logging.CRITICAL
        case "ERROR":
            sentry_event_level = logging.ERROR
        case _:
            raise ValueError(
                "Invalid value for SENTRY_EVENT_LEVEL. Must be CRITICAL or ERROR."
            )

    sentry_sdk.init(
        os.environ["SENTRY_DSN"],
        integrations=[
            LoggingIntegration(event_level=sentry_event_level),
        ],
    )


def config_file(function: Callable) -> Callable:
    help_msg = "Path to configuration file in toml format."
    function = click.option(
        "--config",
        "configfile",
        required=True,
        default=lambda: os.environ.get(IMAGE_UPDATER_CONFIG),
        help=help_msg,
    )(function)
    return function


def log_level(function: Callable) -> Callable:
    function = click.option(
        "--log-level",
        help="log-level of the command. Defaults to INFO.",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    )(function)
    return function


def dry_run(function: Callable) -> Callable:
    help_msg = (
        "If `true`, it will only update the manifests locally and print "
        "the pull requests that would be opened and merged."
    )

    function = click.option("--dry-run/--no-dry-run", default=False, help=help_msg)(
        function
    )
    return function


def read_requests(
    input_matrix: str | None, input_matrix_file: TextIOWrapper | None
) -> list[UpdateRequest]:
    if input_matrix_file is not None:
        input_matrix = input_matrix_file.read()
    if not input_matrix:
        raise click.UsageError(
            "one of --input-matrix or --input-matrix-file is required"
        )
    try:
        return parse_input_matrix(json.loads(input_matrix))
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        logging.error(f"invalid input matrix: {e}")
        sys.exit(ExitCodes.INVALID_INPUT)


def build_runner(settings: Settings, dry_run: bool) -> BatchRunner:
    git = GitWorkTree(settings.git.workdir, remote=settings.git.remote)
    git.configure_identity(settings.git.user_name, settings.git.user_email)
    hosting = GithubPullRequestApi(
        repo_url=settings.github.repo,
        token=settings.github_token,
        base_branch=settings.github.base_branch,
        timeout=settings.github.timeout,
    )
    coordinator = UpdateCoordinator(
        git=git,
        hosting=hosting,
        manifests=ManifestStore(
            settings.manifests_path, file_name=settings.manifests.file_name
        ),
        policy=PolicyResolver(
            settings.manifests_path,
            file_name=settings.manifests.policy_file_name,
            environments=settings.manifests.environments,
            tenant_environments=settings.tenant_environments,
        ),
        renderer=Renderer(run_url=ci_run_url()),
        source_branch=settings.git.source_branch,
        dry_run=dry_run,
    )
    return BatchRunner(coordinator)


@click.group()
@config_file
@dry_run
@log_level
@click.pass_context
def root(
    ctx: click.Context, configfile: str, dry_run: bool, log_level: str | None
) -> None:
    ctx.ensure_object(dict)
    init_sentry()
    init_env(log_level=log_level, config_file=configfile, dry_run=dry_run)
    ctx.obj["dry_run"] = dry_run


@root.command(short_help="Roll out image references and open pull requests.")
@click.option(
    "--input-matrix",
    envvar="INPUT_MATRIX",
    help='JSON document {"matrix": [{"tenant", "app", "env", "service", '
    '"image", "reviewers"}, ...]}.',
)
@click.option(
    "--input-matrix-file",
    type=click.File("r"),
    help="File holding the input matrix JSON document.",
)
@click.option(
    "--pushgateway-url",
    envvar="PUSHGATEWAY_URL",
    help="Push outcome metrics to this Prometheus Pushgateway.",
)
@click.pass_context
def update_images(
    ctx: click.Context,
    input_matrix: str | None,
    input_matrix_file: TextIOWrapper | None,
    pushgateway_url: str | None,
) -> None:
    requests = read_requests(input_matrix, input_matrix_file)
    logging.info(f"processing {len(requests)} update request(s)")

    try:
        runner = build_runner(load_settings(), dry_run=ctx.obj["dry_run"])
    except (ConfigNotFound, ValidationError, ImageUpdaterError) as e:
        logging.error(f"can not set up image-updater: {e}")
        sys.exit(ExitCodes.ERROR)

    outcomes = runner.run(requests)
    log_summary(requests, outcomes)

    if pushgateway_url:
        try:
            metrics.push(pushgateway_url)
        except OSError as e:
            logging.error(f"Error pushing to PushGateway: {e}")

    if has_failures(outcomes):
        sys.exit(ExitCodes.ERROR)

