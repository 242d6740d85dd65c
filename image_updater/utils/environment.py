import logging
import os
import sys

from image_updater.utils import config
from image_updater.utils.config import ConfigNotFound

IMAGE_UPDATER_CONFIG = "IMAGE_UPDATER_CONFIG"
IMAGE_UPDATER_LOG_LEVEL = "IMAGE_UPDATER_LOG_LEVEL"

LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def log_fmt(dry_run: bool | None = None) -> str:
    log_fmt = (
        "[%(asctime)s] [%(levelname)s] [DRY-RUN] "
        if dry_run
        else "[%(asctime)s] [%(levelname)s] "
    )

    log_fmt += "[%(filename)s:%(funcName)s:%(lineno)d] - %(message)s"

    return log_fmt


def init_env(
    log_level: str | None = None,
    config_file: str | None = None,
    dry_run: bool | None = None,
) -> None:
    # store env configs in environment variables. this way child processes
    # inherit them and can run `init_env()` with no parameters.
    if log_level:
        os.environ[IMAGE_UPDATER_LOG_LEVEL] = log_level
    if config_file:
        os.environ[IMAGE_UPDATER_CONFIG] = config_file

    # init loglevel
    logging.basicConfig(
        format=log_fmt(dry_run=dry_run),
        datefmt=LOG_DATEFMT,
        level=getattr(logging, os.environ.get(IMAGE_UPDATER_LOG_LEVEL, "INFO")),
    )

    # init basic config
    config_file = os.environ.get(IMAGE_UPDATER_CONFIG)
    if not config_file:
        logging.fatal("no config file for image-updater specified")
        sys.exit(1)
    try:
        config.init_from_toml(config_file)
    except ConfigNotFound as e:
        logging.fatal(str(e))
        sys.exit(1)
