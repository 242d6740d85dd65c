from typing import Any

import toml

_config: dict[str, Any] | None = None


class ConfigNotFound(Exception):
    pass


def get_config() -> dict[str, Any]:
    if _config is None:
        raise ConfigNotFound("config was not initialized")
    return _config


def init(config: dict[str, Any]) -> dict[str, Any]:
    global _config  # noqa: PLW0603
    _config = config
    return _config


def init_from_toml(configfile: str) -> dict[str, Any]:
    try:
        return init(toml.load(configfile))
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigNotFound(f"can not load config file {configfile}: {e!s}") from e
