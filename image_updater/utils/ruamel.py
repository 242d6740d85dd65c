from pathlib import Path
from typing import Any

from ruamel import yaml


def create_ruamel_instance(
    preserve_quotes: bool = True,
    explicit_start: bool = False,
    width: int = 4096,
    pure: bool = False,
) -> yaml.YAML:
    ruamel_instance = yaml.YAML(pure=pure)

    ruamel_instance.preserve_quotes = preserve_quotes
    ruamel_instance.explicit_start = explicit_start
    ruamel_instance.width = width

    return ruamel_instance


def load_file(path: Path, yml: yaml.YAML | None = None) -> Any:
    """
    Round-trip load of a yaml file. Comments, key order and quoting
    survive a later `dump_file` of the returned document.

    :raises:
        OSError: the file can not be read
        ruamel.yaml.YAMLError: the content is not valid yaml
    """
    yml = yml or create_ruamel_instance(pure=True)
    with open(path, encoding="utf-8") as f:
        return yml.load(f)


def dump_file(path: Path, data: Any, yml: yaml.YAML | None = None) -> None:
    yml = yml or create_ruamel_instance(pure=True)
    with open(path, "w", encoding="utf-8") as f:
        yml.dump(data, f)
