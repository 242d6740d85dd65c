from pathlib import Path

import pytest

from image_updater.settings import (
    GITHUB_TOKEN,
    load_settings,
)
from image_updater.utils import config
from image_updater.utils.config import ConfigNotFound

CONFIG_TOML = """
[github]
repo = "https://github.com/org/deployments"

[git]
workdir = "/work"
source_branch = "master"

[manifests]
base_path = "tenants"

[tenants.tenant2]
environments = ["dev", "pre", "pro"]
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


def test_load_settings(config_file: Path) -> None:
    config.init_from_toml(str(config_file))
    settings = load_settings()

    assert settings.github.repo == "https://github.com/org/deployments"
    assert settings.github.base_branch is None
    assert settings.git.source_branch == "master"
    assert settings.git.remote == "origin"
    assert settings.git.user_name == "github-actions"
    assert settings.manifests.environments == ["des", "pre", "pro"]
    assert settings.manifests.policy_file_name == "AUTO_MERGE"
    assert settings.manifests_path == Path("/work/tenants")
    assert settings.tenant_environments == {"tenant2": ["dev", "pre", "pro"]}


def test_relative_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config.init({"github": {"repo": "o/r"}, "git": {"workdir": "repo"}})
    settings = load_settings()

    assert settings.manifests_path.is_absolute()
    assert settings.manifests_path == tmp_path.resolve() / "repo"


def test_github_token_from_environment(
    config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(GITHUB_TOKEN, "env-token")
    config.init_from_toml(str(config_file))
    assert load_settings().github_token == "env-token"


def test_github_token_missing(
    config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(GITHUB_TOKEN, raising=False)
    config.init_from_toml(str(config_file))
    with pytest.raises(ConfigNotFound):
        load_settings().github_token  # noqa: B018


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFound):
        config.init_from_toml(str(tmp_path / "missing.toml"))
