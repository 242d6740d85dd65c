import os
from pathlib import Path

from pydantic import (
    BaseModel,
    Field,
)

from image_updater.utils import config
from image_updater.utils.config import ConfigNotFound

DEFAULT_ENVIRONMENTS = ("des", "pre", "pro")
GITHUB_TOKEN = "GITHUB_TOKEN"


class GithubSettings(BaseModel):
    repo: str
    token: str | None = None
    base_branch: str | None = None
    timeout: int = 30


class GitSettings(BaseModel):
    workdir: str = "."
    remote: str = "origin"
    source_branch: str = "main"
    user_name: str = "github-actions"
    user_email: str = "github-actions@github.com"


class ManifestSettings(BaseModel):
    base_path: str = "."
    file_name: str = "images.yaml"
    policy_file_name: str = "AUTO_MERGE"
    environments: list[str] = Field(default_factory=lambda: list(DEFAULT_ENVIRONMENTS))


class TenantSettings(BaseModel):
    environments: list[str]


class Settings(BaseModel):
    github: GithubSettings
    git: GitSettings = Field(default_factory=GitSettings)
    manifests: ManifestSettings = Field(default_factory=ManifestSettings)
    tenants: dict[str, TenantSettings] = Field(default_factory=dict)

    @property
    def github_token(self) -> str:
        token = self.github.token or os.environ.get(GITHUB_TOKEN)
        if not token:
            raise ConfigNotFound(
                f"no github token: set github.token or the {GITHUB_TOKEN} variable"
            )
        return token

    @property
    def manifests_path(self) -> Path:
        # absolute, git runs with the checkout as its working directory
        return Path(self.git.workdir).resolve() / self.manifests.base_path

    @property
    def tenant_environments(self) -> dict[str, list[str]]:
        return {name: t.environments for name, t in self.tenants.items()}


def load_settings() -> Settings:
    return Settings(**config.get_config())
