from collections.abc import (
    Iterable,
    Mapping,
)
from pathlib import Path
from typing import Any

from ruamel.yaml import YAMLError

from image_updater.exceptions import (
    ApplicationNotFound,
    EnvironmentNotConfigured,
    InvalidApplicationPolicy,
    InvalidEnvironment,
    InvalidPolicyValue,
    PolicyNotFound,
)
from image_updater.settings import DEFAULT_ENVIRONMENTS
from image_updater.utils.ruamel import (
    create_ruamel_instance,
    load_file,
)

POLICY_FILE_NAME = "AUTO_MERGE"


class PolicyResolver:
    """
    Answers whether pull requests for a tenant/application/environment
    may be merged automatically. The policy of a tenant is a yaml
    document at <base_path>/<tenant>/<file_name>:

        app1:
          des: true
          pre: true
          pro: false

    Any ambiguity (unknown application, environment outside the
    supported set, environment missing, non boolean value) raises.
    There is no default answer.
    """

    def __init__(
        self,
        base_path: Path | str,
        file_name: str = POLICY_FILE_NAME,
        environments: Iterable[str] = DEFAULT_ENVIRONMENTS,
        tenant_environments: Mapping[str, Iterable[str]] | None = None,
    ):
        self._base_path = Path(base_path)
        self._file_name = file_name
        self._environments = frozenset(environments)
        self._tenant_environments = {
            tenant: frozenset(envs)
            for tenant, envs in (tenant_environments or {}).items()
        }
        self._yml = create_ruamel_instance(pure=True)

    def path(self, tenant: str) -> Path:
        return self._base_path / tenant / self._file_name

    def supported_environments(self, tenant: str) -> frozenset[str]:
        return self._tenant_environments.get(tenant, self._environments)

    def _load(self, path: Path) -> Mapping[str, Any]:
        try:
            content = load_file(path, yml=self._yml)
        except (OSError, YAMLError) as e:
            raise PolicyNotFound(path, e) from e
        if not isinstance(content, Mapping):
            raise PolicyNotFound(path, "content is not a mapping of applications")
        return content

    def determine_auto_merge(
        self, tenant: str, application: str, environment: str
    ) -> bool:
        path = self.path(tenant)
        policy = self._load(path)

        if application not in policy:
            raise ApplicationNotFound(application, path)
        app_policy = policy[application]
        if not isinstance(app_policy, Mapping):
            raise InvalidApplicationPolicy(application, app_policy, path)

        supported = self.supported_environments(tenant)
        if environment not in supported:
            raise InvalidEnvironment(environment, supported)

        if environment not in app_policy:
            raise EnvironmentNotConfigured(application, environment, path)

        value = app_policy[environment]
        if not isinstance(value, bool):
            raise InvalidPolicyValue(application, environment, value, path)
        return value
