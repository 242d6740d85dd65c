from pathlib import Path

import pytest

from image_updater.exceptions import (
    ApplicationNotFound,
    EnvironmentNotConfigured,
    InvalidApplicationPolicy,
    InvalidEnvironment,
    InvalidPolicyValue,
    PolicyNotFound,
)
from image_updater.policy_resolver import PolicyResolver


@pytest.fixture
def resolver(repo_path: Path) -> PolicyResolver:
    return PolicyResolver(
        repo_path, tenant_environments={"tenant2": ["dev", "pre", "pro"]}
    )


@pytest.fixture
def app1_resolver(tmp_path: Path) -> PolicyResolver:
    tenant = tmp_path / "tenant"
    tenant.mkdir()
    (tenant / "AUTO_MERGE").write_text(
        "app1:\n  des: true\n  pre: true\n  pro: false\n"
    )
    return PolicyResolver(tmp_path)


def test_app1_des(app1_resolver: PolicyResolver) -> None:
    assert app1_resolver.determine_auto_merge("tenant", "app1", "des") is True


def test_app1_pro(app1_resolver: PolicyResolver) -> None:
    assert app1_resolver.determine_auto_merge("tenant", "app1", "pro") is False


def test_unknown_application(app1_resolver: PolicyResolver) -> None:
    with pytest.raises(ApplicationNotFound) as e:
        app1_resolver.determine_auto_merge("tenant", "app2", "des")
    assert "app2" in str(e.value)


def test_invalid_environment(app1_resolver: PolicyResolver) -> None:
    with pytest.raises(InvalidEnvironment) as e:
        app1_resolver.determine_auto_merge("tenant", "app1", "dev")
    assert str(e.value) == "environment dev not in [des, pre, pro]"
    assert e.value.environment == "dev"


def test_tenant_policies(resolver: PolicyResolver) -> None:
    assert resolver.determine_auto_merge("tenant1", "release1", "pre") is True
    assert resolver.determine_auto_merge("tenant1", "release1", "pro") is False
    assert resolver.determine_auto_merge("tenant2", "releaseA", "dev") is True
    assert resolver.determine_auto_merge("tenant2", "releaseB", "pre") is False


def test_tenant_specific_environments(resolver: PolicyResolver) -> None:
    assert resolver.supported_environments("tenant2") == {"dev", "pre", "pro"}
    assert resolver.supported_environments("tenant1") == {"des", "pre", "pro"}
    with pytest.raises(InvalidEnvironment) as e:
        resolver.determine_auto_merge("tenant2", "releaseA", "des")
    assert str(e.value) == "environment des not in [dev, pre, pro]"


def test_environment_not_configured(resolver: PolicyResolver) -> None:
    with pytest.raises(EnvironmentNotConfigured) as e:
        resolver.determine_auto_merge("tenant1", "release2", "pro")
    assert "pro" in str(e.value)
    assert "release2" in str(e.value)


def test_non_boolean_value(resolver: PolicyResolver) -> None:
    with pytest.raises(InvalidPolicyValue):
        resolver.determine_auto_merge("tenant2", "releaseB", "pro")


def test_policy_file_not_found(resolver: PolicyResolver, repo_path: Path) -> None:
    with pytest.raises(PolicyNotFound) as e:
        resolver.determine_auto_merge("tenant9", "release1", "des")
    assert str(repo_path / "tenant9" / "AUTO_MERGE") in str(e.value)


def test_policy_file_invalid(resolver: PolicyResolver) -> None:
    with pytest.raises(PolicyNotFound):
        resolver.determine_auto_merge("tenant3", "app1", "des")


def test_custom_policy_file_name(tmp_path: Path) -> None:
    (tmp_path / "t").mkdir()
    (tmp_path / "t" / "automerge.yaml").write_text("a:\n  pro: true\n")
    resolver = PolicyResolver(tmp_path, file_name="automerge.yaml")
    assert resolver.determine_auto_merge("t", "a", "pro") is True


def test_application_policy_not_a_mapping(tmp_path: Path) -> None:
    (tmp_path / "t").mkdir()
    (tmp_path / "t" / "AUTO_MERGE").write_text("app1: true\n")
    resolver = PolicyResolver(tmp_path)
    with pytest.raises(InvalidApplicationPolicy) as e:
        resolver.determine_auto_merge("t", "app1", "des")
    assert str(e.value) == (
        f"policy of application app1 in {tmp_path / 't' / 'AUTO_MERGE'} "
        "must be a mapping of environments, got True"
    )
