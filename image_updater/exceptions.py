from collections.abc import (
    Iterable,
    Sequence,
)
from pathlib import Path
from typing import Any


class ImageUpdaterError(Exception):
    pass


class ManifestNotFound(ImageUpdaterError):
    def __init__(self, path: Path, reason: Any) -> None:
        self.path = path
        super().__init__(f"error trying to read manifest file {path}: {reason}")


class ServiceNotFound(ImageUpdaterError):
    def __init__(self, service: str, path: Path) -> None:
        self.service = service
        self.path = path
        super().__init__(f"no service {service} found in file {path}")


class NoImageChange(ImageUpdaterError):
    """
    Used when the requested image is already in place.
    This is a control-flow signal, not a failure.
    """

    def __init__(self, image: str) -> None:
        self.image = image
        super().__init__(f"image did not change: old = new = {image}")


class PolicyError(ImageUpdaterError):
    pass


class PolicyNotFound(PolicyError):
    def __init__(self, path: Path, reason: Any) -> None:
        self.path = path
        super().__init__(f"error trying to read auto-merge policy {path}: {reason}")


class ApplicationNotFound(PolicyError):
    def __init__(self, application: str, path: Path) -> None:
        self.application = application
        super().__init__(f"application not found: {application} (policy {path})")


class InvalidApplicationPolicy(PolicyError):
    def __init__(self, application: str, value: Any, path: Path) -> None:
        self.application = application
        super().__init__(
            f"policy of application {application} in {path} must be a mapping "
            f"of environments, got {value!r}"
        )


class InvalidEnvironment(PolicyError):
    def __init__(self, environment: str, supported: Iterable[str]) -> None:
        self.environment = environment
        self.supported = sorted(supported)
        super().__init__(
            f"environment {environment} not in [{', '.join(self.supported)}]"
        )


class EnvironmentNotConfigured(PolicyError):
    def __init__(self, application: str, environment: str, path: Path) -> None:
        self.application = application
        self.environment = environment
        super().__init__(
            f"environment {environment} not configured for application "
            f"{application} in {path}"
        )


class InvalidPolicyValue(PolicyError):
    def __init__(
        self, application: str, environment: str, value: Any, path: Path
    ) -> None:
        super().__init__(
            f"auto-merge value for {application}/{environment} in {path} "
            f"must be a boolean, got {value!r}"
        )


class VcsCommandFailed(ImageUpdaterError):
    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"{' '.join(command)} failed with exit code {returncode}: {stderr.strip()}"
        )


class HostingApiFailed(ImageUpdaterError):
    def __init__(self, action: str, reason: Any) -> None:
        self.action = action
        super().__init__(f"{action} failed: {reason}")


class CoordinateProcessingError(ImageUpdaterError):
    """
    Used when a coordinate could not be processed up to a PR.
    Carries the stage that failed.
    """

    def __init__(self, stage: Any, coordinate: str, reason: Any) -> None:
        self.stage = stage
        self.coordinate = coordinate
        super().__init__(f"{stage.value} failed for {coordinate}. Reason: {reason}")
