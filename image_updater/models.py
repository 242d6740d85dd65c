from collections.abc import (
    Iterable,
    Mapping,
)
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
)


class Stage(Enum):
    MATERIALIZE_BRANCH = "MaterializeBranch"
    MUTATE_MANIFEST = "MutateManifest"
    PUBLISH_CHANGES = "PublishChanges"
    ENSURE_OPEN_PULL_REQUEST = "EnsureOpenPullRequest"
    ANNOTATE = "Annotate"
    MERGE_DECISION = "MergeDecision"


class SkipReason(Enum):
    NO_IMAGE_CHANGE = "NoImageChange"
    DRY_RUN = "DryRun"


class UpdateRequest(BaseModel, frozen=True):
    tenant: str = Field(min_length=1)
    application: str = Field(
        min_length=1, validation_alias=AliasChoices("application", "app")
    )
    environment: str = Field(
        min_length=1, validation_alias=AliasChoices("environment", "env")
    )
    service: str = Field(min_length=1)
    new_image: str = Field(
        min_length=1, validation_alias=AliasChoices("new_image", "newImage", "image")
    )
    reviewers: tuple[str, ...] = ()

    @property
    def coordinate(self) -> str:
        return f"{self.tenant}/{self.application}/{self.environment}/{self.service}"


@dataclass(frozen=True)
class PullRequestHandle:
    number: int
    branch_name: str


@dataclass(frozen=True)
class Merged:
    pr_number: int

    def __str__(self) -> str:
        return f"merged (PR #{self.pr_number})"


@dataclass(frozen=True)
class OpenedUnmerged:
    pr_number: int

    def __str__(self) -> str:
        return f"open, not merged (PR #{self.pr_number})"


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason

    def __str__(self) -> str:
        return f"skipped ({self.reason.value})"


@dataclass(frozen=True)
class Failed:
    stage: Stage | None
    error: Exception

    def __str__(self) -> str:
        stage = self.stage.value if self.stage else "unknown stage"
        return f"failed at {stage}: {self.error}"


UpdateOutcome = Merged | OpenedUnmerged | Skipped | Failed


def outcome_name(outcome: UpdateOutcome) -> str:
    return type(outcome).__name__


def parse_input_matrix(data: Mapping[str, Any]) -> list[UpdateRequest]:
    """
    Builds the update requests out of an input matrix document:

    {"matrix": [{"tenant": ..., "app": ..., "env": ..., "service": ...,
                 "image": ..., "reviewers": [...]}, ...]}

    An entry listing `service_names` yields one request per service.
    """
    requests: list[UpdateRequest] = []
    for entry in data["matrix"]:
        requests.extend(_expand_entry(entry))
    return requests


def _expand_entry(entry: Mapping[str, Any]) -> Iterable[UpdateRequest]:
    services = entry.get("service_names")
    if services is None:
        yield UpdateRequest(**entry)
        return
    fields = {k: v for k, v in entry.items() if k != "service_names"}
    for service in services:
        yield UpdateRequest(**fields, service=service)
