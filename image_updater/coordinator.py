import logging

from image_updater.branch_identity import derive_branch_name
from image_updater.exceptions import (
    CoordinateProcessingError,
    HostingApiFailed,
    ManifestNotFound,
    NoImageChange,
    PolicyError,
    ServiceNotFound,
    VcsCommandFailed,
)
from image_updater.manifest_store import ManifestStore
from image_updater.models import (
    Merged,
    OpenedUnmerged,
    PullRequestHandle,
    SkipReason,
    Skipped,
    Stage,
    UpdateOutcome,
    UpdateRequest,
)
from image_updater.policy_resolver import PolicyResolver
from image_updater.renderer import Renderer
from image_updater.utils.git import GitWorkTree
from image_updater.utils.github_api import GithubPullRequestApi

LOG = logging.getLogger(__name__)


class UpdateCoordinator:
    """
    Drives a single update request through its stages:

    MaterializeBranch -> MutateManifest -> PublishChanges
      -> EnsureOpenPullRequest -> Annotate -> MergeDecision

    The branch of a coordinate is always the same (see branch_identity),
    so running the same request again reuses the branch and its open PR
    instead of piling up new ones.

    Stages that leave nothing to work with (branch, manifest, PR) raise
    CoordinateProcessingError. Publishing, annotating and the merge
    policy only log a warning when they fail. An unresolvable merge
    policy never merges.
    """

    def __init__(
        self,
        git: GitWorkTree,
        hosting: GithubPullRequestApi,
        manifests: ManifestStore,
        policy: PolicyResolver,
        renderer: Renderer,
        source_branch: str,
        dry_run: bool = False,
    ):
        self._git = git
        self._hosting = hosting
        self._manifests = manifests
        self._policy = policy
        self._renderer = renderer
        self._source_branch = source_branch
        self._dry_run = dry_run

    def process(self, request: UpdateRequest) -> UpdateOutcome:
        branch = derive_branch_name(
            request.tenant, request.application, request.environment, request.service
        )
        LOG.info(f"> {request.coordinate}: using branch {branch}")

        try:
            self._materialize_branch(request, branch)
            old_image = self._mutate_manifest(request)
        except NoImageChange as e:
            LOG.info(f"> Skipping PR for {request.coordinate}: {e}")
            return Skipped(SkipReason.NO_IMAGE_CHANGE)

        if self._dry_run:
            LOG.info(
                f"> {request.coordinate}: would push {branch}, open a PR updating "
                f"{old_image} to {request.new_image} and apply the merge policy"
            )
            return Skipped(SkipReason.DRY_RUN)

        self._publish_changes(request, branch)
        pr = self._ensure_open_pull_request(request, branch, old_image)
        self._annotate(request, pr)
        return self._merge_decision(request, pr)

    def _materialize_branch(self, request: UpdateRequest, branch: str) -> None:
        source = self._git.remote_ref(self._source_branch)
        try:
            self._git.discard_changes()
            self._git.fetch(self._source_branch)
            self._git.checkout(self._source_branch)
            self._git.reset_hard(source)
            exists = self._git.remote_branch_exists(branch)
            self._git.checkout_branch(branch, start_point=source)
        except VcsCommandFailed as e:
            raise CoordinateProcessingError(
                Stage.MATERIALIZE_BRANCH, request.coordinate, e
            ) from e
        if exists:
            LOG.info(f"> Branch {branch} already existed. It was reset to {source}")
        else:
            LOG.info(f"> Branch {branch} does not exist in remote, created from {source}")

    def _mutate_manifest(self, request: UpdateRequest) -> str | None:
        try:
            old_image = self._manifests.set_image(
                request.tenant,
                request.application,
                request.environment,
                request.service,
                request.new_image,
            )
        except (ManifestNotFound, ServiceNotFound) as e:
            raise CoordinateProcessingError(
                Stage.MUTATE_MANIFEST, request.coordinate, e
            ) from e
        # exact comparison, tags are not normalized
        if old_image == request.new_image:
            raise NoImageChange(request.new_image)
        LOG.info(f"> File updated! Old image value: {old_image}")
        return old_image

    def _publish_changes(self, request: UpdateRequest, branch: str) -> None:
        path = self._manifests.path(
            request.tenant, request.application, request.environment
        )
        try:
            self._git.add(str(path))
            self._git.commit(self._renderer.commit_message(request))
            self._git.push(branch, force=True)
        except VcsCommandFailed as e:
            # an already open PR of a previous push can still be acted upon
            LOG.warning(f"> ERROR TRYING TO PUBLISH CHANGES for {branch}: {e}")
            return
        LOG.info(f"> Pushed changes to {self._git.remote_ref(branch)}")

    def _ensure_open_pull_request(
        self, request: UpdateRequest, branch: str, old_image: str | None
    ) -> PullRequestHandle:
        try:
            number = self._hosting.find_open_pull_request(branch)
            if number is not None:
                LOG.info(f"> There is an open PR already for {branch}: #{number}")
                return PullRequestHandle(number=number, branch_name=branch)
            number = self._hosting.create_pull_request(
                branch,
                title=self._renderer.title(request),
                body=self._renderer.body(request, old_image=old_image, branch=branch),
            )
        except HostingApiFailed as e:
            raise CoordinateProcessingError(
                Stage.ENSURE_OPEN_PULL_REQUEST, request.coordinate, e
            ) from e
        LOG.info(f"> Created PR number: {number}")
        return PullRequestHandle(number=number, branch_name=branch)

    def _annotate(self, request: UpdateRequest, pr: PullRequestHandle) -> None:
        labels = self._renderer.labels(request)
        try:
            self._hosting.set_labels(pr.number, labels)
            LOG.info(f"> PR #{pr.number} labels set to {labels}")
        except HostingApiFailed as e:
            LOG.warning(f"> Labels of PR #{pr.number} were not set: {e}")

        if not request.reviewers:
            LOG.info(f"> No reviewers requested for PR #{pr.number}")
            return
        try:
            self._hosting.request_reviewers(pr.number, request.reviewers)
            LOG.info(f"> Added reviewers to PR #{pr.number}: {list(request.reviewers)}")
        except HostingApiFailed as e:
            LOG.warning(f"> No reviewers were added to PR #{pr.number}: {e}")

    def _merge_decision(
        self, request: UpdateRequest, pr: PullRequestHandle
    ) -> UpdateOutcome:
        try:
            auto_merge = self._policy.determine_auto_merge(
                request.tenant, request.application, request.environment
            )
        except PolicyError as e:
            LOG.warning(
                f"> Problem reading auto-merge policy for {request.coordinate}. "
                f"Setting auto-merge to false. {e}"
            )
            auto_merge = False

        if not auto_merge:
            LOG.info(
                f"> {request.tenant}/{request.application}/{request.environment} "
                f"does NOT allow auto-merge, PR #{pr.number} stays open"
            )
            return OpenedUnmerged(pr.number)

        try:
            merged = self._hosting.merge_pull_request(pr.number)
        except HostingApiFailed as e:
            LOG.warning(f"> PR #{pr.number} was not merged: {e}")
            return OpenedUnmerged(pr.number)
        if not merged:
            LOG.warning(f"> PR #{pr.number} was not merged")
            return OpenedUnmerged(pr.number)
        LOG.info(f"> Successfully merged PR number: {pr.number}")
        return Merged(pr.number)
