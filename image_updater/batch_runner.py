import logging
from collections.abc import Sequence

from image_updater import metrics
from image_updater.coordinator import UpdateCoordinator
from image_updater.exceptions import CoordinateProcessingError
from image_updater.models import (
    Failed,
    UpdateOutcome,
    UpdateRequest,
)

LOG = logging.getLogger(__name__)


class BatchRunner:
    """
    Runs update requests one after the other through the coordinator.
    Requests share one work tree, so they are never processed in
    parallel. A failing request becomes a Failed outcome and the batch
    goes on with the next one.
    """

    def __init__(self, coordinator: UpdateCoordinator):
        self._coordinator = coordinator

    def _process(self, request: UpdateRequest) -> UpdateOutcome:
        try:
            return self._coordinator.process(request)
        except CoordinateProcessingError as e:
            LOG.error(str(e))
            return Failed(stage=e.stage, error=e)
        except Exception as e:
            LOG.exception(f"unexpected error processing {request.coordinate}")
            return Failed(stage=None, error=e)

    def run(self, requests: Sequence[UpdateRequest]) -> list[UpdateOutcome]:
        outcomes: list[UpdateOutcome] = []
        for i, request in enumerate(requests, start=1):
            LOG.info(f"[{i}/{len(requests)}] processing {request.coordinate}")
            outcome = self._process(request)
            metrics.record_outcome(outcome)
            outcomes.append(outcome)
        return outcomes


def has_failures(outcomes: Sequence[UpdateOutcome]) -> bool:
    return any(isinstance(o, Failed) for o in outcomes)


def log_summary(
    requests: Sequence[UpdateRequest], outcomes: Sequence[UpdateOutcome]
) -> None:
    for request, outcome in zip(requests, outcomes, strict=True):
        log = LOG.error if isinstance(outcome, Failed) else LOG.info
        log(f"{request.coordinate} -> {request.new_image}: {outcome}")
