from prometheus_client import (
    CollectorRegistry,
    Counter,
    push_to_gateway,
)

from image_updater.models import (
    UpdateOutcome,
    outcome_name,
)

JOB_NAME = "image-updater"

pushgateway_registry = CollectorRegistry()

outcomes_counter = Counter(
    name="image_updater_outcomes_total",
    documentation="Processed update requests by outcome",
    labelnames=["outcome"],
    registry=pushgateway_registry,
)


def record_outcome(outcome: UpdateOutcome) -> None:
    outcomes_counter.labels(outcome=outcome_name(outcome)).inc()


def push(gateway: str) -> None:
    push_to_gateway(gateway=gateway, job=JOB_NAME, registry=pushgateway_registry)
