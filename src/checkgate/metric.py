import logging

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from checkgate import config

logger = logging.getLogger("checkgate")

push_registry = CollectorRegistry()

api_call_count = Counter(
    "checkgate_num_api_calls",
    "Total number of GitHub API calls",
    registry=push_registry,
)

poll_tick_count = Counter(
    "checkgate_poll_ticks",
    "Number of poll ticks evaluated",
    labelnames=["result"],
    registry=push_registry,
)

poll_outcome_count = Counter(
    "checkgate_poll_outcome",
    "Number of finished polls by outcome",
    labelnames=["outcome"],
    registry=push_registry,
)


def push_metrics(job: str = "checkgate") -> None:
    if config.PUSH_GATEWAY is None:
        return
    logger.debug("Pushing metrics to %s", config.PUSH_GATEWAY)
    try:
        push_to_gateway(config.PUSH_GATEWAY, job=job, registry=push_registry)
    except OSError:
        logger.warning("Failed to push metrics to %s", config.PUSH_GATEWAY, exc_info=True)
