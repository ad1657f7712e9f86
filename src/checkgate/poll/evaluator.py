"""
Reduction of a check suite snapshot into a single poll tick result.

Each tick the full snapshot for the ref is narrowed down (app slug filter,
earliest suite, own suite exclusion) and the remaining suites are folded into
one aggregate status and, once everything is completed, one aggregate
conclusion.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from tabulate import tabulate

from checkgate.errors import ConsistencyError
from checkgate.github.model import (
    CheckSuite,
    CheckSuiteConclusion,
    CheckSuiteStatus,
)
from checkgate.model import PollConfiguration
from checkgate.poll.types import Pending, PollOutcome, Resolved, TickResult

logger = logging.getLogger("checkgate.poll")


def filter_by_app_slug(
    suites: Iterable[CheckSuite], app_slug: Optional[str]
) -> List[CheckSuite]:
    if app_slug is None:
        return list(suites)
    return [cs for cs in suites if cs.app_slug == app_slug]


def select_earliest_created(suites: Sequence[CheckSuite]) -> List[CheckSuite]:
    if len(suites) == 0:
        return []
    # identical timestamps fall back to the lowest id
    return [min(suites, key=lambda cs: (cs.created_at, cs.id))]


def exclude_check_suite(
    suites: Iterable[CheckSuite], check_suite_id: Optional[int]
) -> List[CheckSuite]:
    if check_suite_id is None:
        return list(suites)
    return [cs for cs in suites if cs.id != check_suite_id]


def aggregate_status(suites: Iterable[CheckSuite]) -> CheckSuiteStatus:
    """The least advanced status of all suites, ``completed`` if there are none."""
    return min(
        (cs.status for cs in suites),
        key=lambda s: s.priority,
        default=CheckSuiteStatus.completed,
    )


def aggregate_conclusion(suites: Iterable[CheckSuite]) -> CheckSuiteConclusion:
    """The most severe conclusion of all suites, ``success`` if there are none."""
    conclusions = []
    for cs in suites:
        if cs.conclusion is None:
            raise ConsistencyError(f"{cs} is completed but has no conclusion")
        conclusions.append(cs.conclusion)
    return min(
        conclusions,
        key=lambda c: c.priority,
        default=CheckSuiteConclusion.success,
    )


def diagnose(suites: Iterable[CheckSuite]) -> str:
    rows = [
        (
            cs.id,
            cs.app_slug,
            cs.status.value,
            cs.conclusion.value if cs.conclusion is not None else "",
        )
        for cs in suites
    ]
    return tabulate(
        rows,
        headers=("ID", "App", "Status", "Conclusion"),
        tablefmt="github",
    )


def _on_empty(config: PollConfiguration, reason: str) -> TickResult:
    if config.wait_for_at_least_one_suite:
        logger.debug("%s, waiting for one to show up", reason)
        return Pending(reason=reason)
    logger.info("%s", reason)
    return Resolved(PollOutcome.nothing_relevant())


def evaluate_snapshot(
    suites: Sequence[CheckSuite], config: PollConfiguration
) -> TickResult:
    if len(suites) == 0:
        return _on_empty(config, "No check suites exist for this commit")

    relevant = filter_by_app_slug(suites, config.app_slug_filter)
    if len(relevant) == 0:
        return _on_empty(
            config,
            f"No check suites with the app slug '{config.app_slug_filter}' "
            "exist for this commit",
        )
    logger.debug(
        "Have %d of %d check suites after app slug filter",
        len(relevant),
        len(suites),
    )

    if config.restrict_to_earliest_created:
        relevant = select_earliest_created(relevant)
        logger.debug("Only considering the first check suite: %s", relevant[0])

    if config.exclude_check_suite_id is not None:
        relevant = exclude_check_suite(relevant, config.exclude_check_suite_id)
        if len(relevant) == 0:
            return _on_empty(
                config,
                "No check suites besides our own "
                f"({config.exclude_check_suite_id}) exist for this commit",
            )

    status = aggregate_status(relevant)
    if status != CheckSuiteStatus.completed:
        waiting = sum(1 for cs in relevant if cs.status != CheckSuiteStatus.completed)
        return Pending(
            reason=f"{waiting} of {len(relevant)} check suites are not completed "
            f"(aggregate status: {status.value})"
        )

    conclusion = aggregate_conclusion(relevant)
    if conclusion != CheckSuiteConclusion.success:
        logger.error(
            "One or more check suites were unsuccessful. "
            "Below is some metadata on the check suites.\n%s",
            diagnose(suites),
        )
    return Resolved(PollOutcome(conclusion=conclusion))
