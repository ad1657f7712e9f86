from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from typing import List, Protocol

import humanize

from checkgate.errors import CheckSuiteTimeoutError, TransportError
from checkgate.github.model import CheckSuite
from checkgate.metric import poll_outcome_count, poll_tick_count
from checkgate.model import PollConfiguration
from checkgate.poll.evaluator import evaluate_snapshot
from checkgate.poll.types import PollOutcome, Resolved

logger = logging.getLogger("checkgate.poll")


class CheckSuiteFetcher(Protocol):
    async def fetch(self, owner: str, repo: str, ref: str) -> List[CheckSuite]: ...


class CheckSuitePoller:
    def __init__(self, *, fetcher: CheckSuiteFetcher):
        self.fetcher = fetcher
        self.tick_count = 0

    async def run(self, config: PollConfiguration) -> PollOutcome:
        loop = asyncio.get_running_loop()
        started = loop.time()
        logger.info(
            "Waiting for check suites on %s@%s (interval=%gs, timeout=%s)",
            config.full_name,
            config.ref,
            config.interval_seconds,
            "none" if config.timeout_seconds is None else f"{config.timeout_seconds:g}s",
        )

        self.tick_count = 0
        if config.timeout_seconds is None:
            outcome = await self._poll(config, started)
        else:
            try:
                # cancels the loop, including an in-flight fetch or sleep
                outcome = await asyncio.wait_for(
                    self._poll(config, started), timeout=config.timeout_seconds
                )
            except asyncio.TimeoutError:
                elapsed = loop.time() - started
                poll_outcome_count.labels(outcome="timeout").inc()
                logger.error(
                    "Gave up on %s@%s after %s (%d ticks)",
                    config.full_name,
                    config.ref,
                    humanize.precisedelta(timedelta(seconds=elapsed)),
                    self.tick_count,
                )
                raise CheckSuiteTimeoutError(
                    elapsed, config.timeout_seconds
                ) from None

        poll_outcome_count.labels(outcome=outcome.value).inc()
        logger.info(
            "Resolved %s@%s as %s after %d ticks",
            config.full_name,
            config.ref,
            outcome,
            self.tick_count,
        )
        return outcome

    async def _poll(self, config: PollConfiguration, started: float) -> PollOutcome:
        loop = asyncio.get_running_loop()
        interval = config.interval_seconds
        slot = 0
        while True:
            self.tick_count += 1
            try:
                suites = await self.fetcher.fetch(
                    config.owner, config.repo, config.ref
                )
            except asyncio.TimeoutError as e:
                # keep a stalled request apart from the poll timeout
                raise TransportError(
                    None, f"Timed out listing check suites for {config.full_name}"
                ) from e
            result = evaluate_snapshot(suites, config)

            if isinstance(result, Resolved):
                poll_tick_count.labels(result="resolved").inc()
                return result.outcome

            poll_tick_count.labels(result="pending").inc()
            logger.info(
                "Tick %d: %s, checking again in %gs",
                self.tick_count,
                result.reason,
                interval,
            )

            slot += 1
            delay = started + slot * interval - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                # evaluation overran one or more slots, skip them
                slot = max(slot, int((loop.time() - started) // interval))
                logger.debug("Tick %d overran its slot", self.tick_count)
