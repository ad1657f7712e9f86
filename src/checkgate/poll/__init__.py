from checkgate.poll.evaluator import evaluate_snapshot
from checkgate.poll.poller import CheckSuiteFetcher, CheckSuitePoller
from checkgate.poll.types import Pending, PollOutcome, Resolved, TickResult

__all__ = [
    "CheckSuiteFetcher",
    "CheckSuitePoller",
    "evaluate_snapshot",
    "Pending",
    "PollOutcome",
    "Resolved",
    "TickResult",
]
