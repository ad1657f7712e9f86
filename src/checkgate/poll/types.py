from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from checkgate.github.model import CheckSuiteConclusion


@dataclass(frozen=True)
class PollOutcome:
    conclusion: CheckSuiteConclusion
    no_relevant_suites: bool = False

    @classmethod
    def nothing_relevant(cls) -> PollOutcome:
        return cls(conclusion=CheckSuiteConclusion.success, no_relevant_suites=True)

    @property
    def value(self) -> str:
        return self.conclusion.value

    @property
    def is_success(self) -> bool:
        return self.conclusion == CheckSuiteConclusion.success

    def __str__(self) -> str:
        if self.no_relevant_suites:
            return f"{self.value} (no relevant check suites)"
        return self.value


@dataclass(frozen=True)
class Pending:
    reason: str


@dataclass(frozen=True)
class Resolved:
    outcome: PollOutcome


TickResult = Union[Pending, Resolved]
