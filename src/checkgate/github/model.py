from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

import pydantic

from checkgate.errors import ConsistencyError


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)


class _Ranked(str, Enum):
    @property
    def priority(self) -> int:
        # 0 is the highest priority
        return list(type(self)).index(self)


# Listed in descending order of priority
class CheckSuiteStatus(_Ranked):
    queued = "queued"
    in_progress = "in_progress"
    completed = "completed"


# Listed in descending order of severity
class CheckSuiteConclusion(_Ranked):
    action_required = "action_required"
    cancelled = "cancelled"
    timed_out = "timed_out"
    failure = "failure"
    neutral = "neutral"
    success = "success"


class App(Model):
    id: Optional[int] = None
    slug: str


class CheckSuite(Model):
    id: int
    app: App
    status: CheckSuiteStatus
    conclusion: Optional[CheckSuiteConclusion] = None
    created_at: datetime
    head_branch: Optional[str] = None
    head_sha: Optional[str] = None
    url: Optional[str] = None

    @pydantic.model_validator(mode="after")
    def _conclusion_only_when_completed(self) -> "CheckSuite":
        completed = self.status == CheckSuiteStatus.completed
        if completed and self.conclusion is None:
            raise ValueError("completed check suite has no conclusion")
        if not completed and self.conclusion is not None:
            raise ValueError(
                f"check suite with status '{self.status.value}' "
                f"has conclusion '{self.conclusion.value}'"
            )
        return self

    @property
    def app_slug(self) -> str:
        return self.app.slug

    def __hash__(self):
        return self.id

    def __str__(self) -> str:
        return f"CheckSuite({self.id}, {self.app_slug})"

    @classmethod
    def from_github(cls, raw: Mapping[str, Any]) -> "CheckSuite":
        try:
            return cls.model_validate(raw)
        except pydantic.ValidationError as e:
            raise ConsistencyError(
                f"Check suite {raw.get('id')!r} with status {raw.get('status')!r} "
                f"and conclusion {raw.get('conclusion')!r} can't be mapped to a "
                f"known check suite state: {e}"
            ) from e


class WorkflowRun(Model):
    model_config = pydantic.ConfigDict(frozen=True, extra="ignore")

    id: int
    check_suite_id: Optional[int] = None
    check_suite_url: Optional[str] = None
