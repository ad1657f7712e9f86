from typing import Optional

import pydantic

from checkgate.errors import ConfigurationError


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        extra="forbid", frozen=True, populate_by_name=True
    )


class PollConfiguration(Model):
    owner: str = pydantic.Field(min_length=1)
    repo: str = pydantic.Field(min_length=1)
    ref: str = pydantic.Field(min_length=1)

    interval_seconds: float = pydantic.Field(gt=0, alias="intervalSeconds")
    timeout_seconds: Optional[float] = pydantic.Field(None, alias="timeoutSeconds")

    app_slug_filter: Optional[str] = pydantic.Field(None, alias="appSlugFilter")
    wait_for_at_least_one_suite: bool = pydantic.Field(
        False, alias="waitForACheckSuite"
    )
    restrict_to_earliest_created: bool = pydantic.Field(
        False, alias="onlyFirstCheckSuite"
    )
    exclude_check_suite_id: Optional[int] = pydantic.Field(
        None, alias="excludeCheckSuiteID"
    )

    @pydantic.field_validator("timeout_seconds")
    @classmethod
    def _no_timeout_if_not_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            return None
        return v

    @pydantic.field_validator("app_slug_filter")
    @classmethod
    def _no_filter_if_empty(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def build(cls, **kwargs) -> "PollConfiguration":
        try:
            return cls(**kwargs)
        except pydantic.ValidationError as e:
            raise ConfigurationError(f"Invalid poll configuration: {e}") from e
