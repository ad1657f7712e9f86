from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Tuple, Union

from checkgate import config
from checkgate.errors import ConfigurationError
from checkgate.github.api import CheckSuiteSnapshotFetcher
from checkgate.model import PollConfiguration

logger = logging.getLogger("checkgate")


@dataclass(frozen=True)
class Inputs:
    owner: str
    repo: str
    ref: str
    token: str
    interval_seconds: int
    timeout_seconds: Optional[int]
    app_slug_filter: Optional[str]
    wait_for_a_check_suite: bool
    only_first_check_suite: bool
    ignore_own_check_suite: bool
    fail_step_if_unsuccessful: bool

    def poll_configuration(
        self, exclude_check_suite_id: Optional[int] = None
    ) -> PollConfiguration:
        return PollConfiguration.build(
            owner=self.owner,
            repo=self.repo,
            ref=self.ref,
            interval_seconds=self.interval_seconds,
            timeout_seconds=self.timeout_seconds,
            app_slug_filter=self.app_slug_filter,
            wait_for_at_least_one_suite=self.wait_for_a_check_suite,
            restrict_to_earliest_created=self.only_first_check_suite,
            exclude_check_suite_id=exclude_check_suite_id,
        )


def parse_repository(repository: str) -> Tuple[str, str]:
    parts = repository.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ConfigurationError(
            f"Invalid repository '{repository}'. Expected format {{owner}}/{{repo}}."
        )
    return parts[0], parts[1]


def parse_boolean(value: Union[str, bool], name: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise ConfigurationError(f"Input '{name}' must be 'true' or 'false', got '{value}'")


def _parse_int(value: Union[str, int, None], name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Input '{name}' must be an integer, got '{value}'")


def get_inputs(
    *,
    token: Optional[str],
    interval_seconds: Union[str, int, None],
    repository: Optional[str] = None,
    ref: Optional[str] = None,
    timeout_seconds: Union[str, int, None] = None,
    app_slug_filter: Optional[str] = None,
    wait_for_a_check_suite: Union[str, bool] = True,
    only_first_check_suite: Union[str, bool] = False,
    ignore_own_check_suite: Union[str, bool] = True,
    fail_step_if_unsuccessful: Union[str, bool] = True,
) -> Inputs:
    context_repository = config.GITHUB_REPOSITORY
    context_sha = config.GITHUB_SHA

    repository = repository or context_repository
    if not repository:
        raise ConfigurationError(
            "No repository given and $GITHUB_REPOSITORY is not set"
        )
    owner, repo = parse_repository(repository)

    ref = ref or context_sha
    if not ref:
        raise ConfigurationError("No ref given and $GITHUB_SHA is not set")

    if not token:
        raise ConfigurationError("A GitHub token is required")

    interval = _parse_int(interval_seconds, "intervalSeconds")
    if interval is None or interval <= 0:
        raise ConfigurationError(
            f"Input 'intervalSeconds' must be a positive integer, got '{interval_seconds}'"
        )

    timeout = _parse_int(timeout_seconds, "timeoutSeconds")
    if timeout is not None and timeout <= 0:
        timeout = None

    # our own check suite only exists on the commit of the invoking run
    ignore_own = parse_boolean(ignore_own_check_suite, "ignoreOwnCheckSuite")
    if ignore_own and (repository != context_repository or ref != context_sha):
        logger.info(
            "Not ignoring own check suite, %s@%s is not the invoking run's commit",
            repository,
            ref,
        )
        ignore_own = False

    return Inputs(
        owner=owner,
        repo=repo,
        ref=ref,
        token=token,
        interval_seconds=interval,
        timeout_seconds=timeout,
        app_slug_filter=app_slug_filter or None,
        wait_for_a_check_suite=parse_boolean(
            wait_for_a_check_suite, "waitForACheckSuite"
        ),
        only_first_check_suite=parse_boolean(
            only_first_check_suite, "onlyFirstCheckSuite"
        ),
        ignore_own_check_suite=ignore_own,
        fail_step_if_unsuccessful=parse_boolean(
            fail_step_if_unsuccessful, "failStepIfUnsuccessful"
        ),
    )


async def get_own_check_suite_id(
    fetcher: CheckSuiteSnapshotFetcher, inputs: Inputs
) -> Optional[int]:
    if not inputs.ignore_own_check_suite:
        return None

    run_id = config.GITHUB_RUN_ID
    if not run_id or not run_id.isdigit():
        raise ConfigurationError(
            "Expected the environment variable $GITHUB_RUN_ID to be a number, "
            f"got {run_id!r}"
        )

    check_suite_id = await fetcher.get_own_check_suite_id(
        inputs.owner, inputs.repo, int(run_id)
    )
    logger.info("Ignoring own check suite %d", check_suite_id)
    return check_suite_id
