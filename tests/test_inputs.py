import pytest

from checkgate import config
from checkgate.errors import ConfigurationError
from checkgate.inputs import (
    Inputs,
    get_inputs,
    get_own_check_suite_id,
    parse_boolean,
    parse_repository,
)

SHA = "a" * 40


@pytest.fixture(autouse=True)
def _action_context(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_REPOSITORY", "org/repo")
    monkeypatch.setattr(config, "GITHUB_SHA", SHA)
    monkeypatch.setattr(config, "GITHUB_RUN_ID", "123")


def test_parse_repository():
    assert parse_repository("org/repo") == ("org", "repo")

    for bad in ["org", "org/", "/repo", "org/repo/extra", ""]:
        with pytest.raises(ConfigurationError):
            parse_repository(bad)


def test_parse_boolean():
    assert parse_boolean("true", "x") is True
    assert parse_boolean("TRUE", "x") is True
    assert parse_boolean(" false ", "x") is False
    assert parse_boolean(False, "x") is False
    for bad in ["maybe", "yes", "1", "off", ""]:
        with pytest.raises(ConfigurationError):
            parse_boolean(bad, "x")


def test_get_inputs_defaults_to_action_context():
    inputs = get_inputs(token="t", interval_seconds="10")

    assert inputs.owner == "org"
    assert inputs.repo == "repo"
    assert inputs.ref == SHA
    assert inputs.interval_seconds == 10
    assert inputs.timeout_seconds is None
    assert inputs.app_slug_filter is None
    assert inputs.wait_for_a_check_suite is True
    assert inputs.only_first_check_suite is False
    assert inputs.ignore_own_check_suite is True
    assert inputs.fail_step_if_unsuccessful is True


def test_get_inputs_normalizes_timeout_and_filter():
    inputs = get_inputs(
        token="t", interval_seconds=5, timeout_seconds="0", app_slug_filter=""
    )
    assert inputs.timeout_seconds is None
    assert inputs.app_slug_filter is None

    inputs = get_inputs(token="t", interval_seconds=5, timeout_seconds="-3")
    assert inputs.timeout_seconds is None

    inputs = get_inputs(
        token="t", interval_seconds=5, timeout_seconds="600", app_slug_filter="lint-bot"
    )
    assert inputs.timeout_seconds == 600
    assert inputs.app_slug_filter == "lint-bot"


@pytest.mark.parametrize("interval", [None, "", "0", "-1", "ten"])
def test_get_inputs_requires_positive_interval(interval):
    with pytest.raises(ConfigurationError):
        get_inputs(token="t", interval_seconds=interval)


def test_get_inputs_requires_token():
    with pytest.raises(ConfigurationError):
        get_inputs(token=None, interval_seconds=10)


def test_get_inputs_rejects_malformed_repository():
    with pytest.raises(ConfigurationError):
        get_inputs(token="t", interval_seconds=10, repository="just-a-name")


def test_get_inputs_rejects_malformed_timeout():
    with pytest.raises(ConfigurationError):
        get_inputs(token="t", interval_seconds=10, timeout_seconds="soon")


def test_ignore_own_check_suite_only_applies_to_own_commit():
    inputs = get_inputs(token="t", interval_seconds=10, repository="other/repo")
    assert inputs.ignore_own_check_suite is False

    inputs = get_inputs(token="t", interval_seconds=10, ref="b" * 40)
    assert inputs.ignore_own_check_suite is False

    inputs = get_inputs(
        token="t", interval_seconds=10, repository="org/repo", ref=SHA
    )
    assert inputs.ignore_own_check_suite is True


def test_poll_configuration_from_inputs():
    inputs = get_inputs(
        token="t",
        interval_seconds=10,
        timeout_seconds=60,
        app_slug_filter="lint-bot",
        wait_for_a_check_suite="false",
        only_first_check_suite="true",
    )
    poll = inputs.poll_configuration(exclude_check_suite_id=77)

    assert poll.owner == "org"
    assert poll.repo == "repo"
    assert poll.ref == SHA
    assert poll.interval_seconds == 10
    assert poll.timeout_seconds == 60
    assert poll.app_slug_filter == "lint-bot"
    assert poll.wait_for_at_least_one_suite is False
    assert poll.restrict_to_earliest_created is True
    assert poll.exclude_check_suite_id == 77


class _FakeFetcher:
    def __init__(self):
        self.calls = []

    async def get_own_check_suite_id(self, owner, repo, run_id):
        self.calls.append((owner, repo, run_id))
        return 9901


@pytest.mark.asyncio
async def test_get_own_check_suite_id_looks_up_workflow_run():
    fetcher = _FakeFetcher()
    inputs = get_inputs(token="t", interval_seconds=10)

    assert await get_own_check_suite_id(fetcher, inputs) == 9901
    assert fetcher.calls == [("org", "repo", 123)]


@pytest.mark.asyncio
async def test_get_own_check_suite_id_skipped_when_not_ignoring():
    fetcher = _FakeFetcher()
    inputs = get_inputs(token="t", interval_seconds=10, ignore_own_check_suite="false")

    assert await get_own_check_suite_id(fetcher, inputs) is None
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_get_own_check_suite_id_requires_numeric_run_id(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_RUN_ID", None)
    inputs = get_inputs(token="t", interval_seconds=10)
    assert isinstance(inputs, Inputs)

    with pytest.raises(ConfigurationError):
        await get_own_check_suite_id(_FakeFetcher(), inputs)
