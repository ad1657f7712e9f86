import asyncio
from contextlib import asynccontextmanager
import logging
from typing import Optional

import aiohttp
import cachetools
import typer
from gidgethub import aiohttp as gh_aiohttp

from checkgate import config
from checkgate.errors import CheckGateError, ConfigurationError
from checkgate.github.api import CheckSuiteSnapshotFetcher
from checkgate.inputs import get_inputs, get_own_check_suite_id, parse_repository
from checkgate.logger import setup_logging
from checkgate.metric import push_metrics
from checkgate.poll import CheckSuitePoller, PollOutcome
from checkgate.poll.evaluator import diagnose, filter_by_app_slug

logger = logging.getLogger("checkgate")

app = typer.Typer()
httpcache = cachetools.LRUCache(maxsize=config.HTTP_CACHE_SIZE)


@app.callback()
def init():
    setup_logging()


@asynccontextmanager
async def github_client(token: str):
    async with aiohttp.ClientSession() as session:
        yield gh_aiohttp.GitHubAPI(
            session,
            "checkgate",
            oauth_token=token,
            cache=httpcache,
            base_url=config.GITHUB_API_URL,
        )


def set_output(name: str, value: str) -> None:
    if config.GITHUB_OUTPUT is None:
        return
    with open(config.GITHUB_OUTPUT, "a") as fh:
        fh.write(f"{name}={value}\n")


def _fail(e: CheckGateError):
    logger.error("%s: %s", type(e).__name__, e)
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(code=1)


@app.command()
def wait(
    interval_seconds: Optional[str] = typer.Option(
        None, "--interval-seconds", envvar="INPUT_INTERVALSECONDS"
    ),
    repository: Optional[str] = typer.Option(None, envvar="INPUT_REPOSITORY"),
    ref: Optional[str] = typer.Option(None, envvar="INPUT_REF"),
    token: Optional[str] = typer.Option(
        None, envvar=["INPUT_TOKEN", "GITHUB_TOKEN"], show_default=False
    ),
    timeout_seconds: Optional[str] = typer.Option(
        None, "--timeout-seconds", envvar="INPUT_TIMEOUTSECONDS"
    ),
    app_slug_filter: Optional[str] = typer.Option(
        None, "--app-slug-filter", envvar="INPUT_APPSLUGFILTER"
    ),
    wait_for_a_check_suite: str = typer.Option(
        "true", "--wait-for-a-check-suite", envvar="INPUT_WAITFORACHECKSUITE"
    ),
    only_first_check_suite: str = typer.Option(
        "false",
        "--only-first-check-suite",
        envvar="INPUT_ONLYFIRSTCHECKSUITE",
        help="Only consider the first check suite created. If that suite is the "
        "run's own and own suites are ignored, nothing is left to wait for: "
        "with --wait-for-a-check-suite this polls until the timeout.",
    ),
    ignore_own_check_suite: str = typer.Option(
        "true", "--ignore-own-check-suite", envvar="INPUT_IGNOREOWNCHECKSUITE"
    ),
    fail_step_if_unsuccessful: str = typer.Option(
        "true",
        "--fail-step-if-unsuccessful",
        envvar="INPUT_FAILSTEPIFUNSUCCESSFUL",
    ),
):
    """Wait for the check suites of a commit and report their conclusion."""
    try:
        inputs = get_inputs(
            repository=repository,
            ref=ref,
            token=token or config.GITHUB_TOKEN,
            interval_seconds=interval_seconds,
            timeout_seconds=timeout_seconds,
            app_slug_filter=app_slug_filter,
            wait_for_a_check_suite=wait_for_a_check_suite,
            only_first_check_suite=only_first_check_suite,
            ignore_own_check_suite=ignore_own_check_suite,
            fail_step_if_unsuccessful=fail_step_if_unsuccessful,
        )
    except ConfigurationError as e:
        _fail(e)

    async def handle() -> PollOutcome:
        async with github_client(inputs.token) as gh:
            fetcher = CheckSuiteSnapshotFetcher(gh)
            own_id = await get_own_check_suite_id(fetcher, inputs)
            poller = CheckSuitePoller(fetcher=fetcher)
            try:
                return await poller.run(inputs.poll_configuration(own_id))
            finally:
                logger.info("API calls: %d", fetcher.call_count)

    try:
        outcome = asyncio.run(handle())
    except CheckGateError as e:
        _fail(e)
    finally:
        push_metrics()

    typer.echo(f"Conclusion: {outcome.value}")
    set_output("conclusion", outcome.value)

    if not outcome.is_success and inputs.fail_step_if_unsuccessful:
        logger.error("One or more of the check suites were unsuccessful.")
        raise typer.Exit(code=1)


@app.command()
def suites(
    repository: str,
    ref: str,
    token: Optional[str] = typer.Option(
        None, envvar=["INPUT_TOKEN", "GITHUB_TOKEN"], show_default=False
    ),
    app_slug_filter: Optional[str] = typer.Option(None, "--app-slug-filter"),
):
    """Show the current check suites of a commit without waiting."""
    try:
        owner, repo = parse_repository(repository)
        if not token:
            raise ConfigurationError("A GitHub token is required")
    except ConfigurationError as e:
        _fail(e)

    async def handle():
        async with github_client(token) as gh:
            fetcher = CheckSuiteSnapshotFetcher(gh)
            return await fetcher.fetch(owner, repo, ref)

    try:
        snapshot = asyncio.run(handle())
    except CheckGateError as e:
        _fail(e)

    snapshot = filter_by_app_slug(snapshot, app_slug_filter or None)
    if len(snapshot) == 0:
        typer.echo("No check suites")
        return
    typer.echo(diagnose(snapshot))


def main():
    app()
