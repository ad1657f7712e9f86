import asyncio
import logging
from typing import List

import aiohttp
import gidgethub
import pydantic
from gidgethub.abc import GitHubAPI

from checkgate.errors import ConsistencyError, TransportError
from checkgate.github.model import CheckSuite, WorkflowRun
from checkgate.metric import api_call_count

logger = logging.getLogger("checkgate.github")


class CheckSuiteSnapshotFetcher:
    gh: GitHubAPI

    call_count: int

    def __init__(self, gh: GitHubAPI):
        self.gh = gh
        self.call_count = 0

    def _count_call(self) -> None:
        self.call_count += 1
        api_call_count.inc()

    async def fetch(self, owner: str, repo: str, ref: str) -> List[CheckSuite]:
        self._count_call()
        url = f"/repos/{owner}/{repo}/commits/{ref}/check-suites?per_page=100"
        logger.debug("Get check suites for ref %s", url)
        try:
            raw_suites = [
                item
                async for item in self.gh.getiter(url, iterable_key="check_suites")
            ]
        except gidgethub.HTTPException as e:
            raise TransportError(
                int(e.status_code),
                f"Failed to list check suites for {owner}/{repo}@{ref}: {e}",
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                None, f"Failed to list check suites for {owner}/{repo}: {e}"
            ) from e
        except asyncio.TimeoutError as e:
            raise TransportError(
                None, f"Timed out listing check suites for {owner}/{repo}"
            ) from e

        return [CheckSuite.from_github(item) for item in raw_suites]

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        self._count_call()
        url = f"/repos/{owner}/{repo}/actions/runs/{run_id}"
        logger.debug("Get workflow run %s", url)
        try:
            data = await self.gh.getitem(url)
        except gidgethub.HTTPException as e:
            raise TransportError(
                int(e.status_code),
                f"Failed to get workflow run {run_id} from {owner}/{repo}: {e}",
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                None, f"Failed to get workflow run {run_id} from {owner}/{repo}: {e}"
            ) from e
        except asyncio.TimeoutError as e:
            raise TransportError(
                None, f"Timed out getting workflow run {run_id} from {owner}/{repo}"
            ) from e
        try:
            return WorkflowRun.model_validate(data)
        except pydantic.ValidationError as e:
            raise ConsistencyError(
                f"Unexpected workflow run payload for {run_id}: {e}"
            ) from e

    async def get_own_check_suite_id(self, owner: str, repo: str, run_id: int) -> int:
        run = await self.get_workflow_run(owner, repo, run_id)
        if run.check_suite_id is not None:
            return run.check_suite_id

        # older API versions only expose the url of the check suite
        tail = (run.check_suite_url or "").rstrip("/").split("/")[-1]
        if not tail.isdigit():
            raise ConsistencyError(
                f"Workflow run {run_id} has no usable check_suite_url "
                f"({run.check_suite_url!r})"
            )
        return int(tail)
