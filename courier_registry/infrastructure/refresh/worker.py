"""RefreshPool: detached, fire-and-forget instance refreshes."""

import asyncio
import logging
from datetime import UTC, datetime

from dishka import AsyncContainer

from courier_registry.domain.instance.model.refresh import RefreshOutcome, RefreshStatus
from courier_registry.domain.instance.port.refresh_scheduler import RefreshScheduler
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.util.di.base import Scope

logger = logging.getLogger(__name__)


class RefreshPool(RefreshScheduler):
    """Runs each refresh as its own asyncio task in its own UOW scope.

    The caller that submits a refresh never sees its result. Outcomes go to the
    log and to an in-process table readable through ``last_outcome``. Each
    submission is attempted exactly once; there is no retry.

    Usage:
        pool = RefreshPool(container)

        async with pool:
            pool.submit("https://instance.example")
        # In-flight refreshes finished (or were cancelled after the timeout)
    """

    def __init__(
        self,
        container: AsyncContainer | None = None,
        shutdown_timeout: float = 10.0,
    ) -> None:
        self._container = container
        self._shutdown_timeout = shutdown_timeout
        self._tasks: set[asyncio.Task[RefreshOutcome]] = set()
        self._outcomes: dict[str, RefreshOutcome] = {}
        self._shutdown = False

    @property
    def in_flight(self) -> int:
        """Number of refreshes currently running."""
        return len(self._tasks)

    def submit(self, link: str) -> bool:
        if self._container is None:
            raise RuntimeError("Container not set; pass one to RefreshPool()")
        if self._shutdown:
            logger.warning("RefreshPool is stopping; dropped refresh for %s", link)
            return False

        task = asyncio.create_task(self._run(link), name=f"refresh-{link}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Submitted refresh for %s (%d in flight)", link, len(self._tasks))
        return True

    def last_outcome(self, link: str) -> RefreshOutcome | None:
        return self._outcomes.get(link)

    def forget(self, link: str) -> None:
        self._outcomes.pop(link, None)

    async def _run(self, link: str) -> RefreshOutcome:
        assert self._container is not None
        try:
            async with self._container(scope=Scope.UOW) as scope:
                service = await scope.get(RegistryService)
                outcome = await service.refresh(link)
        except asyncio.CancelledError:
            logger.info("Refresh of %s cancelled", link)
            raise
        except Exception:
            logger.exception("Refresh of %s crashed", link)
            outcome = RefreshOutcome(
                link=link,
                status=RefreshStatus.FAILED,
                reason="internal-error",
                finished_at=datetime.now(UTC),
            )

        self._outcomes[link] = outcome
        return outcome

    async def join(self) -> None:
        """Wait until every refresh submitted so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def stop(self, timeout: float | None = None) -> None:
        """Stop accepting refreshes and drain the in-flight ones.

        Args:
            timeout: Seconds to wait before cancelling what is still running.
                Defaults to the pool's shutdown timeout.
        """
        self._shutdown = True
        tasks = list(self._tasks)
        if tasks:
            logger.info("Waiting for %d in-flight refreshes", len(tasks))
            _, pending = await asyncio.wait(
                tasks,
                timeout=self._shutdown_timeout if timeout is None else timeout,
            )
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                logger.warning("Cancelled %d refreshes on shutdown", len(pending))
        logger.info("RefreshPool stopped")

    async def __aenter__(self) -> "RefreshPool":
        self._shutdown = False
        logger.info("RefreshPool started")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
