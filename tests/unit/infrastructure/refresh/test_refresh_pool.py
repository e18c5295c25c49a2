"""Unit tests for RefreshPool lifecycle and outcome tracking."""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from courier_registry.domain.instance.model.refresh import RefreshOutcome, RefreshStatus
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.infrastructure.refresh.worker import RefreshPool


def refreshed(link: str) -> RefreshOutcome:
    return RefreshOutcome(link=link, status=RefreshStatus.REFRESHED, finished_at=datetime.now(UTC))


def make_mock_container(service: AsyncMock) -> MagicMock:
    """Create a mock DI container whose UOW scope yields ``service``."""

    async def get_dependency(cls):
        assert cls is RegistryService
        return service

    scope = AsyncMock()
    scope.get = AsyncMock(side_effect=get_dependency)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=scope)
    context.__aexit__ = AsyncMock(return_value=None)

    container = MagicMock()
    container.return_value = context
    return container


@pytest.fixture
def service() -> AsyncMock:
    service = AsyncMock(spec=RegistryService)
    service.refresh.side_effect = refreshed
    return service


class TestSubmit:
    def test_requires_container(self):
        pool = RefreshPool()

        with pytest.raises(RuntimeError, match="Container not set"):
            pool.submit("https://alpha.example")

    @pytest.mark.asyncio
    async def test_runs_refresh_and_records_outcome(self, service):
        pool = RefreshPool(container=make_mock_container(service))

        assert pool.submit("https://alpha.example") is True
        await pool.join()

        service.refresh.assert_awaited_once_with("https://alpha.example")
        outcome = pool.last_outcome("https://alpha.example")
        assert outcome is not None
        assert outcome.status == RefreshStatus.REFRESHED
        assert pool.in_flight == 0

    @pytest.mark.asyncio
    async def test_submit_returns_before_refresh_completes(self, service):
        release = asyncio.Event()

        async def slow_refresh(link: str) -> RefreshOutcome:
            await release.wait()
            return refreshed(link)

        service.refresh.side_effect = slow_refresh
        pool = RefreshPool(container=make_mock_container(service))

        pool.submit("https://alpha.example")
        await asyncio.sleep(0)

        assert pool.in_flight == 1
        assert pool.last_outcome("https://alpha.example") is None

        release.set()
        await pool.join()
        assert pool.last_outcome("https://alpha.example") is not None

    @pytest.mark.asyncio
    async def test_crash_is_recorded_not_raised(self, service):
        service.refresh.side_effect = RuntimeError("boom")
        pool = RefreshPool(container=make_mock_container(service))

        pool.submit("https://alpha.example")
        await pool.join()

        outcome = pool.last_outcome("https://alpha.example")
        assert outcome is not None
        assert outcome.failed
        assert outcome.reason == "internal-error"

    @pytest.mark.asyncio
    async def test_latest_outcome_wins(self, service):
        outcomes = iter(
            [
                RefreshOutcome(
                    link="https://alpha.example",
                    status=RefreshStatus.FAILED,
                    reason="timeout",
                    finished_at=datetime.now(UTC),
                ),
                refreshed("https://alpha.example"),
            ]
        )
        service.refresh.side_effect = lambda link: next(outcomes)
        pool = RefreshPool(container=make_mock_container(service))

        pool.submit("https://alpha.example")
        await pool.join()
        assert pool.last_outcome("https://alpha.example").reason == "timeout"

        pool.submit("https://alpha.example")
        await pool.join()
        assert not pool.last_outcome("https://alpha.example").failed


    @pytest.mark.asyncio
    async def test_forget_drops_outcome(self, service):
        pool = RefreshPool(container=make_mock_container(service))

        pool.submit("https://alpha.example")
        await pool.join()
        pool.forget("https://alpha.example")
        pool.forget("https://never-seen.example")

        assert pool.last_outcome("https://alpha.example") is None

class TestShutdown:
    @pytest.mark.asyncio
    async def test_drains_in_flight_refreshes(self, service):
        async def quick_refresh(link: str) -> RefreshOutcome:
            await asyncio.sleep(0.01)
            return refreshed(link)

        service.refresh.side_effect = quick_refresh
        pool = RefreshPool(container=make_mock_container(service))

        async with pool:
            pool.submit("https://alpha.example")
            pool.submit("https://beta.example")

        assert pool.in_flight == 0
        assert pool.last_outcome("https://beta.example") is not None

    @pytest.mark.asyncio
    async def test_cancels_after_timeout(self, service):
        async def stuck_refresh(link: str) -> RefreshOutcome:
            await asyncio.sleep(60)
            return refreshed(link)

        service.refresh.side_effect = stuck_refresh
        pool = RefreshPool(container=make_mock_container(service), shutdown_timeout=0.05)

        async with pool:
            pool.submit("https://stuck.example")
            await asyncio.sleep(0)

        assert pool.in_flight == 0
        assert pool.last_outcome("https://stuck.example") is None

    @pytest.mark.asyncio
    async def test_rejects_submissions_while_stopping(self, service):
        pool = RefreshPool(container=make_mock_container(service))

        async with pool:
            pass

        assert pool.submit("https://late.example") is False
        service.refresh.assert_not_called()
