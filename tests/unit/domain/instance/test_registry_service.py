"""Unit tests for RegistryService."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from courier_registry.domain.instance.model.probe import ProbeFailureReason
from courier_registry.domain.instance.model.refresh import RefreshStatus
from courier_registry.domain.instance.model.value import GeoPoint, InstanceStatus
from courier_registry.domain.instance.service.registry import RegistryService
from courier_registry.domain.shared.error import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
    VerificationError,
)


@pytest.fixture
def service(fake_repo, fake_probe, default_point) -> RegistryService:
    return RegistryService(
        instance_repo=fake_repo,
        metadata_probe=fake_probe,
        default_point=default_point,
    )


class TestRegister:
    @pytest.mark.asyncio
    async def test_stores_verified_instance(self, service, fake_repo, fake_probe, make_payload):
        instance = await service.register(make_payload())

        assert instance.status == InstanceStatus.VERIFIED
        assert instance.last_fetched_at is not None
        assert instance.created_at == instance.last_fetched_at
        assert fake_probe.calls == ["https://alpha.example"]
        assert list(fake_repo.rows) == ["https://alpha.example"]

    @pytest.mark.asyncio
    async def test_missing_fields_never_probe(self, service, fake_probe):
        with pytest.raises(ValidationError):
            await service.register({"name": "Half"})

        assert fake_probe.calls == []

    @pytest.mark.asyncio
    async def test_missing_payload_reports_every_field(self, service, fake_probe):
        with pytest.raises(ValidationError) as exc_info:
            await service.register(None)

        assert exc_info.value.fields == [
            "name",
            "link",
            "websocketLink",
            "region",
            "imageUrl",
            "userCount",
        ]
        assert fake_probe.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("reason", "status_code"),
        [
            (ProbeFailureReason.TIMEOUT, None),
            (ProbeFailureReason.UNREACHABLE, 503),
            (ProbeFailureReason.EMPTY_RESPONSE, 200),
            (ProbeFailureReason.INVALID_JSON, 200),
            (ProbeFailureReason.INVALID_LINK, None),
        ],
    )
    async def test_failed_probe_creates_nothing(
        self, service, fake_repo, fake_probe, make_payload, reason, status_code
    ):
        fake_probe.fail("https://alpha.example", reason, status_code=status_code)

        with pytest.raises(VerificationError) as exc_info:
            await service.register(make_payload())

        assert exc_info.value.reason == reason.value
        assert exc_info.value.status_code == status_code
        assert fake_repo.rows == {}

    @pytest.mark.asyncio
    async def test_duplicate_link_conflicts(self, service, fake_repo, make_payload):
        await service.register(make_payload())

        with pytest.raises(ConflictError):
            await service.register(make_payload(name="Copycat"))

        assert len(fake_repo.rows) == 1
        assert fake_repo.rows["https://alpha.example"].name == "Alpha Couriers"


class TestLookupAndDelete:
    @pytest.mark.asyncio
    async def test_get_unknown_link(self, service):
        with pytest.raises(NotFoundError):
            await service.get("https://nowhere.example")

    @pytest.mark.asyncio
    async def test_delete_then_get(self, service, make_payload):
        await service.register(make_payload())

        await service.delete("https://alpha.example")

        with pytest.raises(NotFoundError):
            await service.get("https://alpha.example")

    @pytest.mark.asyncio
    async def test_delete_unknown_link(self, service):
        with pytest.raises(NotFoundError):
            await service.delete("https://nowhere.example")


class TestListNearby:
    @pytest.mark.asyncio
    async def test_uses_default_point(self, service, fake_repo, default_point):
        await service.list_nearby()

        assert fake_repo.list_calls == [default_point]

    @pytest.mark.asyncio
    async def test_orders_by_distance_with_null_regions_last(self, service, fake_repo, make_payload):
        paris = {"type": "Point", "coordinates": [2.35, 48.86]}
        princeton = {"type": "Point", "coordinates": [-74.66, 40.35]}
        await service.register(make_payload("https://far.example", region=paris))
        await service.register(make_payload("https://near.example", region=princeton))
        nowhere = await service.register(make_payload("https://nowhere.example"))
        # Rows written before regions were required have none
        fake_repo.rows[nowhere.link] = nowhere.model_copy(update={"region": None})

        ranked = await service.list_nearby(GeoPoint(latitude=40.344, longitude=-74.6514))

        assert [i.link for i in ranked] == [
            "https://near.example",
            "https://far.example",
            "https://nowhere.example",
        ]
        assert ranked[0].distance_meters < ranked[1].distance_meters
        assert ranked[2].distance_meters is None


class TestRefresh:
    @pytest.mark.asyncio
    async def test_merges_new_fields(self, service, fake_repo, fake_probe, make_payload):
        registered = await service.register(make_payload())
        await asyncio.sleep(0.001)
        fake_probe.serve("https://alpha.example", {"userCount": 99})

        outcome = await service.refresh("https://alpha.example")

        stored = fake_repo.rows["https://alpha.example"]
        assert outcome.status == RefreshStatus.REFRESHED
        assert stored.user_count == 99
        assert stored.name == "Alpha Couriers"
        assert stored.last_fetched_at > registered.last_fetched_at

    @pytest.mark.asyncio
    async def test_accepts_result_envelope(self, service, fake_repo, fake_probe, make_payload):
        await service.register(make_payload())
        fake_probe.serve("https://alpha.example", {"result": {"details": {"name": "Renamed"}}})

        await service.refresh("https://alpha.example")

        assert fake_repo.rows["https://alpha.example"].name == "Renamed"

    @pytest.mark.asyncio
    async def test_link_in_metadata_is_ignored(self, service, fake_repo, fake_probe, make_payload):
        await service.register(make_payload())
        fake_probe.serve("https://alpha.example", {"link": "https://hijack.example"})

        await service.refresh("https://alpha.example")

        assert list(fake_repo.rows) == ["https://alpha.example"]

    @pytest.mark.asyncio
    async def test_failed_probe_leaves_row_untouched(self, service, fake_repo, fake_probe, make_payload):
        registered = await service.register(make_payload())
        fake_probe.fail("https://alpha.example", ProbeFailureReason.TIMEOUT)

        outcome = await service.refresh("https://alpha.example")

        assert outcome.failed
        assert outcome.reason == "timeout"
        assert fake_repo.rows["https://alpha.example"] == registered

    @pytest.mark.asyncio
    async def test_invalid_metadata(self, service, fake_probe, make_payload):
        await service.register(make_payload())
        fake_probe.serve("https://alpha.example", {"userCount": "many"})

        outcome = await service.refresh("https://alpha.example")

        assert outcome.reason == "invalid-metadata"

    @pytest.mark.asyncio
    async def test_deleted_before_merge(self, service, fake_probe):
        outcome = await service.refresh("https://gone.example")

        assert outcome.failed
        assert outcome.reason == "not-found"

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported_not_raised(self, fake_probe, default_point):
        repo = AsyncMock()
        repo.merge_update.side_effect = StorageUnavailableError("Instance store merge_update failed")
        service = RegistryService(instance_repo=repo, metadata_probe=fake_probe, default_point=default_point)

        outcome = await service.refresh("https://alpha.example")

        assert outcome.reason == "storage-error"
