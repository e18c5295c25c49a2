"""Shared fakes for unit tests.

The fakes implement the domain ports in memory so services, handlers and the
HTTP API can be exercised without PostGIS or a network.
"""

import math
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest
from dishka import provide

from courier_registry.domain.instance.model.aggregate import Instance, RankedInstance
from courier_registry.domain.instance.model.probe import ProbeFailureReason, ProbeResult
from courier_registry.domain.instance.model.value import (
    GeoPoint,
    InstanceDetails,
    InstanceStatus,
)
from courier_registry.domain.instance.port.metadata_probe import MetadataProbe
from courier_registry.domain.instance.port.repository import InstanceRepository
from courier_registry.domain.shared.error import ConflictError
from courier_registry.util.di.base import Provider, Scope

EARTH_RADIUS_METERS = 6_371_008.8


def valid_payload(link: str = "https://alpha.example", **overrides: Any) -> dict[str, Any]:
    """A flat registration payload with every required field."""
    payload: dict[str, Any] = {
        "name": "Alpha Couriers",
        "link": link,
        "websocketLink": link.replace("https://", "wss://") + "/ws",
        "region": {"type": "Point", "coordinates": [-74.65, 40.35]},
        "imageUrl": f"{link}/logo.png",
        "userCount": 12,
    }
    payload.update(overrides)
    return payload


def _first_position(geometry: dict[str, Any]) -> list[float]:
    if geometry["type"] == "GeometryCollection":
        return _first_position(geometry["geometries"][0])
    coords: Any = geometry["coordinates"]
    while isinstance(coords[0], list):
        coords = coords[0]
    return coords


def haversine_meters(point: GeoPoint, position: list[float]) -> float:
    lng, lat = position[0], position[1]
    phi1, phi2 = math.radians(point.latitude), math.radians(lat)
    dphi = phi2 - phi1
    dlambda = math.radians(lng - point.longitude)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


class FakeInstanceRepository(InstanceRepository):
    """In-memory InstanceRepository. Distances use the first vertex of the region."""

    def __init__(self) -> None:
        self.rows: dict[str, Instance] = {}
        self.list_calls: list[GeoPoint] = []

    async def insert(self, details: InstanceDetails) -> Instance:
        assert details.link is not None
        if details.link in self.rows:
            raise ConflictError("Instance with this link already exists")
        now = datetime.now(UTC)
        instance = Instance(
            id=str(uuid4()),
            name=details.name,
            link=details.link,
            websocket_link=details.websocket_link,
            region=details.region,
            image_url=details.image_url,
            user_count=details.user_count or 0,
            status=InstanceStatus.VERIFIED,
            last_fetched_at=now,
            created_at=now,
            updated_at=details.updated_at,
        )
        self.rows[instance.link] = instance
        return instance

    async def find_by_link(self, link: str) -> Instance | None:
        return self.rows.get(link)

    async def delete_by_link(self, link: str) -> bool:
        return self.rows.pop(link, None) is not None

    async def merge_update(self, link: str, details: InstanceDetails) -> Instance | None:
        current = self.rows.get(link)
        if current is None:
            return None
        now = datetime.now(UTC)
        changes = {
            attr: getattr(details, attr)
            for attr in ("name", "websocket_link", "region", "image_url", "user_count")
            if getattr(details, attr) is not None
        }
        updated = current.model_copy(
            update={**changes, "last_fetched_at": now, "updated_at": details.updated_at or now}
        )
        self.rows[link] = updated
        return updated

    async def list_verified(self, point: GeoPoint) -> list[RankedInstance]:
        self.list_calls.append(point)
        ranked = []
        for instance in self.rows.values():
            if instance.status != InstanceStatus.VERIFIED:
                continue
            distance = (
                haversine_meters(point, _first_position(instance.region))
                if instance.region
                else None
            )
            ranked.append(RankedInstance(**instance.model_dump(), distance_meters=distance))
        ranked.sort(key=lambda i: (i.distance_meters is None, i.distance_meters or 0.0, i.id))
        return ranked


class FakeMetadataProbe(MetadataProbe):
    """Serves canned probe results per link. Unknown links get a valid document."""

    def __init__(self) -> None:
        self.results: dict[str, ProbeResult] = {}
        self.calls: list[str] = []

    def serve(self, link: str, document: Any) -> None:
        self.results[link] = ProbeResult.success(url=f"{link}/metadata", document=document, status_code=200)

    def fail(self, link: str, reason: ProbeFailureReason, status_code: int | None = None) -> None:
        self.results[link] = ProbeResult.failure(reason, url=f"{link}/metadata", status_code=status_code)

    async def verify(self, link: str) -> ProbeResult:
        self.calls.append(link)
        if link in self.results:
            return self.results[link]
        return ProbeResult.success(url=f"{link}/metadata", document=valid_payload(link), status_code=200)


class FakeAdapterProvider(Provider):
    """Overrides the PostGIS repository and HTTP probe with in-memory fakes."""

    def __init__(self, repo: FakeInstanceRepository, probe: FakeMetadataProbe) -> None:
        super().__init__()
        self._repo = repo
        self._probe = probe

    @provide(scope=Scope.APP)
    def get_instance_repo(self) -> InstanceRepository:
        return self._repo

    @provide(scope=Scope.APP)
    def get_metadata_probe(self) -> MetadataProbe:
        return self._probe


@pytest.fixture
def fake_repo() -> FakeInstanceRepository:
    return FakeInstanceRepository()


@pytest.fixture
def fake_probe() -> FakeMetadataProbe:
    return FakeMetadataProbe()


@pytest.fixture
def default_point() -> GeoPoint:
    return GeoPoint(latitude=40.344, longitude=-74.6514)


@pytest.fixture
def make_payload():
    """Factory for complete flat registration payloads."""
    return valid_payload


@pytest.fixture
def fake_adapters(fake_repo: FakeInstanceRepository, fake_probe: FakeMetadataProbe) -> Provider:
    return FakeAdapterProvider(fake_repo, fake_probe)
