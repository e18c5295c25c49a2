"""InstanceRepository port - persistence for registered instances."""

from typing import Protocol

from courier_registry.domain.instance.model.aggregate import Instance, RankedInstance
from courier_registry.domain.instance.model.value import GeoPoint, InstanceDetails


class InstanceRepository(Protocol):
    """Repository for instances.

    ``link`` is unique and never changes after insertion. Each mutating call is
    atomic: it either fully applies or leaves the stored rows untouched.
    """

    async def insert(self, details: InstanceDetails) -> Instance:
        """Insert a verified instance.

        ``status`` is set to verified and ``last_fetched_at``/``created_at`` to now.
        ``updated_at`` is taken from ``details.updated_at`` (may be None).

        Raises:
            ConflictError: An instance with the same link already exists.
        """
        ...

    async def find_by_link(self, link: str) -> Instance | None:
        """Return the instance registered under ``link``, if any."""
        ...

    async def delete_by_link(self, link: str) -> bool:
        """Delete the instance registered under ``link``.

        Returns:
            True if a row was deleted, False if none matched.
        """
        ...

    async def merge_update(self, link: str, details: InstanceDetails) -> Instance | None:
        """Overwrite stored fields with the non-null fields of ``details``.

        ``link`` in ``details`` is ignored. ``last_fetched_at`` always advances;
        ``updated_at`` becomes ``details.updated_at`` or now.

        Returns:
            The updated instance, or None if no instance has this link.
        """
        ...

    async def list_verified(self, point: GeoPoint) -> list[RankedInstance]:
        """Return verified instances ordered by geodesic distance from ``point``.

        Instances without a region come last with ``distance_meters`` None.
        """
        ...
