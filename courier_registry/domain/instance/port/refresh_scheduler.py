"""RefreshScheduler port - detached execution of instance refreshes."""

from typing import Protocol

from courier_registry.domain.instance.model.refresh import RefreshOutcome


class RefreshScheduler(Protocol):
    def submit(self, link: str) -> bool:
        """Schedule a refresh of ``link`` and return immediately.

        Returns:
            False if the scheduler is shutting down and the refresh was dropped.
        """
        ...

    def last_outcome(self, link: str) -> RefreshOutcome | None:
        """Most recent completed refresh outcome for ``link`` in this process."""
        ...

    def forget(self, link: str) -> None:
        """Drop whatever is remembered about refreshes of ``link``."""
        ...
