from datetime import datetime
from enum import StrEnum

from courier_registry.domain.shared.model.value import ValueObject


class RefreshStatus(StrEnum):
    REFRESHED = "refreshed"
    FAILED = "failed"


class RefreshOutcome(ValueObject):
    """Result of one refresh attempt for an instance.

    ``reason`` is a probe failure code (``timeout``, ``unreachable``, ...) or one
    of ``not-found``, ``invalid-metadata``, ``storage-error`` for failures after
    a successful probe.
    """

    link: str
    status: RefreshStatus
    reason: str | None = None
    status_code: int | None = None
    finished_at: datetime

    @property
    def failed(self) -> bool:
        return self.status == RefreshStatus.FAILED
