"""Payload normalization for instance registrations and metadata documents.

Clients have submitted instance details in several shapes over time:

    {"name": ..., "link": ..., ...}                       # flat
    {"details": {"name": ..., ...}, "config": {...}}      # nested
    {"instanceConfig": {"details": {...}}, "updatedAt": ...}

All of them are mapped onto one :class:`InstanceDetails`. For every field the
details container wins over the top level. ``updatedAt`` describes the
submission itself and is only ever read from the top level. Configuration
blocks are accepted and dropped; unknown keys are ignored.
"""

import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from courier_registry.domain.instance.model.value import (
    REQUIRED_DETAIL_FIELDS,
    InstanceDetails,
)
from courier_registry.domain.shared.error import ValidationError

logger = logging.getLogger(__name__)

# Candidate locations of the details container, checked in order. Each entry
# is a key path from the payload root.
DETAILS_CONTAINER_PATHS: tuple[tuple[str, ...], ...] = (
    ("details",),
    ("metadata",),
    ("instanceDetails",),
    ("instanceConfig", "details"),
    ("instance_config", "details"),
)

# Configuration blocks clients may send alongside the details. Never persisted.
CONFIG_CONTAINER_KEYS: tuple[str, ...] = (
    "config",
    "configuration",
    "instanceConfiguration",
    "instance_config",
    "instanceConfig",
)

# Fields resolved container-first, then top level.
DETAIL_FIELDS: tuple[str, ...] = (
    "name",
    "link",
    "websocketLink",
    "region",
    "imageUrl",
    "userCount",
    "rulesUrl",
    "descriptionUrl",
    "termsOfServiceUrl",
    "privacyPolicyUrl",
)

# Envelope some instance implementations wrap their metadata document in.
RESULT_ENVELOPE_KEY = "result"


def _lookup(payload: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def find_details_container(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the first details container present in ``payload``, or ``{}``."""
    for path in DETAILS_CONTAINER_PATHS:
        container = _lookup(payload, path)
        if isinstance(container, Mapping):
            return container
    return {}


def unwrap_envelope(document: Any) -> Any:
    """Strip a ``{"result": {...}}`` envelope from a metadata document."""
    if isinstance(document, Mapping):
        inner = document.get(RESULT_ENVELOPE_KEY)
        if isinstance(inner, Mapping):
            return inner
    return document


def collect_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Resolve raw (unvalidated) detail fields from any accepted payload shape."""
    container = find_details_container(payload)
    raw: dict[str, Any] = {}
    for field in DETAIL_FIELDS:
        value = container.get(field)
        if value is None:
            value = payload.get(field)
        raw[field] = value
    raw["updatedAt"] = payload.get("updatedAt")
    return raw


def missing_required_fields(raw: Mapping[str, Any]) -> list[str]:
    """Names of required fields that are absent or null, in reporting order."""
    return [field for field in REQUIRED_DETAIL_FIELDS if raw.get(field) is None]


def normalize_payload(payload: Any, *, require_complete: bool = True) -> InstanceDetails:
    """Map a client payload onto the canonical instance-detail record.

    Args:
        payload: Decoded JSON body of a registration or metadata response.
        require_complete: Reject payloads missing any required field. Refresh
            merges pass False so absent fields simply stay unset.

    Raises:
        ValidationError: Payload is not an object, required fields are missing,
            or a field has the wrong type. ``fields`` names the culprits.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be a JSON object")

    ignored = [key for key in CONFIG_CONTAINER_KEYS if key in payload]
    if ignored:
        logger.debug("Ignoring configuration blocks: %s", ", ".join(ignored))

    raw = collect_fields(payload)

    if require_complete:
        missing = missing_required_fields(raw)
        if missing:
            raise ValidationError(
                f"Missing details fields: {', '.join(missing)}",
                fields=missing,
            )

    try:
        return InstanceDetails.model_validate({k: v for k, v in raw.items() if v is not None})
    except PydanticValidationError as e:
        fields = []
        for error in e.errors():
            loc = str(error["loc"][0]) if error["loc"] else "payload"
            if loc not in fields:
                fields.append(loc)
        raise ValidationError(f"Invalid details fields: {', '.join(fields)}", fields=fields) from e
