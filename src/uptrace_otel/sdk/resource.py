"""Resource attribute detection and merging."""

from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING, Sequence

from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    HOST_NAME,
    SERVICE_NAME,
    SERVICE_VERSION,
    OTELResourceDetector,
    ProcessResourceDetector,
    Resource,
    ResourceDetector,
)

if TYPE_CHECKING:
    from uptrace_otel.api.types import Attributes, AttributeValue

logger = logging.getLogger(__name__)


class HostResourceDetector(ResourceDetector):
    """Detect ``host.name`` from the local hostname."""

    def detect(self) -> Resource:
        try:
            hostname = socket.gethostname()
        except OSError as e:
            logger.debug("Hostname lookup failed: %s", e)
            return Resource.get_empty()
        if not hostname:
            return Resource.get_empty()
        return Resource({HOST_NAME: hostname})


def default_detectors() -> list[ResourceDetector]:
    """Return the detectors used when none are configured.

    Later detectors win, so OTEL_RESOURCE_ATTRIBUTES overrides what the
    process and host detectors found.
    """
    return [
        ProcessResourceDetector(),
        HostResourceDetector(),
        OTELResourceDetector(),
    ]


def _detect(detector: ResourceDetector) -> dict[str, AttributeValue]:
    try:
        return dict(detector.detect().attributes)
    except Exception as e:
        logger.warning(
            "Resource detector %s failed, skipping: %s", type(detector).__name__, e
        )
        return {}


def resolve_resource_attributes(
    detectors: Sequence[ResourceDetector],
    *,
    resource: Resource | None = None,
    attributes: Attributes | None = None,
    service_name: str | None = None,
    service_version: str | None = None,
    deployment_environment: str | None = None,
) -> dict[str, AttributeValue]:
    """Merge resource attributes from every source.

    Sources are applied lowest precedence first and a later source
    overwrites a key set by an earlier one:

    1. ``detectors`` in order
    2. ``resource``
    3. ``attributes``
    4. ``service_name``, ``service_version``, ``deployment_environment``,
       each only when set

    Args:
        detectors: Resource detectors. A detector that raises contributes
            nothing.
        resource: Resource supplied by the caller.
        attributes: Attribute mapping supplied by the caller.
        service_name: Value for ``service.name``.
        service_version: Value for ``service.version``.
        deployment_environment: Value for ``deployment.environment``.

    Returns:
        The merged attribute mapping.
    """
    merged: dict[str, AttributeValue] = {}

    for detector in detectors:
        merged.update(_detect(detector))

    if resource is not None:
        merged.update(resource.attributes)
    if attributes:
        merged.update(attributes)

    if service_name:
        merged[SERVICE_NAME] = service_name
    if service_version:
        merged[SERVICE_VERSION] = service_version
    if deployment_environment:
        merged[DEPLOYMENT_ENVIRONMENT] = deployment_environment

    return merged
