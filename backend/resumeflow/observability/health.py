"""Health check utilities for ResumeFlow.

Provides health and readiness checks for object storage and the analysis
worker pool.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from ..domain.documents.ports import ObjectStoragePort
from .logging_config import get_logger

if TYPE_CHECKING:
    from ..pipeline import DocumentPipeline

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


async def check_object_storage_health(storage: ObjectStoragePort) -> ComponentHealth:
    """Check that the storage backend is reachable.

    Args:
        storage: Storage adapter used by the pipeline

    Returns:
        ComponentHealth: Object storage health status
    """
    try:
        start = time.time()
        await storage.check_health()
        latency_ms = (time.time() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Object storage connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except Exception as e:
        logger.error(f"Object storage health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Object storage error: {str(e)}"
        )


def check_worker_pool_health(pipeline: "DocumentPipeline") -> ComponentHealth:
    """Check that the analysis workers are running.

    A pool with every worker busy and documents waiting is reported as
    DEGRADED rather than UNHEALTHY.
    """
    stats = pipeline.stats()

    if not stats["started"] or not stats["workers_running"]:
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message="Analysis workers are not running"
        )

    if stats["busy_workers"] >= stats["workers"] and stats["queue_depth"] > 0:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"All {stats['workers']} workers busy, {stats['queue_depth']} queued"
        )

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message=f"{stats['busy_workers']}/{stats['workers']} workers busy"
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses.

    Args:
        components: Dictionary of component health statuses

    Returns:
        HealthStatus: Overall system health
    """
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
