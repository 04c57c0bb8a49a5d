"""Observability API endpoints.

Provides metrics, health checks, and readiness checks for monitoring.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..dependencies import get_pipeline
from ..pipeline import DocumentPipeline
from .health import (
    HealthStatus,
    check_object_storage_health,
    check_worker_pool_health,
    get_overall_health,
)
from .logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Observability"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    include_in_schema=False,
)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of object storage and the analysis worker pool",
    status_code=200,
)
async def health_check(pipeline: DocumentPipeline = Depends(get_pipeline)):
    """Check health of all pipeline components.

    Returns 200 OK if healthy or degraded, 503 if any component is unhealthy.
    """
    components = {
        "object_storage": await check_object_storage_health(pipeline.storage),
        "analysis_workers": check_worker_pool_health(pipeline),
    }

    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        },
        "documents": pipeline.stats()["documents"],
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503
    if status_code == 503:
        logger.warning(f"Health check unhealthy: {response_data['components']}")

    return JSONResponse(
        content=response_data,
        status_code=status_code
    )


@router.get(
    "/ready",
    summary="Readiness check endpoint",
    description="Returns readiness status (for Kubernetes readiness checks)",
    status_code=200,
)
def readiness_check(pipeline: DocumentPipeline = Depends(get_pipeline)):
    """Ready once the pipeline has started its workers."""
    if pipeline.started:
        return {
            "status": "ready",
            "message": "Application is ready to serve traffic"
        }

    return JSONResponse(
        content={
            "status": "not_ready",
            "message": "Document pipeline is not running"
        },
        status_code=503
    )
