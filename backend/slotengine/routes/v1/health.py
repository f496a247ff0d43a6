# backend/slotengine/routes/v1/health.py
"""
Health and Prometheus metrics endpoints.

/metrics is public, following standard Prometheus practice.
"""

from typing import Dict

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/health")
def health_check() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/metrics")
def get_metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
