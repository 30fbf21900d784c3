from __future__ import annotations

from fastapi import APIRouter

from orderassist.core.metrics import request_metrics

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("")
def metrics_snapshot():
    return {"requests": request_metrics.snapshot(), "stage_transitions": request_metrics.snapshot_stages()}
