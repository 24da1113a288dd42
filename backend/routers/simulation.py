"""Read-only simulation endpoints (the render boundary over HTTP)."""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from backend.models import InferenceMetricsResponse, SimulationStatus
from backend.simulation_runner import SimulationRunner

logger = logging.getLogger(__name__)


def setup_router(runner: SimulationRunner) -> APIRouter:
    """Setup the simulation router.

    Args:
        runner: Runner owning the engine; every read takes its lock

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api", tags=["simulation"])

    @router.get("/status", response_model=SimulationStatus)
    async def get_status():
        return runner.get_status()

    @router.get("/state")
    async def get_state(include_cells: bool = Query(True, description="Include terrain and cell resources")):
        """Full snapshot: world, every sparkling and inference metrics."""
        return runner.get_state(include_cells=include_cells)

    @router.get("/sparklings/{sparkling_id}")
    async def get_sparkling(sparkling_id: int):
        snapshot = runner.get_sparkling(sparkling_id)
        if snapshot is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Sparkling {sparkling_id} not found",
            )
        return snapshot

    @router.get("/inference/metrics", response_model=InferenceMetricsResponse)
    async def get_inference_metrics():
        return runner.get_inference_metrics()

    @router.get("/stats")
    async def get_stats():
        return runner.get_stats()

    return router
