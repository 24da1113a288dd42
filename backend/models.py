"""Request and response models for the HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Server is running"


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


class MessagesRequest(BaseModel):
    """Body accepted by the relay; forwarded upstream as sent.

    Unknown fields are kept so newer upstream options pass through.
    """

    model_config = ConfigDict(extra="allow")

    model: str
    messages: List[Dict[str, Any]]
    max_tokens: int
    system: Optional[str] = None
    temperature: Optional[float] = None


class InferenceRecordModel(BaseModel):
    sparkling_id: int
    strategy: str
    success: bool
    latency: float
    reasoning: str
    parameter_count: int
    wall_time: float
    error: Optional[str] = None


class InferenceMetricsResponse(BaseModel):
    """Service-level inference counters and the most recent runs."""

    strategy: str
    total: int
    successful: int
    failed: int
    timeouts: int
    discarded: int
    average_latency: float
    recent: List[InferenceRecordModel]


class SimulationStatus(BaseModel):
    tick: int
    time: float
    population: int
    live: int
    running: bool
    strategy: str
