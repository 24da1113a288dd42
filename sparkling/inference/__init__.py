"""Inference subsystem: context, strategies, parsing, validation and metrics."""

from sparkling.inference.context import build_context, render_prompt
from sparkling.inference.local import LocalRuleStrategy
from sparkling.inference.metrics import InferenceMetrics, InferenceRecord
from sparkling.inference.parsing import ParsedResponse, extract_text, parse_reasoning_response
from sparkling.inference.remote import RemoteStrategy
from sparkling.inference.service import InferenceService
from sparkling.inference.types import InferenceContext, InferenceResult
from sparkling.inference.validation import validate_proposals

__all__ = [
    "InferenceContext",
    "InferenceMetrics",
    "InferenceRecord",
    "InferenceResult",
    "InferenceService",
    "LocalRuleStrategy",
    "ParsedResponse",
    "RemoteStrategy",
    "build_context",
    "extract_text",
    "parse_reasoning_response",
    "render_prompt",
    "validate_proposals",
]
