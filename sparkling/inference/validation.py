"""Validation of parameter proposals before they reach a sparkling."""

import logging
import math
from typing import Any, Dict, Mapping

from sparkling.parameters import get_spec, normalize_parameter_key

logger = logging.getLogger(__name__)


def validate_proposals(proposals: Mapping[str, Any]) -> Dict[str, float]:
    """Normalize keys, drop unknown or non-numeric entries and clamp values.

    Out-of-range values are clamped rather than rejected.
    """
    validated: Dict[str, float] = {}
    for raw_key, raw_value in proposals.items():
        name = normalize_parameter_key(raw_key)
        if name is None:
            logger.debug("Discarding unknown proposed parameter %r", raw_key)
            continue
        if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
            continue
        if math.isnan(raw_value) or math.isinf(raw_value):
            continue
        validated[name] = get_spec(name).clamp(raw_value)
    return validated
