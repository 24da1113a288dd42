"""Normalization of parameter key names coming from external sources."""

import re
from typing import Dict, Optional

from sparkling.parameters.specs import PARAMETER_NAMES

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SEPARATORS = re.compile(r"[\s\-\.]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")

_COMPACT_NAMES: Dict[str, str] = {_NON_ALNUM.sub("", name): name for name in PARAMETER_NAMES}


def to_snake_case(key: str) -> str:
    """Convert camelCase, spaced or dashed keys to snake_case."""
    key = _CAMEL_BOUNDARY.sub("_", key.strip())
    key = _SEPARATORS.sub("_", key)
    return re.sub(r"_+", "_", key).strip("_").lower()


def normalize_parameter_key(key: str) -> Optional[str]:
    """Map an arbitrary key spelling onto a canonical parameter name.

    ``"hungerThreshold"``, ``"Hunger Threshold"``, ``"HUNGER_THRESHOLD"`` and
    ``"hunger-threshold"`` all resolve to ``"hunger_threshold"``.

    Returns:
        The canonical name, or None if the key is not a known parameter
    """
    if not isinstance(key, str) or not key.strip():
        return None
    return _COMPACT_NAMES.get(_NON_ALNUM.sub("", to_snake_case(key)))
