"""Parsing of text-generation responses into parameter proposals.

Model output is rarely clean JSON. The parser tolerates:
- prose around the JSON object
- raw control characters (newlines, tabs) inside string values
- parameter keys in any casing (normalized later by validation)

If strict parsing fails, a looser regex extraction of the ``reasoning``
string and ``"name": number`` pairs is attempted before giving up.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from sparkling.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_LOOSE_REASONING = re.compile(r'"reasoning"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_LOOSE_NUMBER_PAIR = re.compile(r'"([A-Za-z][A-Za-z0-9_ \-]*)"\s*:\s*(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)')

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}


@dataclass
class ParsedResponse:
    reasoning: str
    parameters: Dict[str, float] = field(default_factory=dict)
    loose: bool = False


def extract_text(body: Any) -> Optional[str]:
    """Concatenate the text blocks of a messages-API response body."""
    if not isinstance(body, Mapping):
        return None
    content = body.get("content")
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return None
    texts = [
        block["text"]
        for block in content
        if isinstance(block, Mapping) and isinstance(block.get("text"), str)
    ]
    return "\n".join(texts) if texts else None


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in ``text``, if any."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def sanitize_control_characters(raw: str) -> str:
    """Escape control characters that appear inside JSON string literals."""
    out = []
    in_string = False
    escaped = False
    for char in raw:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            elif ord(char) < 0x20:
                out.append(_CONTROL_ESCAPES.get(char, ""))
                continue
        elif char == '"':
            in_string = True
        out.append(char)
    return "".join(out)


def _numeric_parameters(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, Mapping):
        return {}
    numbers: Dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            numbers[str(key)] = float(value)
        elif isinstance(value, str):
            try:
                numbers[str(key)] = float(value)
            except ValueError:
                continue
    return numbers


def _parse_strict(text: str) -> Optional[ParsedResponse]:
    candidate = find_json_object(text)
    if candidate is None:
        return None
    try:
        data = json.loads(sanitize_control_characters(candidate))
    except json.JSONDecodeError as e:
        logger.debug("Strict JSON parse failed: %s", e)
        return None
    if not isinstance(data, dict):
        return None
    reasoning = data.get("reasoning")
    return ParsedResponse(
        reasoning=reasoning if isinstance(reasoning, str) else "",
        parameters=_numeric_parameters(data.get("parameters")),
    )


def _parse_loose(text: str) -> Optional[ParsedResponse]:
    reasoning_match = _LOOSE_REASONING.search(text)
    pairs = {
        key: float(value)
        for key, value in _LOOSE_NUMBER_PAIR.findall(text)
        if key != "reasoning"
    }
    if reasoning_match is None and not pairs:
        return None
    reasoning = reasoning_match.group(1).replace('\\"', '"').replace("\\n", "\n") if reasoning_match else ""
    return ParsedResponse(reasoning=reasoning, parameters=pairs, loose=True)


def parse_reasoning_response(text: Optional[str]) -> Result[ParsedResponse, str]:
    """Parse model text into reasoning plus raw parameter proposals.

    Returns:
        Ok(ParsedResponse) or Err(description) when nothing usable was found
    """
    if not text or not text.strip():
        return Err("empty response text")

    parsed = _parse_strict(text)
    if parsed is not None and (parsed.reasoning or parsed.parameters):
        return Ok(parsed)

    parsed = _parse_loose(text)
    if parsed is not None:
        logger.info("Recovered inference response with loose extraction")
        return Ok(parsed)

    return Err(f"no JSON object with reasoning or parameters in response: {text[:120]!r}")
