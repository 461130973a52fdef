"""Parsing helpers for model replies that should contain a JSON object."""

import json
import re

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Models often put raw newlines inside string values; strict=False accepts them.
_LENIENT_DECODER = json.JSONDecoder(strict=False)


def _loads_object(text: str) -> dict:
    try:
        result = json.loads(text)
    except json.JSONDecodeError:
        result = _LENIENT_DECODER.decode(text)
    if isinstance(result, list):
        result = next((item for item in result if isinstance(item, dict)), None)
    if not isinstance(result, dict):
        raise json.JSONDecodeError("expected a JSON object", text, 0)
    return result


def _candidates(text: str):
    yield text
    match = _JSON_FENCE_RE.search(text)
    if match:
        yield match.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        yield text[start:end + 1]


def parse_json_response(text: str) -> dict:
    """Extract the JSON object from a model reply.

    Tries the whole reply, then a fenced ```json block, then the outermost
    ``{...}`` span. A top-level array yields its first object.

    Raises:
        ValueError: If no candidate parses to an object.
    """
    text = (text or "").strip()
    for candidate in _candidates(text):
        try:
            return _loads_object(candidate)
        except json.JSONDecodeError:
            continue
    raise ValueError(f"Failed to parse JSON from model response: {text[:200]}...")
