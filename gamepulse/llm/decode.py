"""Best-effort JSON decoding of model output."""

from __future__ import annotations

import json
from typing import Any

from gamepulse.errors import ModelDecodeError


def lenient_json_decode(text: str) -> Any:
    """Decode `text` as JSON, tolerating prose or markdown fences around one object.

    Strict parse first; failing that, the span from the first "{" to the last
    "}". Raises ModelDecodeError (carrying the raw text) when both fail.
    """
    raw = text or ""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        raise ModelDecodeError("Model response contains no JSON object", raw=raw)
    try:
        return json.loads(raw[start : end + 1])
    except json.JSONDecodeError as e:
        raise ModelDecodeError(f"Model response is not valid JSON: {e}", raw=raw) from e
