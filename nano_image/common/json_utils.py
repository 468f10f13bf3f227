"""
JSON serialization utilities for diagnostics and API responses.

Generation responses may contain SDK objects and raw bytes, so logging them
needs an encoder that never gives up on unknown types.
"""

import base64
import json
from typing import Any


class SafeEncoder(json.JSONEncoder):
    """
    JSON Encoder for SDK responses.

    Converts:
    - bytes -> base64 string
    - pydantic models -> dict (model_dump)
    - set/tuple -> list
    - Other non-serializable types -> str (fallback)

    Usage:
        json.dumps(data, cls=SafeEncoder)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (bytes, bytearray)):
            return base64.b64encode(bytes(obj)).decode("ascii")
        if isinstance(obj, (set, tuple)):
            return list(obj)
        model_dump = getattr(obj, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json", exclude_none=True)
        return str(obj)


def dumps_safe(obj: Any, **kwargs) -> str:
    """
    Convenience wrapper for json.dumps with SafeEncoder.

    Args:
        obj: Object to serialize
        **kwargs: Additional arguments passed to json.dumps

    Returns:
        JSON string
    """
    return json.dumps(obj, cls=SafeEncoder, **kwargs)
