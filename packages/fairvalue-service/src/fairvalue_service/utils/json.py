import math
from enum import Enum
from typing import Any


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively replace NaN and Infinity with None and enums with their values.

    Provider payloads and upside figures pass through here before they are
    returned, so responses stay strict JSON.
    """
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    return obj
