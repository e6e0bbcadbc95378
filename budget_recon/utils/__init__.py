"""
Shared utilities and helpers.
"""

import json
from typing import Any, Dict
from datetime import datetime
from enum import Enum


def serialize_for_json(obj: Any) -> Any:
    """Serialize objects that aren't JSON-serializable by default."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Enum):
        return obj.value
    elif hasattr(obj, 'model_dump'):  # Pydantic model
        return obj.model_dump(mode="json")
    elif hasattr(obj, '__dict__'):
        return obj.__dict__
    return str(obj)


def dict_to_json_string(data: Dict) -> str:
    """Convert dict to JSON string, handling non-serializable types."""
    return json.dumps(data, default=serialize_for_json, indent=2)


def is_uuid_like(value: Any) -> bool:
    """Heuristic reference check: a 36-character string is treated as a UUID."""
    return isinstance(value, str) and len(value) == 36
