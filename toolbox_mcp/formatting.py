from __future__ import annotations

from typing import Any


def format_number(value: Any, missing: str = "n/a") -> str:
    """Render a number the way it reads in JSON: integral floats drop the `.0`."""
    if value is None:
        return missing
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)
