from __future__ import annotations

import difflib
import json
import pprint
from typing import Any

from pydantic_core import to_jsonable_python


def to_jsonable(value: Any) -> Any:
    """JSON-compatible rendering of an arbitrary model (pydantic, dataclass, dict...)."""

    return to_jsonable_python(value, fallback=repr, bytes_mode="base64")


def render_json(value: Any) -> str:
    try:
        return json.dumps(to_jsonable(value), indent=2, sort_keys=True)
    except (TypeError, ValueError, RecursionError):
        # Cycles and unsortable keys: pprint renders anything with a repr.
        return pprint.pformat(value)


def model_diff(old: Any, new: Any) -> str:
    """Unified diff between two models, or "" when they render identically."""

    before = render_json(old)
    after = render_json(new)
    if before == after:
        return ""

    diff = difflib.unified_diff(
        before.splitlines(),
        after.splitlines(),
        fromfile="model (before)",
        tofile="model (after)",
        lineterm="",
    )
    return "\n".join(diff)
