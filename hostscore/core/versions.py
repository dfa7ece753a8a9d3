from __future__ import annotations

from typing import List


def _components(version: str) -> List[int]:
    parts: List[int] = []
    for raw in str(version).split("."):
        try:
            parts.append(int(raw))
        except ValueError:
            # Non-numeric components ("rc1", "") compare as zero.
            parts.append(0)
    return parts


def version_cmp(a: str, b: str) -> int:
    """
    Compare two dotted version strings numerically.

    Returns -1, 0 or 1. When every shared component is equal the version with
    fewer components sorts first, so "1.4" < "1.4.0".
    """
    a_parts = _components(a)
    b_parts = _components(b)
    for x, y in zip(a_parts, b_parts):
        if x < y:
            return -1
        if x > y:
            return 1
    if len(a_parts) < len(b_parts):
        return -1
    if len(a_parts) > len(b_parts):
        return 1
    return 0
