"""Geometry helper utilities for bounding boxes in xyxy format."""
from __future__ import annotations

from typing import Sequence

BBox = Sequence[float]


def box_area(box: BBox) -> float:
    """Return ``(x2 - x1) * (y2 - y1)`` without clamping.

    An inverted box (``x2 < x1`` or ``y2 < y1``) yields a negative area. Callers that can
    produce such boxes get a defined result from :func:`iou` but should not rely on it.
    """

    x1, y1, x2, y2 = box[:4]
    return float((x2 - x1) * (y2 - y1))


def iou(a: BBox, b: BBox) -> float:
    """Intersection-over-union of two xyxy boxes.

    The intersection is clamped per axis so disjoint or degenerate boxes overlap by zero.
    Returns 0.0 whenever the union is not positive.
    """

    ix1 = max(a[0], b[0])
    iy1 = max(a[1], b[1])
    ix2 = min(a[2], b[2])
    iy2 = min(a[3], b[3])

    intersection = max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)
    union = box_area(a) + box_area(b) - intersection
    return float(intersection / union) if union > 0 else 0.0
