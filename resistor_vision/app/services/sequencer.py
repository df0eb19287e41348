"""Order kept detections left to right."""
from __future__ import annotations

from typing import Iterable, List

from ..models import Detection


def order_detections(detections: Iterable[Detection]) -> List[Detection]:
    """Sort detections by the left edge of their box.

    Assumes the resistor lies horizontally in the frame so bands read left to right.
    """

    return sorted(detections, key=lambda item: item.left)


def sequence_labels(detections: Iterable[Detection]) -> List[str]:
    return [detection.class_name for detection in order_detections(detections)]
