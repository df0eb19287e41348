"""Per-class greedy non-maximum suppression."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from ..models import Detection
from ..utils.geometry import iou

LOGGER = logging.getLogger(__name__)


def group_by_class(detections: Iterable[Detection]) -> Dict[int, List[Detection]]:
    """Partition detections by class id, keeping first-seen class order and input order."""

    grouped: Dict[int, List[Detection]] = defaultdict(list)
    for detection in detections:
        grouped[detection.class_id].append(detection)
    return dict(grouped)


def suppress_class(group: Sequence[Detection], iou_threshold: float) -> List[Detection]:
    """Greedy NMS over detections of a single class.

    Candidates are visited by descending confidence. Equal confidences keep their input order,
    so the earlier row wins a tie. Every later candidate overlapping a kept box with
    ``iou >= iou_threshold`` is suppressed.
    """

    ordered = sorted(group, key=lambda item: item.confidence, reverse=True)
    suppressed = [False] * len(ordered)
    kept: List[Detection] = []

    for idx, candidate in enumerate(ordered):
        if suppressed[idx]:
            continue
        kept.append(candidate)
        for other in range(idx + 1, len(ordered)):
            if not suppressed[other] and iou(candidate.bbox, ordered[other].bbox) >= iou_threshold:
                suppressed[other] = True
    return kept


def suppress(detections: Iterable[Detection], iou_threshold: float) -> List[Detection]:
    """Apply :func:`suppress_class` to each class group and concatenate the kept sets."""

    kept: List[Detection] = []
    for class_id, group in group_by_class(detections).items():
        survivors = suppress_class(group, iou_threshold)
        LOGGER.debug("Class %d: kept %d of %d candidates", class_id, len(survivors), len(group))
        kept.extend(survivors)
    return kept
