"""Decode raw detector output rows into validated detections."""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Sequence

from ..models import Detection

LOGGER = logging.getLogger(__name__)

ROW_FIELDS = 6


class InputShapeError(ValueError):
    """Raised when a raw output row is too short to hold ``x1, y1, x2, y2, conf, cls``."""


def decode_rows(
    raw_rows: Iterable[Sequence[float]],
    labels: Sequence[str],
    confidence_threshold: float,
) -> List[Detection]:
    """Return detections for rows at or above the confidence threshold.

    Rows whose class index falls outside the label table are skipped. A row with fewer than
    six fields aborts the whole call with :class:`InputShapeError`.
    """

    detections: List[Detection] = []
    skipped = 0
    for row_index, row in enumerate(raw_rows):
        if len(row) < ROW_FIELDS:
            raise InputShapeError(
                f"Row {row_index} has {len(row)} fields, expected at least {ROW_FIELDS}"
            )
        confidence = float(row[4])
        # NaN compares false and is treated as below threshold
        if not confidence >= confidence_threshold:
            continue
        raw_class = float(row[5])
        if not math.isfinite(raw_class):
            LOGGER.debug("Skipping row %d with non-finite class index %s", row_index, raw_class)
            skipped += 1
            continue
        class_id = int(raw_class)
        if not 0 <= class_id < len(labels):
            LOGGER.debug("Skipping row %d with class index %d outside label table", row_index, class_id)
            skipped += 1
            continue
        bbox = (float(row[0]), float(row[1]), float(row[2]), float(row[3]))
        detections.append(
            Detection(bbox=bbox, confidence=confidence, class_id=class_id, class_name=labels[class_id])
        )

    if skipped:
        LOGGER.debug("Dropped %d rows with invalid class indices", skipped)
    return detections
