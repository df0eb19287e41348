"""Compose the post-processing stages into a single band reading call."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from ..config.settings import AppSettings
from ..models import BandReading
from .decoder import decode_rows
from .deduplicator import collapse_repeats
from .sequencer import order_detections
from .suppressor import suppress

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.25
DEFAULT_IOU_THRESHOLD = 0.45


class BandReader:
    """Turns raw detector rows into an ordered, deduplicated list of band colors.

    Holds only immutable configuration, so one instance can serve any number of images,
    including from several threads at once.
    """

    def __init__(
        self,
        labels: Sequence[str],
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        iou_threshold: float = DEFAULT_IOU_THRESHOLD,
    ) -> None:
        self.labels: Tuple[str, ...] = tuple(labels)
        self.confidence_threshold = confidence_threshold
        self.iou_threshold = iou_threshold

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "BandReader":
        return cls(settings.labels, settings.confidence_threshold, settings.iou_threshold)

    def run(self, raw_rows: Iterable[Sequence[float]]) -> BandReading:
        """Decode, suppress, order and collapse one image's raw output."""

        candidates = decode_rows(raw_rows, self.labels, self.confidence_threshold)
        kept = suppress(candidates, self.iou_threshold)
        ordered = order_detections(kept)
        bands = collapse_repeats(detection.class_name for detection in ordered)
        LOGGER.debug(
            "Band reading | candidates=%d | kept=%d | bands=%s",
            len(candidates),
            len(kept),
            bands,
        )
        return BandReading(bands=bands, detections=ordered)


def read_bands(
    raw_rows: Iterable[Sequence[float]],
    labels: Sequence[str],
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
) -> List[str]:
    """Return the band colors for one raw output tensor, left to right."""

    return BandReader(labels, confidence_threshold, iou_threshold).run(raw_rows).bands
