"""YOLO inference wrapper producing raw detector rows."""
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

try:  # pragma: no cover - import guarded for environments without ultralytics
    from ultralytics import YOLO
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "ultralytics package is required to run the band detector. Install the project "
        "dependencies via `pip install -e .` before running detect.py."
    ) from exc

from ..utils.images import resize_square

LOGGER = logging.getLogger(__name__)


class YOLODetector:
    """Runs the band detector and returns its ``(N, 6)`` candidate rows.

    The ultralytics predictor always applies its own NMS and a ``max_det`` cap. Both are
    opened up here (``iou=1.0`` suppresses nothing, ``max_det`` covers every anchor of a
    640 input) so the band reader's thresholds are the ones that decide what survives.
    """

    MAX_RAW_DETECTIONS = 30000

    def __init__(self, model_path: Path, input_size: int = 640) -> None:
        self.model_path = model_path
        self.input_size = input_size
        LOGGER.info("Loading YOLO model from %s", model_path)
        self._model = YOLO(str(model_path), task="detect")

    def raw_rows(self, image: np.ndarray) -> np.ndarray:
        """Return ``[x1, y1, x2, y2, conf, cls]`` rows in the resized input frame."""

        resized = resize_square(image, self.input_size)
        results = self._model(
            resized,
            imgsz=self.input_size,
            conf=0.0,
            iou=1.0,
            max_det=self.MAX_RAW_DETECTIONS,
            verbose=False,
        )
        rows = [
            result.boxes.data.cpu().numpy()
            for result in results
            if result.boxes is not None and len(result.boxes)
        ]
        if not rows:
            return np.zeros((0, 6), dtype=np.float32)
        stacked = np.concatenate(rows, axis=0).astype(np.float32)
        LOGGER.debug("Detector produced %d raw rows", len(stacked))
        return stacked
