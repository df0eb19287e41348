"""Persist band readings and annotated snapshots."""
from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

from ..config.settings import AppSettings
from ..models import Detection

LOGGER = logging.getLogger(__name__)


@dataclass
class BandRecord:
    image: str
    timestamp: str
    bands: List[str]
    latency_ms: float
    detections: List[Detection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image": self.image,
            "timestamp": self.timestamp,
            "bands": list(self.bands),
            "latency_ms": self.latency_ms,
            "detections": [
                {
                    "bbox": [round(value, 2) for value in detection.bbox],
                    "confidence": round(detection.confidence, 4),
                    "class_id": detection.class_id,
                    "class_name": detection.class_name,
                }
                for detection in self.detections
            ],
        }


def reset_output_state(settings: AppSettings) -> None:
    """Remove the artifacts this run will rewrite; disabled outputs are left alone."""

    results_path = settings.data_dir / settings.results_filename
    snapshot_dir = settings.snapshot_dir

    try:
        if settings.save_results and results_path.exists():
            results_path.unlink()
            LOGGER.debug("Removed stale results file %s", results_path)
    except OSError as exc:
        LOGGER.warning("Unable to remove results file %s: %s", results_path, exc)

    if not settings.save_snapshots:
        return
    if snapshot_dir.exists():
        for artifact in snapshot_dir.iterdir():
            try:
                if artifact.is_dir():
                    shutil.rmtree(artifact, ignore_errors=True)
                else:
                    artifact.unlink()
            except OSError as exc:
                LOGGER.warning("Unable to remove snapshot artifact %s: %s", artifact, exc)
    snapshot_dir.mkdir(parents=True, exist_ok=True)


class OutputManager:
    """Buffer band records and write them to the results file."""

    def __init__(self, settings: AppSettings, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.settings = settings
        self.records: List[BandRecord] = []
        self._flush_counter = 0
        self.results_path = settings.data_dir / settings.results_filename
        self.results_path.parent.mkdir(parents=True, exist_ok=True)
        reset_output_state(settings)
        self.metadata: Dict[str, Any] = metadata or {}

    def append_record(self, record: BandRecord) -> None:
        """Add record to the buffer and flush periodically."""

        self.records.append(record)
        self._flush_counter += 1
        if self._flush_counter >= self.settings.flush_every_n_images:
            self.flush()

    def flush(self, force: bool = False) -> None:
        """Write buffered records to the results file."""

        if not self.settings.save_results:
            return
        if not self.records and not force:
            return
        payload = {
            "schema_version": 1,
            "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "metadata": self.metadata,
            "records": [record.to_dict() for record in self.records],
        }
        with self.results_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        LOGGER.info("Flushed %d records to %s", len(self.records), self.results_path)
        self._flush_counter = 0

    def close(self) -> None:
        """Flush outstanding records on shutdown."""

        LOGGER.debug("Closing output manager, forcing flush")
        self.flush(force=True)

    def save_annotated_image(self, image: np.ndarray, name: str) -> Path:
        """Persist an annotated image as ``<name>.jpg`` and refresh ``latest.jpg``."""

        target_dir = self.settings.snapshot_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        safe_name = name.lower().replace(" ", "_") or "image"
        target = target_dir / f"{safe_name}.jpg"
        cv2.imwrite(str(target), image)
        self._write_latest_snapshot(target_dir, image)
        LOGGER.debug("Saved annotated image %s", target)
        return target

    def _write_latest_snapshot(self, directory: Path, image: np.ndarray) -> None:
        latest_path = directory / "latest.jpg"
        temp_path = directory / "latest.tmp.jpg"
        cv2.imwrite(str(temp_path), image)
        temp_path.replace(latest_path)
