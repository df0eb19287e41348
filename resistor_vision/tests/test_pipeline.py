from __future__ import annotations

import numpy as np

from resistor_vision.app.config.settings import DEFAULT_LABELS, AppSettings
from resistor_vision.app.services.deduplicator import collapse_repeats
from resistor_vision.app.services.pipeline import BandReader, read_bands
from resistor_vision.app.services.sequencer import sequence_labels

LABELS = list(DEFAULT_LABELS)
RED, BROWN, ORANGE, BLACK = (LABELS.index(name) for name in ("red", "brown", "orange", "black"))


def test_overlapping_same_class_boxes_collapse_to_best() -> None:
    rows = [
        [0, 0, 100, 100, 0.9, RED],
        [0, 0, 100, 90, 0.6, RED],
        [0, 0, 100, 95, 0.3, RED],
    ]
    reading = BandReader(LABELS, 0.25, 0.45).run(rows)
    assert reading.bands == ["red"]
    assert len(reading.detections) == 1
    assert reading.detections[0].confidence == 0.9


def test_bands_read_left_to_right() -> None:
    rows = [
        [300, 10, 330, 60, 0.8, RED],
        [50, 10, 80, 60, 0.7, BROWN],
        [150, 10, 180, 60, 0.9, ORANGE],
    ]
    assert read_bands(rows, LABELS) == ["brown", "orange", "red"]


def test_low_confidence_only_yields_empty() -> None:
    reading = BandReader(LABELS).run([[10, 10, 50, 50, 0.1, BROWN]])
    assert reading.bands == []
    assert reading.is_empty


def test_adjacent_duplicates_collapsed() -> None:
    rows = [
        [10, 0, 30, 50, 0.9, BROWN],
        [40, 0, 60, 50, 0.8, BROWN],
        [70, 0, 90, 50, 0.7, BLACK],
    ]
    assert read_bands(rows, LABELS) == ["brown", "black"]


def test_empty_tensor_is_not_an_error() -> None:
    assert read_bands([], LABELS) == []
    assert read_bands(np.zeros((0, 6), dtype=np.float32), LABELS) == []


def test_out_of_range_class_dropped_siblings_kept() -> None:
    rows = np.array(
        [
            [10, 0, 30, 50, 0.9, 42],
            [40, 0, 60, 50, 0.8, BROWN],
            [70, 0, 90, 50, 0.7, ORANGE],
        ],
        dtype=np.float32,
    )
    assert read_bands(rows, LABELS) == ["brown", "orange"]


def test_reader_uses_settings_thresholds() -> None:
    settings = AppSettings(confidence_threshold=0.5, iou_threshold=0.3)
    reader = BandReader.from_settings(settings)
    assert reader.labels == DEFAULT_LABELS
    rows = [
        [10, 0, 30, 50, 0.45, BROWN],
        [40, 0, 60, 50, 0.6, RED],
    ]
    assert reader.run(rows).bands == ["red"]


def test_reader_is_reusable_across_runs() -> None:
    reader = BandReader(LABELS)
    first = reader.run([[10, 0, 30, 50, 0.9, BROWN]])
    second = reader.run([[10, 0, 30, 50, 0.9, RED]])
    assert first.bands == ["brown"]
    assert second.bands == ["red"]


def test_reading_detections_match_bands() -> None:
    rows = [
        [300, 0, 330, 50, 0.8, RED],
        [10, 0, 30, 50, 0.9, BROWN],
        [150, 0, 180, 50, 0.7, BROWN],
        [200, 0, 230, 50, 0.6, BLACK],
    ]
    reading = BandReader(LABELS).run(rows)
    assert [d.left for d in reading.detections] == [10, 150, 200, 300]
    assert reading.bands == collapse_repeats(sequence_labels(reading.detections))
    assert reading.bands == ["brown", "black", "red"]
