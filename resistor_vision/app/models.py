"""Shared data models for resistor band reading."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

BBox = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Detection:
    """A single candidate box produced by the decoder.

    ``class_name`` is always ``labels[class_id]`` for the label table the decoder was given.
    """

    bbox: BBox
    confidence: float
    class_id: int
    class_name: str

    @property
    def left(self) -> float:
        return self.bbox[0]


@dataclass
class BandReading:
    """Outcome of one pipeline run over a raw output tensor."""

    bands: List[str] = field(default_factory=list)
    detections: List[Detection] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.bands
