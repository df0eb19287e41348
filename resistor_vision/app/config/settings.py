"""Configuration utilities for resistor band reading."""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Tuple

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LABELS: Tuple[str, ...] = (
    "black",
    "blue",
    "brown",
    "gold",
    "green",
    "grey",
    "orange",
    "red",
    "silver",
    "violet",
    "white",
    "yellow",
)


def load_labels(path: Path) -> Tuple[str, ...]:
    """Read class names from a YOLO dataset YAML (``names`` as a list or an index mapping)."""

    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    names = payload.get("names") if isinstance(payload, dict) else payload
    if isinstance(names, dict):
        ordered = sorted(names.items(), key=lambda item: int(item[0]))
        indices = [int(index) for index, _ in ordered]
        if indices != list(range(len(indices))):
            raise ValueError(f"Label indices in {path} must be contiguous from 0, got {indices}")
        return tuple(str(name) for _, name in ordered)
    if isinstance(names, list):
        return tuple(str(name) for name in names)
    raise ValueError(f"No 'names' list found in label file {path}")


class AppSettings(BaseSettings):
    """Application configuration sourced from environment variables or defaults."""

    model_config = SettingsConfigDict(env_prefix="RESISTOR_", case_sensitive=False, protected_namespaces=())

    model_path: Path = Field(default=Path("models/best.onnx"), description="Detector weights path")
    confidence_threshold: float = Field(default=0.25, ge=0.0, le=1.0)
    iou_threshold: float = Field(default=0.45, ge=0.0, le=1.0)
    input_size: int = Field(default=640, gt=0, description="Square model input side in pixels.")
    labels: Tuple[str, ...] = Field(default=DEFAULT_LABELS, description="Class names in model order.")
    labels_path: Optional[Path] = Field(
        default=None,
        description="YOLO dataset YAML whose 'names' replace the default label table.",
    )
    log_format: str = Field(default="text")
    data_dir: Path = Field(
        default=Path(__file__).resolve().parents[2] / "data",
        description="Directory for JSON output.",
    )
    snapshot_dir: Path = Field(
        default=Path(__file__).resolve().parents[2] / "output_frames",
        description="Directory for annotated snapshots.",
    )
    results_filename: str = Field(default="results.json")
    save_results: bool = Field(default=True)
    save_snapshots: bool = Field(default=False)
    flush_every_n_images: int = Field(default=10, ge=1)
    overlay_font_scale: float = Field(default=0.6, gt=0.0)
    overlay_color_bgr: List[int] = Field(default_factory=lambda: [0, 255, 255])

    @field_validator("model_path", "labels_path", "data_dir", "snapshot_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Any:
        if value is None:
            return None
        return Path(value).expanduser()

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in {"text", "json"}:
            raise ValueError(f"Unsupported log format: {value}")
        return value

    @model_validator(mode="after")
    def _resolve_labels(self) -> "AppSettings":
        if self.labels_path is not None:
            self.labels = load_labels(self.labels_path)
        if not self.labels:
            raise ValueError("Label table must not be empty")
        if len(set(self.labels)) != len(self.labels):
            raise ValueError(f"Label table contains duplicate names: {list(self.labels)}")
        return self


def load_settings(**overrides: object) -> AppSettings:
    """Return application settings, applying optional overrides."""

    return AppSettings(**overrides)
