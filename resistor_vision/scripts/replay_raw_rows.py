#!/usr/bin/env python3
"""Run the band reader over dumped raw detector rows without loading a model."""
from __future__ import annotations

import argparse
import json
from pathlib import Path

import numpy as np

from resistor_vision.app.config.settings import load_settings
from resistor_vision.app.services.pipeline import BandReader


def load_rows(path: Path) -> np.ndarray:
    if path.suffix == ".npy":
        rows = np.load(path)
    else:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a list of rows")
        rows = np.asarray(data, dtype=np.float32)
    # exported models emit a leading batch dimension
    if rows.ndim == 3 and rows.shape[0] == 1:
        rows = rows[0]
    return rows


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay raw detector rows through the band reader")
    parser.add_argument("rows", type=Path, nargs="+", help="One or more .npy or .json row dumps")
    parser.add_argument("--labels", type=Path, default=None, help="Dataset YAML with class names")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    overrides = {}
    if args.labels:
        overrides["labels_path"] = args.labels
    if args.conf is not None:
        overrides["confidence_threshold"] = args.conf
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    reader = BandReader.from_settings(load_settings(**overrides))
    for path in args.rows:
        reading = reader.run(load_rows(path))
        print(f"{path.name}: {', '.join(reading.bands) or '-'} ({len(reading.detections)} boxes kept)")


if __name__ == "__main__":
    main()
