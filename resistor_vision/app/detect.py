"""Entry point for reading resistor color bands from images."""
from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import cv2
import numpy as np

from .config.settings import AppSettings, load_settings
from .models import BandReading, Detection
from .services.decoder import InputShapeError
from .services.detector import YOLODetector
from .services.output_writer import BandRecord, OutputManager
from .services.pipeline import BandReader
from .utils.images import iter_image_paths, load_image, resize_square

LOGGER = logging.getLogger(__name__)

NO_COLORS_MESSAGE = "No colors detected."


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resistor color band reader")
    parser.add_argument("--source", type=str, required=True, help="Image file or directory of images")
    parser.add_argument("--model", type=str, default=None, help="Path to YOLO weights (.pt or .onnx)")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold")
    parser.add_argument("--labels", type=str, default=None, help="Dataset YAML with class names")
    parser.add_argument("--imgsz", type=int, default=None, help="Square model input size")
    parser.add_argument("--save-snapshots", action="store_true", help="Write annotated images")
    parser.add_argument("--no-save-results", action="store_true", help="Skip the JSON results file")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def setup_logging(settings: AppSettings, verbose: bool = False) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    if settings.log_format == "json":
        formatter = logging.Formatter('{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}')
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logging.basicConfig(level=log_level, handlers=[handler])


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    overrides = {}
    if args.model:
        overrides["model_path"] = Path(args.model)
    if args.conf is not None:
        overrides["confidence_threshold"] = args.conf
    if args.iou is not None:
        overrides["iou_threshold"] = args.iou
    if args.labels:
        overrides["labels_path"] = Path(args.labels)
    if args.imgsz:
        overrides["input_size"] = args.imgsz
    if args.save_snapshots:
        overrides["save_snapshots"] = True
    if args.no_save_results:
        overrides["save_results"] = False
    if args.log_format:
        overrides["log_format"] = args.log_format

    return load_settings(**overrides)


def format_bands(bands: Iterable[str]) -> str:
    bands = list(bands)
    if not bands:
        return NO_COLORS_MESSAGE
    return "Detected Colors: " + ", ".join(bands)


def annotate_image(image: np.ndarray, detections: Iterable[Detection], settings: AppSettings) -> np.ndarray:
    """Draw kept boxes on the resized image the detector saw."""

    output = resize_square(image, settings.input_size).copy()
    color = tuple(int(value) for value in settings.overlay_color_bgr)
    for position, detection in enumerate(detections, start=1):
        x1, y1, x2, y2 = map(int, detection.bbox)
        cv2.rectangle(output, (x1, y1), (x2, y2), color, 2)
        label = f"{position}:{detection.class_name} {detection.confidence:.2f}"
        cv2.putText(
            output,
            label,
            (x1, max(0, y1 - 5)),
            cv2.FONT_HERSHEY_SIMPLEX,
            settings.overlay_font_scale,
            color,
            2,
            lineType=cv2.LINE_AA,
        )
    return output


def build_record(image_path: Path, reading: BandReading, latency_ms: float) -> BandRecord:
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return BandRecord(
        image=str(image_path),
        timestamp=timestamp,
        bands=reading.bands,
        latency_ms=latency_ms,
        detections=reading.detections,
    )


def process_image(
    image_path: Path,
    settings: AppSettings,
    detector: YOLODetector,
    reader: BandReader,
    output_manager: Optional[OutputManager] = None,
) -> BandReading:
    start = time.perf_counter()
    image = load_image(image_path)
    rows = detector.raw_rows(image)
    reading = reader.run(rows)
    latency_ms = (time.perf_counter() - start) * 1000
    LOGGER.info(
        "Image %s | bands=%s | kept=%d | latency_ms=%.2f",
        image_path.name,
        reading.bands,
        len(reading.detections),
        latency_ms,
    )

    if output_manager is not None:
        output_manager.append_record(build_record(image_path, reading, latency_ms))
        if settings.save_snapshots:
            annotated = annotate_image(image, reading.detections, settings)
            output_manager.save_annotated_image(annotated, image_path.stem)
    return reading


def run_detection(args: argparse.Namespace) -> int:
    settings = resolve_settings(args)
    setup_logging(settings, verbose=args.verbose)

    try:
        image_paths = list(iter_image_paths(args.source))
    except RuntimeError as exc:
        LOGGER.error("Cannot read image source: %s", exc)
        return 1

    LOGGER.info("Starting band reader with %d labels over %d images", len(settings.labels), len(image_paths))
    detector = YOLODetector(settings.model_path, settings.input_size)
    reader = BandReader.from_settings(settings)
    output_manager: Optional[OutputManager] = None
    if settings.save_results or settings.save_snapshots:
        output_manager = OutputManager(
            settings,
            metadata={
                "model_path": str(settings.model_path),
                "confidence_threshold": settings.confidence_threshold,
                "iou_threshold": settings.iou_threshold,
                "labels": list(settings.labels),
            },
        )

    failures: List[Path] = []
    try:
        for image_path in image_paths:
            try:
                reading = process_image(image_path, settings, detector, reader, output_manager)
            except (InputShapeError, RuntimeError) as exc:
                LOGGER.error("Failed to read bands from %s: %s", image_path, exc)
                failures.append(image_path)
                continue
            print(f"{image_path.name}: {format_bands(reading.bands)}")
    finally:
        if output_manager is not None:
            output_manager.close()

    LOGGER.info("Band reader completed with %d failures", len(failures))
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    sys.exit(run_detection(args))


if __name__ == "__main__":  # pragma: no cover
    main()
