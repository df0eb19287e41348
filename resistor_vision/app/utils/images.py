"""Image loading utilities for band reading."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Union

import cv2
import numpy as np

LOGGER = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Read an image from disk as a BGR array."""

    image = cv2.imread(str(path))
    if image is None:
        raise RuntimeError(f"Unable to read image: {path}")
    LOGGER.debug("Loaded image %s with shape %s", path, image.shape)
    return image


def resize_square(image: np.ndarray, size: int) -> np.ndarray:
    """Stretch an image to ``size x size``; aspect ratio is not preserved."""

    if image.shape[0] == size and image.shape[1] == size:
        return image
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)


def iter_image_paths(source: Union[str, Path]) -> Iterator[Path]:
    """Yield the source itself, or the images in a directory sorted by name."""

    path = Path(source).expanduser()
    if path.is_dir():
        for candidate in sorted(path.iterdir()):
            if candidate.is_file() and candidate.suffix.lower() in IMAGE_SUFFIXES:
                yield candidate
        return
    if not path.exists():
        raise RuntimeError(f"Image source not found: {path}")
    yield path
