from __future__ import annotations

import json
from pathlib import Path

import cv2
import numpy as np
import pytest

from resistor_vision.app import detect
from resistor_vision.app.config.settings import AppSettings


class DummyDetector:
    ROWS = np.array(
        [
            [300, 10, 330, 60, 0.8, 7],
            [50, 10, 80, 60, 0.7, 2],
            [52, 10, 82, 60, 0.6, 2],
            [150, 10, 180, 60, 0.9, 6],
            [400, 10, 430, 60, 0.1, 0],
        ],
        dtype=np.float32,
    )

    def __init__(self, model_path, input_size) -> None:
        self.params = (model_path, input_size)

    def raw_rows(self, image):
        return self.ROWS


@pytest.fixture()
def patched(tmp_path: Path, monkeypatch) -> Path:
    def fake_load_settings(**overrides: object) -> AppSettings:
        base_kwargs = {
            "model_path": tmp_path / "best.onnx",
            "data_dir": tmp_path / "data",
            "snapshot_dir": tmp_path / "snapshots",
        }
        base_kwargs.update(overrides)
        return AppSettings(**base_kwargs)

    monkeypatch.setattr(detect, "load_settings", fake_load_settings)
    monkeypatch.setattr(detect, "YOLODetector", DummyDetector)
    return tmp_path


def write_image(path: Path) -> Path:
    cv2.imwrite(str(path), np.full((120, 480, 3), 200, dtype=np.uint8))
    return path


def test_format_bands() -> None:
    assert detect.format_bands(["brown", "black"]) == "Detected Colors: brown, black"
    assert detect.format_bands([]) == detect.NO_COLORS_MESSAGE


def test_main_reads_directory(patched: Path, capsys) -> None:
    images = patched / "images"
    images.mkdir()
    write_image(images / "a.jpg")
    write_image(images / "b.png")
    (images / "notes.txt").write_text("ignored")

    with pytest.raises(SystemExit) as excinfo:
        detect.main(["--source", str(images), "--save-snapshots"])
    assert excinfo.value.code == 0

    output = capsys.readouterr().out
    assert "a.jpg: Detected Colors: brown, orange, red" in output
    assert "b.png: Detected Colors: brown, orange, red" in output

    payload = json.loads((patched / "data" / "results.json").read_text())
    assert [record["bands"] for record in payload["records"]] == [["brown", "orange", "red"]] * 2
    assert payload["metadata"]["iou_threshold"] == 0.45
    assert (patched / "snapshots" / "a.jpg").exists()
    assert (patched / "snapshots" / "latest.jpg").exists()


def test_main_reports_unreadable_image(patched: Path, capsys) -> None:
    images = patched / "images"
    images.mkdir()
    write_image(images / "good.jpg")
    (images / "broken.jpg").write_text("not an image")

    with pytest.raises(SystemExit) as excinfo:
        detect.main(["--source", str(images), "--no-save-results"])
    assert excinfo.value.code == 1

    output = capsys.readouterr().out
    assert "good.jpg: Detected Colors: brown, orange, red" in output
    assert not (patched / "data" / "results.json").exists()


def test_conf_override_changes_reading(patched: Path, capsys) -> None:
    image = write_image(patched / "single.jpg")

    with pytest.raises(SystemExit):
        detect.main(["--source", str(image), "--conf", "0.85", "--no-save-results"])

    assert "single.jpg: Detected Colors: orange" in capsys.readouterr().out


def test_annotate_image_resizes_to_model_input(patched: Path) -> None:
    settings = detect.load_settings()
    image = np.zeros((120, 480, 3), dtype=np.uint8)
    annotated = detect.annotate_image(image, [], settings)
    assert annotated.shape == (640, 640, 3)


def test_main_missing_source_exits_non_zero(patched: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        detect.main(["--source", str(patched / "missing.jpg")])
    assert excinfo.value.code == 1
    assert not (patched / "data" / "results.json").exists()
