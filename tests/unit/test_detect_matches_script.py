from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import cv2
import numpy as np
import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "detect_matches.py"


@pytest.fixture(scope="module")
def script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("detect_matches_script", SCRIPT_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def images(tmp_path: Path) -> tuple[Path, Path]:
    parent = np.random.default_rng(5).integers(0, 256, size=(60, 80)).astype(np.uint8)
    parent_path = tmp_path / "parent.png"
    template_path = tmp_path / "template.png"
    cv2.imwrite(str(parent_path), parent)
    cv2.imwrite(str(template_path), parent[22:34, 41:57])
    return parent_path, template_path


def test_best_match_run_prints_box_and_writes_annotation(
    script: ModuleType,
    images: tuple[Path, Path],
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    parent_path, template_path = images
    output = tmp_path / "viz" / "annotated.png"

    code = script.main([str(parent_path), "--template", str(template_path), "--best-match", "--output", str(output)])

    out = capsys.readouterr().out
    assert code == 0
    assert "Detections: 1" in out
    assert "    41     22     15     11 |  1.0000" in out
    assert output.exists()
    assert cv2.imread(str(output)).shape == (60, 80, 3)


def test_threshold_run_reports_single_exact_match(
    script: ModuleType,
    images: tuple[Path, Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    parent_path, template_path = images

    code = script.main([str(parent_path), "--template", str(template_path), "--match-threshold", "0.9"])

    assert code == 0
    assert "Detections: 1" in capsys.readouterr().out


def test_oversized_template_reports_error(
    script: ModuleType,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    small = tmp_path / "small.png"
    large = tmp_path / "large.png"
    cv2.imwrite(str(small), np.eye(8, dtype=np.uint8) * 255)
    cv2.imwrite(str(large), np.eye(16, dtype=np.uint8) * 255)

    code = script.main([str(small), "--template", str(large)])

    assert code == 2
    assert "larger than parent" in capsys.readouterr().err


def test_color_template_file_is_read_as_grayscale(
    script: ModuleType,
    images: tuple[Path, Path],
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    parent_path, template_path = images
    color_template = tmp_path / "template_bgr.png"
    cv2.imwrite(str(color_template), cv2.imread(str(template_path), cv2.IMREAD_COLOR))

    code = script.main([str(parent_path), "--template", str(color_template), "--best-match"])

    out = capsys.readouterr().out
    assert code == 0
    assert "    41     22     15     11 |  1.0000" in out
