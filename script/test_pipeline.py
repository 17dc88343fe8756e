#!/usr/bin/env python3
"""
End-to-end tests for the scoring pipeline and command line tool.
"""

import json
import os
import sys

import cv2
import numpy as np
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from melon.models import AnalysisError, AnalysisResult
from melon.image_buffer import load_image, to_rgba_buffer
from melon.image_quality import compute_image_metrics
from score_watermelon import analyze_watermelon, create_output, main, validate_debug_path, validate_input


def ripe_melon():
    """Green melon with a yellow field spot, brown stem top and webbing stripes."""
    image = np.full((240, 240, 3), 255, dtype=np.uint8)
    image[30:210, 30:210] = (70, 110, 50)
    for y in range(60, 200, 18):
        image[y:y + 3, 40:200] = (120, 80, 40)
    image[150:210, 30:210] = (230, 200, 60)
    image[30:60, 30:210] = (130, 100, 70)
    return image


def test_all_white_image():
    """No foreground: full-frame fallback, every heuristic still returns a result."""
    image = np.full((100, 100, 3), 255, dtype=np.uint8)
    result = analyze_watermelon(image)

    assert isinstance(result, AnalysisResult)
    assert result.shape_ratio.score == 100
    assert result.shape_ratio.details["shape_type"] == "round"
    assert result.stem_color.score == 65
    assert result.stem_color.details["stem_visible"] is False
    assert result.weights["stem_color"] == 0
    assert result.field_spot_color.score == 0
    assert result.webbing_density.score == 0
    assert 0 <= result.overall_score <= 100
    assert 0.5 <= result.confidence <= 1.0
    assert result.recommendations[-1]


def test_ripe_melon_scores_well():
    result = analyze_watermelon(ripe_melon())

    assert result.field_spot_color.score > 60
    assert result.stem_color.details["stem_visible"] is True
    assert result.webbing_density.score > 0
    assert result.grade in ("A+", "A", "B", "C", "D")


def test_sequential_matches_parallel():
    image = ripe_melon()
    parallel = analyze_watermelon(image, parallel=True)
    sequential = analyze_watermelon(image, parallel=False)

    assert parallel.overall_score == sequential.overall_score
    for name, feature in parallel.features().items():
        assert feature.score == sequential.features()[name].score


def test_accepts_rgba_and_grayscale():
    rgba = np.full((60, 60, 4), 255, dtype=np.uint8)
    rgba[10:50, 10:50] = (60, 140, 60, 255)
    gray = np.full((60, 60), 120, dtype=np.uint8)

    assert 0 <= analyze_watermelon(rgba).overall_score <= 100
    assert 0 <= analyze_watermelon(gray).overall_score <= 100


@pytest.mark.parametrize("bad_input", [
    "not an image",
    np.zeros((0, 0, 3), dtype=np.uint8),
    np.zeros((10, 10, 2), dtype=np.uint8),
    np.zeros((2, 2, 2, 2), dtype=np.uint8),
    np.full((10, 10, 3), np.nan),
])
def test_malformed_input_raises(bad_input):
    with pytest.raises(AnalysisError):
        analyze_watermelon(bad_input)


def test_buffer_is_read_only():
    buffer = to_rgba_buffer(np.zeros((4, 4, 3), dtype=np.uint8))

    assert buffer.shape == (4, 4, 4)
    assert buffer.dtype == np.uint8
    assert (buffer[:, :, 3] == 255).all()
    with pytest.raises(ValueError):
        buffer[0, 0, 0] = 1


def test_image_metrics():
    metrics = compute_image_metrics(to_rgba_buffer(np.full((10, 10, 3), 128, dtype=np.uint8)))

    assert metrics["brightness"] == pytest.approx(128, abs=1)
    assert metrics["contrast"] == 0
    assert metrics["is_underexposed"] is False
    assert metrics["is_overexposed"] is False
    assert metrics["has_good_contrast"] is False


def test_result_is_json_serializable():
    output = create_output(analyze_watermelon(ripe_melon()))
    decoded = json.loads(json.dumps(output))

    assert decoded["fail_reason"] is None
    assert set(decoded["weights"]) == {
        "field_spot_color", "stem_color", "skin_dullness", "shape_ratio", "webbing_density",
    }
    assert isinstance(decoded["field_spot_color"]["details"]["search_region"], dict)


def test_failure_output():
    output = create_output(fail_reason="Image is empty (0x0)")

    assert output["overall_score"] is None
    assert output["recommendations"] == []
    assert output["fail_reason"] == "Image is empty (0x0)"


def test_validate_input(tmp_path):
    gif = tmp_path / "melon.gif"
    gif.write_bytes(b"GIF89a")

    assert validate_input(str(tmp_path / "missing.png")).startswith("Input file not found")
    assert validate_input(str(tmp_path)).startswith("Input path is not a file")
    assert validate_input(str(gif)).startswith("Unsupported image format")


def test_load_image_converts_to_rgb(tmp_path):
    path = tmp_path / "red.png"
    bgr = np.zeros((8, 8, 3), dtype=np.uint8)
    bgr[:, :] = (0, 0, 255)
    cv2.imwrite(str(path), bgr)

    image = load_image(path)
    assert tuple(image[0, 0]) == (255, 0, 0, 255)


def test_load_image_rejects_garbage(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not a png")

    with pytest.raises(AnalysisError):
        load_image(path)


def test_cli_end_to_end(tmp_path):
    input_path = tmp_path / "melon.png"
    output_path = tmp_path / "out" / "result.json"
    debug_path = tmp_path / "out" / "debug.png"
    cv2.imwrite(str(input_path), cv2.cvtColor(ripe_melon(), cv2.COLOR_RGB2BGR))

    exit_code = main([
        "--input", str(input_path),
        "--output", str(output_path),
        "--debug", str(debug_path),
        "--sequential",
    ])

    assert exit_code == 0
    output = json.loads(output_path.read_text())
    assert 0 <= output["overall_score"] <= 100
    assert output["fail_reason"] is None
    assert output["recommendations"]
    assert debug_path.exists()
    assert cv2.imread(str(debug_path)).shape[:2] == (240, 240)


def test_cli_rejects_unwritable_debug_format(tmp_path, capsys):
    input_path = tmp_path / "melon.png"
    output_path = tmp_path / "result.json"
    cv2.imwrite(str(input_path), cv2.cvtColor(ripe_melon(), cv2.COLOR_RGB2BGR))

    exit_code = main([
        "--input", str(input_path),
        "--output", str(output_path),
        "--debug", str(tmp_path / "overlay.xyz"),
    ])

    assert exit_code == 1
    assert "Unsupported debug image format: .xyz" in capsys.readouterr().err
    assert not output_path.exists()
    assert validate_debug_path(str(tmp_path / "overlay.PNG")) is None


def test_debug_write_failure_raises_analysis_error(tmp_path):
    """A debug path that cannot be written is reported as an AnalysisError."""
    blocked = tmp_path / "overlay.png"
    blocked.mkdir()

    with pytest.raises(AnalysisError, match="Failed to save debug visualization"):
        analyze_watermelon(ripe_melon(), debug_path=str(blocked))


def test_cli_missing_input(tmp_path):
    exit_code = main([
        "--input", str(tmp_path / "missing.jpg"),
        "--output", str(tmp_path / "result.json"),
    ])

    assert exit_code == 1
    assert not (tmp_path / "result.json").exists()
