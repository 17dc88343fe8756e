#!/usr/bin/env python3
"""
Watermelon Ripeness Scoring Tool

Estimates watermelon ripeness from a single photo using five pixel
heuristics (field spot, stem, skin dullness, shape, webbing) combined into a
weighted overall score with a confidence estimate and recommendations.

Usage:
    python score_watermelon.py --input melon.jpg --output result.json [--debug debug.png]
"""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Dict, Any

import cv2
import numpy as np

from melon.models import AnalysisError, AnalysisResult, Contour, FeatureResult
from melon.image_buffer import SUPPORTED_EXTENSIONS, load_image, to_rgba_buffer
from melon.contour import find_watermelon_contour
from melon.field_spot import analyze_field_spot_color
from melon.stem_color import analyze_stem_color
from melon.skin_dullness import analyze_skin_dullness
from melon.shape_ratio import analyze_shape_ratio
from melon.webbing import analyze_webbing_density
from melon.aggregation import (
    compute_feature_weights,
    compute_overall_score,
    compute_confidence,
    generate_recommendations,
    grade_score,
)
from melon.image_quality import compute_image_metrics
from melon.visualization import create_debug_visualization

# Feature name -> heuristic, in report order
FEATURE_HEURISTICS = {
    "field_spot_color": analyze_field_spot_color,
    "stem_color": analyze_stem_color,
    "skin_dullness": analyze_skin_dullness,
    "shape_ratio": analyze_shape_ratio,
    "webbing_density": analyze_webbing_density,
}


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Score watermelon ripeness from a photo.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python score_watermelon.py --input melon.jpg --output result.json
    python score_watermelon.py --input melon.jpg --output result.json --debug overlay.png
    python score_watermelon.py --input melon.jpg --output result.json --sequential --verbose
        """,
    )

    # Required arguments
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to input image (JPG/PNG)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Path to output JSON file",
    )

    # Optional arguments
    parser.add_argument(
        "--debug",
        type=str,
        default=None,
        help="Path to save debug visualization (PNG)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run the feature heuristics one after another instead of concurrently",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-heuristic diagnostics",
    )

    return parser.parse_args(argv)


def validate_input(input_path: str) -> Optional[str]:
    """
    Validate input file exists and is a supported image format.

    Args:
        input_path: Path to input image

    Returns:
        Error message if validation fails, None if valid
    """
    path = Path(input_path)

    if not path.exists():
        return f"Input file not found: {input_path}"

    if not path.is_file():
        return f"Input path is not a file: {input_path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        return f"Unsupported image format: {suffix}. Use JPG or PNG."

    return None


def validate_debug_path(debug_path: str) -> Optional[str]:
    """Return an error message if the debug image cannot be written as PNG or JPG."""
    suffix = Path(debug_path).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        return f"Unsupported debug image format: {suffix or '(none)'}. Use PNG or JPG."
    return None


def create_output(
    result: Optional[AnalysisResult] = None,
    fail_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create output dictionary.

    Args:
        result: Analysis result, None if analysis failed
        fail_reason: Reason for failure if applicable

    Returns:
        JSON-ready dictionary; on failure only fail_reason is set
    """
    if result is None:
        output = {
            "overall_score": None,
            "confidence": None,
            "recommendations": [],
        }
    else:
        output = result.to_dict()

    output["fail_reason"] = fail_reason
    return output


def save_output(output: Dict[str, Any], output_path: str) -> None:
    """Save output dictionary to JSON file."""
    # Ensure output directory exists
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(output, f, indent=2)


def run_feature_heuristics(
    image: np.ndarray,
    contour: Contour,
    parallel: bool = True,
) -> Dict[str, FeatureResult]:
    """
    Run all five heuristics on the same image and contour.

    The heuristics share no mutable state. In parallel mode they run on a
    thread pool and this call returns once all of them have finished.

    Returns:
        Feature name -> FeatureResult, in FEATURE_HEURISTICS order
    """
    if not parallel:
        return {name: heuristic(image, contour) for name, heuristic in FEATURE_HEURISTICS.items()}

    with ThreadPoolExecutor(max_workers=len(FEATURE_HEURISTICS)) as executor:
        futures = {
            name: executor.submit(heuristic, image, contour)
            for name, heuristic in FEATURE_HEURISTICS.items()
        }
        return {name: future.result() for name, future in futures.items()}


def analyze_watermelon(
    image: np.ndarray,
    parallel: bool = True,
    debug_path: Optional[str] = None,
) -> AnalysisResult:
    """
    Main scoring pipeline.

    Args:
        image: RGBA, RGB or grayscale pixel array
        parallel: Run the heuristics concurrently
        debug_path: Path to save debug visualization

    Returns:
        AnalysisResult

    Raises:
        AnalysisError: if the image is malformed or the pipeline fails
    """
    buffer = to_rgba_buffer(image)
    height, width = buffer.shape[:2]

    try:
        # Phase 1: Locate the fruit
        contour = find_watermelon_contour(buffer)
        box = contour.bounding_box
        print(f"Contour: box=({box.x}, {box.y}, {box.width}x{box.height}), "
              f"center=({contour.center.x:.0f}, {contour.center.y:.0f}), area={contour.area}")
        if contour.area == 0:
            print(f"Warning: no foreground found, using full {width}x{height} frame")

        # Phase 2: Feature heuristics
        results = run_feature_heuristics(buffer, contour, parallel=parallel)
        for name, feature in results.items():
            print(f"  {name}: {feature.score} - {feature.description}")

        # Phase 3: Aggregation
        weights = compute_feature_weights(results["stem_color"])
        overall_score = compute_overall_score(results, weights)
        confidence = compute_confidence([feature.score for feature in results.values()])
        recommendations = generate_recommendations(results, overall_score)
        grade, grade_description = grade_score(overall_score)
        image_metrics = compute_image_metrics(buffer)

    except AnalysisError:
        raise
    except Exception as e:
        raise AnalysisError(f"Analysis failed: {e}") from e

    print(f"Overall score: {overall_score} ({grade}), confidence={confidence:.3f}")

    result = AnalysisResult(
        overall_score=overall_score,
        confidence=confidence,
        field_spot_color=results["field_spot_color"],
        stem_color=results["stem_color"],
        skin_dullness=results["skin_dullness"],
        shape_ratio=results["shape_ratio"],
        webbing_density=results["webbing_density"],
        recommendations=tuple(recommendations),
        grade=grade,
        grade_description=grade_description,
        weights=weights,
        timestamp=time.time(),
        image_metrics=image_metrics,
    )

    # Phase 4: Debug visualization
    if debug_path is not None:
        debug_image = create_debug_visualization(buffer, contour, result)
        Path(debug_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            written = cv2.imwrite(str(debug_path), debug_image)
        except cv2.error as e:
            raise AnalysisError(f"Failed to save debug visualization: {debug_path}") from e
        if not written:
            raise AnalysisError(f"Failed to save debug visualization: {debug_path}")
        print(f"Debug visualization saved to: {debug_path}")

    return result


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Validate input
    error = validate_input(args.input)
    if not error and args.debug is not None:
        error = validate_debug_path(args.debug)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    # Load image
    try:
        image = load_image(args.input)
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loaded image: {args.input} ({image.shape[1]}x{image.shape[0]})")

    # Run scoring pipeline
    try:
        result = analyze_watermelon(
            image=image,
            parallel=not args.sequential,
            debug_path=args.debug,
        )
        output = create_output(result)
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        output = create_output(fail_reason=str(e))

    # Save output
    save_output(output, args.output)
    print(f"Results saved to: {args.output}")

    # Report result
    if output["fail_reason"]:
        print(f"Analysis failed: {output['fail_reason']}")
        return 1

    print(f"Overall score: {output['overall_score']} ({output['grade']})")
    for recommendation in output["recommendations"]:
        print(f"  - {recommendation}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
