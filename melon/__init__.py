"""
Pixel heuristics for watermelon ripeness scoring.
"""

from .models import (
    AnalysisError,
    AnalysisResult,
    ColorSample,
    Contour,
    FeatureResult,
    Point,
    Region,
)
from .image_buffer import to_rgba_buffer, load_image
from .contour import find_watermelon_contour
from .color_sampling import get_dominant_colors, extract_color_histogram
from .field_spot import analyze_field_spot_color
from .stem_color import analyze_stem_color
from .skin_dullness import analyze_skin_dullness
from .shape_ratio import analyze_shape_ratio
from .webbing import analyze_webbing_density
from .aggregation import (
    compute_feature_weights,
    compute_overall_score,
    compute_confidence,
    generate_recommendations,
    grade_score,
)
from .image_quality import compute_image_metrics

__all__ = [
    "AnalysisError",
    "AnalysisResult",
    "ColorSample",
    "Contour",
    "FeatureResult",
    "Point",
    "Region",
    "to_rgba_buffer",
    "load_image",
    "find_watermelon_contour",
    "get_dominant_colors",
    "extract_color_histogram",
    "analyze_field_spot_color",
    "analyze_stem_color",
    "analyze_skin_dullness",
    "analyze_shape_ratio",
    "analyze_webbing_density",
    "compute_feature_weights",
    "compute_overall_score",
    "compute_confidence",
    "generate_recommendations",
    "grade_score",
    "compute_image_metrics",
]
