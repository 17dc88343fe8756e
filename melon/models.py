"""
Data models for the watermelon scoring pipeline.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple


class AnalysisError(ValueError):
    """Raised when an image cannot be analyzed at all (malformed or unreadable input)."""


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle in pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Contour:
    """Coarse outline of the fruit: bounding box, centroid and sampled pixel count."""
    bounding_box: Region
    center: Point
    area: int  # non-background samples, 0 when nothing was found


@dataclass(frozen=True)
class ColorSample:
    """One quantized color bucket from a dominant-color search."""
    rgb: Tuple[int, int, int]
    hex: str
    percentage: float  # share of sampled pixels, 0-100


@dataclass(frozen=True)
class FeatureResult:
    """Output of a single heuristic."""
    score: int  # 0-100
    description: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "description": self.description,
            "details": _jsonable(self.details),
        }


@dataclass
class WebbingPixel:
    x: int
    y: int
    brownness: float
    contrast: float


@dataclass
class WebbingCluster:
    """Group of nearby brown samples; built and discarded inside one webbing evaluation."""
    center: Point
    pixels: List[WebbingPixel]
    total_brownness: float
    total_contrast: float


@dataclass(frozen=True)
class AnalysisResult:
    """Complete scoring report for one photo."""
    overall_score: int
    confidence: float
    field_spot_color: FeatureResult
    stem_color: FeatureResult
    skin_dullness: FeatureResult
    shape_ratio: FeatureResult
    webbing_density: FeatureResult
    recommendations: Tuple[str, ...]
    grade: str
    grade_description: str
    weights: Dict[str, float]
    timestamp: float
    image_metrics: Optional[Dict[str, Any]] = None

    def features(self) -> Dict[str, FeatureResult]:
        return {
            "field_spot_color": self.field_spot_color,
            "stem_color": self.stem_color,
            "skin_dullness": self.skin_dullness,
            "shape_ratio": self.shape_ratio,
            "webbing_density": self.webbing_density,
        }

    def to_dict(self) -> Dict[str, Any]:
        output = {
            "overall_score": self.overall_score,
            "confidence": round(float(self.confidence), 3),
            "grade": self.grade,
            "grade_description": self.grade_description,
        }
        for name, result in self.features().items():
            output[name] = result.to_dict()
        output["weights"] = dict(self.weights)
        output["recommendations"] = list(self.recommendations)
        output["image_metrics"] = _jsonable(self.image_metrics)
        output["timestamp"] = self.timestamp
        return output


def _jsonable(value: Any) -> Any:
    """Convert dataclasses, tuples and numpy scalars nested in details into plain JSON types."""
    if hasattr(value, "__dataclass_fields__"):
        return _jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "item") and callable(value.item):
        # numpy scalar
        return value.item()
    return value
