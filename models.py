# models.py
import math
from enum import Enum
from typing import List, Dict, Any
from dataclasses import dataclass, field

# Largest value the database INTEGER columns accept.
MAX_INTEGER_FIELD = 2**31 - 1


class SizeClass(str, Enum):
    """Coarse product size bucket derived from the pixel area of its photo."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass
class ImageMetadata:
    """
    ImageMetadata is the input to the material analysis.

    Fields:
      width        : Image width in pixels.
      height       : Image height in pixels.
      file_size_kb : Size of the encoded image file in kilobytes.
      color_count  : Number of predominant colours in the image.

    It comes either from the JSON body of POST /analysis or from
    imaging.extract_metadata() when a photo is uploaded.
    """

    width: int = 0
    height: int = 0
    file_size_kb: float = 0.0
    color_count: int = 0

    @staticmethod
    def from_dict(raw_dict: Dict[str, Any]) -> "ImageMetadata":
        """
        Safely construct ImageMetadata from an arbitrary dict (e.g. request.json).

        Numbers sent as strings are accepted; anything that does not convert
        falls back to 0 and is reported later by validate().
        """

        def to_int_maybe(value: Any, default: int = 0) -> int:
            try:
                return int(float(value))
            except Exception:
                return default

        def to_float_maybe(value: Any, default: float = 0.0) -> float:
            try:
                return float(value)
            except Exception:
                return default

        return ImageMetadata(
            width=to_int_maybe(raw_dict.get("width", 0)),
            height=to_int_maybe(raw_dict.get("height", 0)),
            file_size_kb=to_float_maybe(raw_dict.get("file_size_kb", 0.0)),
            color_count=to_int_maybe(raw_dict.get("color_count", 0)),
        )

    def validate(self) -> List[str]:
        """
        Validate the metadata before it is scored.

        Rules:
        - width and height must be > 0 (the aspect ratio needs both).
        - file_size_kb and color_count must be >= 0.
        - width, height and color_count must be <= 2147483647 so they fit the
          history table; file_size_kb must be a finite number.

        Returns:
            A list of human-readable error strings. Empty list means "valid".
        """
        error_messages: List[str] = []

        for dimension_name in ["width", "height"]:
            if getattr(self, dimension_name) <= 0:
                error_messages.append(f"{dimension_name} must be > 0.")

        for numeric_field_name in ["file_size_kb", "color_count"]:
            if getattr(self, numeric_field_name) < 0:
                error_messages.append(f"{numeric_field_name} must be >= 0.")

        for integer_field_name in ["width", "height", "color_count"]:
            if getattr(self, integer_field_name) > MAX_INTEGER_FIELD:
                error_messages.append(f"{integer_field_name} must be <= {MAX_INTEGER_FIELD}.")

        if not math.isfinite(self.file_size_kb):
            error_messages.append("file_size_kb must be a finite number.")

        return error_messages

    @property
    def pixel_area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class SizeEstimate:
    """Size class plus the dimensions it was derived from ({medium, 0, 0} on fallback)."""

    size: SizeClass
    width: int = 0
    height: int = 0

    def dimensions(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Recommendation:
    category: str
    title: str
    description: str
    impact_points: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "impact_points": self.impact_points,
        }


@dataclass
class ScoreResult:
    """
    Output of scoring.analyze_material().

      material        : one of materials.MATERIAL_KEYS
      size            : SizeClass of the product
      impact_score    : 1.0-10.0 composite burden score (higher is worse)
      emissions_kg    : estimated kg CO2e, integer
      recommendations : core recommendations first, conditional ones appended
    """

    material: str
    size: SizeClass
    impact_score: float
    emissions_kg: int
    recommendations: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "material": self.material,
            "size": self.size.value,
            "impact_score": self.impact_score,
            "emissions_kg": self.emissions_kg,
            "recommendations": [rec.to_dict() for rec in self.recommendations],
        }
