# scoring.py
import logging
import random
from typing import Callable, Dict, List, Optional, Tuple

from materials import MATERIAL_KEYS, get_profile
from models import ImageMetadata, ScoreResult, SizeClass, SizeEstimate
from rounding import clamp, round_half_up
from suggestions import generate_recommendations

logger = logging.getLogger(__name__)

# Shared random source for the classification fallback. Callers that need
# reproducible output pass their own random.Random instead.
_fallback_rng = random.Random()

# Each factor is a list of (predicate, per-material bonus, bonus for everyone else).
# The first predicate that matches the metric decides the bin; the last one always matches.
Bin = Tuple[Callable[[Optional[float]], bool], Dict[str, float], float]

ASPECT_RATIO_BINS: List[Bin] = [
    # wide
    (lambda ratio: ratio is not None and ratio > 1.5, {"polymer": 3, "metal": 2}, 1),
    # tall
    (lambda ratio: ratio is not None and ratio < 0.7, {"textile": 3, "biologic": 2}, 1),
    # square-ish, or undefined when height is 0
    (lambda ratio: True, {"composite": 3, "ceramic": 2}, 1),
]

FILE_SIZE_BINS: List[Bin] = [
    (lambda size_kb: size_kb > 2000, {"metal": 2, "mineral": 1.5}, 0.5),
    (lambda size_kb: size_kb < 500, {"polymer": 2, "synthetic": 1.5}, 0.5),
    (lambda size_kb: True, {"cellulose": 2, "biologic": 1.5}, 0.5),
]

COLOR_COUNT_BINS: List[Bin] = [
    (lambda colors: colors > 5, {"textile": 3, "composite": 2}, 0.5),
    (lambda colors: colors < 3, {"metal": 3, "mineral": 2}, 0.5),
    (lambda colors: True, {"polymer": 3, "ceramic": 2}, 0.5),
]

LARGE_AREA_THRESHOLD = 2_000_000
MEDIUM_AREA_THRESHOLD = 500_000

IMPACT_SIZE_MULTIPLIERS = {
    SizeClass.LARGE: 1.4,
    SizeClass.MEDIUM: 1.0,
    SizeClass.SMALL: 0.7,
}

EMISSIONS_SIZE_MULTIPLIERS = {
    SizeClass.LARGE: 2.7,
    SizeClass.MEDIUM: 1.4,
    SizeClass.SMALL: 1.0,
}


def _bin_bonus(bins: List[Bin], metric: Optional[float], material: str) -> float:
    for predicate_fn, bonuses, default_bonus in bins:
        if predicate_fn(metric):
            return bonuses.get(material, default_bonus)
    return 0.0


def score_materials(metadata: ImageMetadata) -> List[Tuple[str, float]]:
    """
    Score every material against the image metadata.

    Three independent factors each add a bonus per material:
      1. aspect ratio (width / height): wide, tall or square
      2. file size in KB: large, small or mid
      3. colour count: many, few or mid

    Returns:
        [(material, score), ...] ranked by descending score. Ties keep the
        fixed MATERIAL_KEYS order, so the result is deterministic.
    """
    aspect_ratio = metadata.width / metadata.height if metadata.height > 0 else None

    material_scores = []
    for material in MATERIAL_KEYS:
        score = (
            _bin_bonus(ASPECT_RATIO_BINS, aspect_ratio, material)
            + _bin_bonus(FILE_SIZE_BINS, metadata.file_size_kb, material)
            + _bin_bonus(COLOR_COUNT_BINS, metadata.color_count, material)
        )
        material_scores.append((material, score))

    # sorted() is stable, equal scores stay in table order
    return sorted(material_scores, key=lambda pair: pair[1], reverse=True)


def classify_material(
    metadata: Optional[ImageMetadata],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pick the most likely material for an image.

    When the metadata could not be obtained (metadata is None) the request
    must still succeed, so a uniformly random material is returned instead.
    Pass `rng` to make that fallback reproducible.
    """
    if metadata is None:
        chosen = (rng or _fallback_rng).choice(MATERIAL_KEYS)
        logger.warning("Image metadata unavailable, falling back to random material %r", chosen)
        return chosen

    return score_materials(metadata)[0][0]


def estimate_size(width: int, height: int) -> SizeClass:
    """
    Map the pixel area of a photo to a size class.

      area >  2,000,000 -> large
      area >    500,000 -> medium
      otherwise         -> small

    Missing (non-positive) dimensions give medium, the same as estimate_dimensions().
    """
    if width <= 0 or height <= 0:
        return SizeClass.MEDIUM

    pixel_area = width * height
    if pixel_area > LARGE_AREA_THRESHOLD:
        return SizeClass.LARGE
    if pixel_area > MEDIUM_AREA_THRESHOLD:
        return SizeClass.MEDIUM
    return SizeClass.SMALL


def estimate_dimensions(metadata: Optional[ImageMetadata]) -> SizeEstimate:
    """Size class with the dimensions it came from; {medium, 0, 0} when they are missing."""
    if metadata is None or metadata.width <= 0 or metadata.height <= 0:
        logger.debug("Image dimensions unavailable, assuming a medium-sized product")
        return SizeEstimate(size=SizeClass.MEDIUM, width=0, height=0)

    return SizeEstimate(
        size=estimate_size(metadata.width, metadata.height),
        width=metadata.width,
        height=metadata.height,
    )


def compute_impact_score(material: str, size: SizeClass) -> float:
    """
    Composite environmental burden score on a 1.0-10.0 scale (higher is worse).

    base  = impact*0.4 + carbon_release*0.3
            + (10 - recycle_rating)*0.2 + (10 - sustainability_index)*0.1
    score = clamp(round(base * size_multiplier, 1), 1.0, 10.0)
    """
    profile = get_profile(material)

    impact_base = (
        profile.impact * 0.4
        + profile.carbon_release * 0.3
        + (10 - profile.recycle_rating) * 0.2
        + (10 - profile.sustainability_index) * 0.1
    )

    raw_score = impact_base * IMPACT_SIZE_MULTIPLIERS[SizeClass(size)]
    return clamp(round_half_up(raw_score, 1), 1.0, 10.0)


def compute_emissions(material: str, size: SizeClass) -> int:
    """
    Estimated emissions in kg CO2e, rounded to the nearest integer.

    Starts from carbon_release * 12, scales by product size, then adds a
    production complexity factor of (10 - sustainability_index) / 20.
    """
    profile = get_profile(material)

    base_emissions = profile.carbon_release * 12
    base_emissions *= EMISSIONS_SIZE_MULTIPLIERS[SizeClass(size)]
    base_emissions *= 1 + (10 - profile.sustainability_index) / 20

    return int(round_half_up(base_emissions))


def analyze_material(
    metadata: Optional[ImageMetadata],
    rng: Optional[random.Random] = None,
) -> ScoreResult:
    """
    Run the whole analysis for one product image.

    Missing metadata never raises: the material falls back to a random key
    and the size to medium.
    """
    material = classify_material(metadata, rng=rng)
    size = estimate_dimensions(metadata).size

    return ScoreResult(
        material=material,
        size=size,
        impact_score=compute_impact_score(material, size),
        emissions_kg=compute_emissions(material, size),
        recommendations=generate_recommendations(material, size),
    )
