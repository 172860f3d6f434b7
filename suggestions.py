# suggestions.py
import logging
import time
from typing import List

from config import LLM_PROVIDER, LLM_API_KEY, LLM_MODEL, LLM_MAX_RETRIES, LLM_RETRY_DELAY
from materials import MATERIAL_DATABASE, get_profile
from models import Recommendation, SizeClass
from rounding import round_half_up

logger = logging.getLogger(__name__)

# Materials with a sustainability_index above this are offered as substitutes.
ALTERNATIVE_MIN_SUSTAINABILITY = 7
MAX_ALTERNATIVES = 2


def sustainable_alternatives(limit: int = MAX_ALTERNATIVES) -> List[str]:
    """First `limit` materials (in table order) whose sustainability_index is above 7."""
    return [
        material
        for material, profile in MATERIAL_DATABASE.items()
        if profile.sustainability_index > ALTERNATIVE_MIN_SUSTAINABILITY
    ][:limit]


def generate_recommendations(material: str, size: SizeClass) -> List[Recommendation]:
    """
    Build the ordered recommendation list for a classified product.

    Always present (in this order):
      1. Disposal : community recycling if recycle_rating > 7,
                    otherwise specialized waste management.
      2. Usage    : self-maintenance if sustainability_index > 6,
                    otherwise professional refurbishment.

    Appended when they apply:
      3. Alternatives : recycle_rating < 5, names up to two sustainable substitutes.
      4. Community    : large products, share instead of buying.
         Purchasing   : small products, consolidate purchases.

    Returns:
        List[Recommendation] with 2 to 4 entries.
    """
    profile = get_profile(material)
    size = SizeClass(size)

    disposal_route = (
        "community recycling programs"
        if profile.recycle_rating > 7
        else "specialized waste management services"
    )
    maintenance_route = (
        "simple cleaning and maintenance"
        if profile.sustainability_index > 6
        else "professional refurbishment services"
    )

    recommendations = [
        Recommendation(
            category="Disposal",
            title=f"Eco-friendly {material} disposal",
            description=f"Properly dispose of {material}-based products through {disposal_route}.",
            impact_points=int(round_half_up(profile.recycle_rating * 8)),
        ),
        Recommendation(
            category="Usage",
            title="Extended lifecycle practices",
            description=(
                f"{size.value.capitalize()} {material} products can be maintained "
                f"through {maintenance_route}."
            ),
            impact_points=int(round_half_up((10 - profile.impact) * 6)),
        ),
    ]

    # --- Material-specific ---
    if profile.recycle_rating < 5:
        substitutes = " or ".join(sustainable_alternatives())
        recommendations.append(
            Recommendation(
                category="Alternatives",
                title="Consider sustainable substitutes",
                description=(
                    f"Replace {material} with {substitutes} alternatives for "
                    f"{int(round_half_up(profile.impact * 10))}% less environmental impact."
                ),
                impact_points=int(round_half_up(profile.impact * 11)),
            )
        )

    # --- Size-specific ---
    if size is SizeClass.LARGE:
        recommendations.append(
            Recommendation(
                category="Community",
                title="Shared resource utilization",
                description=(
                    f"Establish local {material} product sharing networks to maximize "
                    "utility and minimize redundant production."
                ),
                impact_points=int(round_half_up(profile.carbon_release * 9)),
            )
        )
    elif size is SizeClass.SMALL:
        recommendations.append(
            Recommendation(
                category="Purchasing",
                title="Consolidated acquisition strategy",
                description="Combine purchases to reduce packaging waste and transportation emissions.",
                impact_points=int(round_half_up(profile.carbon_release * 5)),
            )
        )

    return recommendations


def llm_supplement(llm_summary_text: str) -> List[str]:
    """
    Generate AI-driven (LLM) insight lines about an analyzed product, up to 3.

    Behavior:
    - Only runs when LLM_PROVIDER == "openai" and an API key is configured.
    - Each failed call is retried up to LLM_MAX_RETRIES times, sleeping
      LLM_RETRY_DELAY seconds in between.
    - If the SDK is missing or every attempt fails we log it and return []
      so the analysis still responds.
    """
    if not (LLM_PROVIDER == "openai" and LLM_API_KEY):
        return []

    try:
        # Lazy import so the service can still run without openai installed.
        from openai import OpenAI
    except ImportError:
        logger.warning("LLM_PROVIDER is 'openai' but the openai package is not installed")
        return []

    openai_client = OpenAI(api_key=LLM_API_KEY)

    llm_prompt = (
        "You are a sustainability analyst. Based on the product analysis below, "
        "give up to 3 concise, actionable insights the owner can act on. "
        "Output as plain bullet lines (no numbering):\n\n"
        f"Analysis: {llm_summary_text}"
    )

    attempts = max(1, LLM_MAX_RETRIES)
    for attempt in range(1, attempts + 1):
        try:
            completion_response = openai_client.chat.completions.create(
                model=LLM_MODEL,
                messages=[{"role": "user", "content": llm_prompt}],
                temperature=0.2,
                max_tokens=180,
            )
            model_raw_text: str = completion_response.choices[0].message.content or ""
            if not model_raw_text.strip():
                raise ValueError("empty completion")
        except Exception as exc:
            logger.warning("LLM request failed (attempt %d/%d): %s", attempt, attempts, exc)
            if attempt < attempts:
                time.sleep(LLM_RETRY_DELAY)
            continue

        cleaned_insights: List[str] = []
        for raw_line in model_raw_text.splitlines():
            # Remove leading bullets / dashes / spaces.
            normalized_line = raw_line.strip().strip("-• ").strip()
            if normalized_line and normalized_line not in cleaned_insights:
                cleaned_insights.append(normalized_line)
            if len(cleaned_insights) >= 3:
                break
        return cleaned_insights

    logger.error("LLM insights unavailable after %d attempts", attempts)
    return []
