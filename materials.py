# materials.py
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


class UnknownMaterialError(KeyError):
    """Raised when a material key is not one of the nine known materials."""


@dataclass(frozen=True)
class MaterialProfile:
    """
    Static environmental properties of one material, all on a 0-10 scale.

      impact              : overall production impact (higher is worse)
      carbon_release      : carbon released over the lifecycle (higher is worse)
      recycle_rating      : how easily it is recycled (higher is better)
      sustainability_index: how sustainable the material is overall (higher is better)
    """

    impact: float
    carbon_release: float
    recycle_rating: float
    sustainability_index: float


# Key order matters: the classifier breaks ties and the recommendation
# generator picks alternatives by walking the table in this order.
MATERIAL_KEYS: Tuple[str, ...] = (
    "polymer",
    "cellulose",
    "metal",
    "ceramic",
    "textile",
    "composite",
    "biologic",
    "synthetic",
    "mineral",
)

MATERIAL_DATABASE: Mapping[str, MaterialProfile] = MappingProxyType({
    "polymer": MaterialProfile(impact=8.2, carbon_release=5.8, recycle_rating=4, sustainability_index=3.2),
    "cellulose": MaterialProfile(impact=3.5, carbon_release=2.3, recycle_rating=8, sustainability_index=7.6),
    "metal": MaterialProfile(impact=6.9, carbon_release=7.2, recycle_rating=8.5, sustainability_index=6.1),
    "ceramic": MaterialProfile(impact=5.1, carbon_release=4.7, recycle_rating=5.2, sustainability_index=5.8),
    "textile": MaterialProfile(impact=4.8, carbon_release=3.5, recycle_rating=6.3, sustainability_index=6.5),
    "composite": MaterialProfile(impact=7.5, carbon_release=6.2, recycle_rating=3.2, sustainability_index=4.1),
    "biologic": MaterialProfile(impact=2.1, carbon_release=1.5, recycle_rating=9.1, sustainability_index=8.7),
    "synthetic": MaterialProfile(impact=7.8, carbon_release=6.8, recycle_rating=3.7, sustainability_index=3.5),
    "mineral": MaterialProfile(impact=5.7, carbon_release=5.3, recycle_rating=7.2, sustainability_index=6.7),
})


def get_profile(material: str) -> MaterialProfile:
    """Look up the static profile for `material`, raising UnknownMaterialError if unknown."""
    try:
        return MATERIAL_DATABASE[material]
    except KeyError:
        raise UnknownMaterialError(material) from None
