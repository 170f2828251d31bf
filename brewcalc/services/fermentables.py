from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from brewcalc.schemas.recipe import Fermentable
from brewcalc.services.formulas import ABV_FACTOR
from brewcalc.services.units import l_to_gal, lb_to_kg

CATEGORY_FERMENTABILITY: dict[str, float] = {
    "Base malts": 1.00,
    "Crystal/Caramel": 0.50,
    "Roasted": 0.60,
    "Toasted & specialty": 0.85,
    "Adjuncts (mashable/flaked)": 1.00,
    "Extracts": 0.78,
    "Sugars": 1.00,
    "Lauter aids & other": 0.00,
}

_NAME_OVERRIDES: tuple[tuple[re.Pattern[str], float], ...] = (
    (re.compile(r"\blactose\b", re.IGNORECASE), 0.0),
    (re.compile(r"\bmaltodextrin\b", re.IGNORECASE), 0.0),
    (re.compile(r"\bcara\s*pils\b", re.IGNORECASE), 0.50),
    (re.compile(r"\bdextrin[e]?\s*malt\b", re.IGNORECASE), 0.50),
)

_EXTRACT_TOKENS = ("extract", "lme", "dme", "liquid malt", "dry malt")
_SUGAR_TOKENS = (
    "sugar",
    "honey",
    "syrup",
    "molasses",
    "candi",
    "candy",
    "dextrose",
    "sucrose",
    "lactose",
    "maltodextrin",
    "agave",
    "maple",
    "invert",
    "jaggery",
    "treacle",
    "cane",
)
_ROASTED_TOKENS = ("roasted", "black", "chocolate", "carafa")
_CRYSTAL_TOKENS = ("crystal", "caramel", "cara")
_TOASTED_TOKENS = ("aromatic", "biscuit", "victory", "amber", "brown", "melanoidin", "special")


def categorize_fermentable(name: str, color_lovibond: float) -> str:
    token = name.lower()

    if any(part in token for part in _EXTRACT_TOKENS):
        return "Extracts"
    if any(part in token for part in _SUGAR_TOKENS):
        return "Sugars"
    if "rice hull" in token:
        return "Lauter aids & other"
    if "flaked" in token or "torrified" in token:
        return "Adjuncts (mashable/flaked)"
    if any(part in token for part in _ROASTED_TOKENS) or (color_lovibond >= 300 and "caramel" not in token):
        return "Roasted"
    if any(part in token for part in _CRYSTAL_TOKENS) or (
        10 <= color_lovibond < 200 and not any(part in token for part in ("munich", "aromatic", "biscuit"))
    ):
        return "Crystal/Caramel"
    if any(part in token for part in _TOASTED_TOKENS) or 20 <= color_lovibond < 100:
        return "Toasted & specialty"
    return "Base malts"


def infer_fermentability(name: str, color_lovibond: float = 0.0) -> float:
    """Share (0-1) of a fermentable's extract that brewer's yeast can ferment."""
    for pattern, fermentability in _NAME_OVERRIDES:
        if pattern.search(name):
            return fermentability
    return CATEGORY_FERMENTABILITY[categorize_fermentable(name, color_lovibond)]


def fermentability_of(fermentable: Fermentable) -> float:
    if fermentable.fermentability is not None:
        return fermentable.fermentability
    return infer_fermentability(fermentable.name, fermentable.color_lovibond)


def percents_from_weights(fermentables: Sequence[Fermentable]) -> dict[str, float]:
    total_kg = sum(max(0.0, fermentable.weight_kg) for fermentable in fermentables)
    return {
        fermentable.id: round(max(0.0, fermentable.weight_kg) / total_kg * 100, 1) if total_kg > 0 else 0.0
        for fermentable in fermentables
    }


def total_percent(fermentables: Sequence[Fermentable], percent_by_id: Mapping[str, float]) -> float:
    return sum(percent_by_id.get(fermentable.id, 0.0) for fermentable in fermentables)


def weights_from_percents_and_abv(
    fermentables: Sequence[Fermentable],
    percent_by_id: Mapping[str, float],
    *,
    target_abv: float,
    batch_volume_l: float,
    attenuation_pct: float,
) -> list[Fermentable]:
    """Size the grain bill so the given proportions reach ``target_abv``.

    Inverts ABV ~= (OG - 1) * 131.25 * attenuation. Each fermentable's own
    efficiency is used, falling back to 75%. Inputs that make the bill
    unsolvable return the fermentables unchanged.
    """
    volume_gal = max(0.0, l_to_gal(batch_volume_l))
    attenuation = max(0.4, min(0.98, attenuation_pct / 100.0))
    if volume_gal <= 0:
        return list(fermentables)

    target_og = 1.0 + max(0.0, target_abv) / (ABV_FACTOR * attenuation)
    total_points_needed = (target_og - 1.0) * 1000.0 * volume_gal

    points_per_lb = 0.0
    for fermentable in fermentables:
        share = max(0.0, percent_by_id.get(fermentable.id, 0.0)) / 100.0
        efficiency = (fermentable.efficiency_pct or 75.0) / 100.0
        points_per_lb += share * fermentable.ppg * efficiency

    if points_per_lb <= 0:
        return list(fermentables)

    total_kg = lb_to_kg(total_points_needed / points_per_lb)
    return [
        fermentable.model_copy(
            update={"weight_kg": round(total_kg * max(0.0, percent_by_id.get(fermentable.id, 0.0)) / 100.0, 3)}
        )
        for fermentable in fermentables
    ]
