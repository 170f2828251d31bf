from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from brewcalc.core.config import settings
from brewcalc.schemas.recipe import Hop, Recipe
from brewcalc.services.fermentables import fermentability_of
from brewcalc.services.formulas import (
    abv,
    hop_utilization,
    ibu_from_utilization,
    malt_color_units,
    nutrition_per_serving,
    og_from_total_points,
    sg_from_points,
    srm_morey,
    srm_to_ebc,
)
from brewcalc.services.units import kg_to_lb, l_to_gal
from brewcalc.services.volumes import VolumeBreakdown, volumes_for_recipe
from brewcalc.services.water_chemistry import WaterReport, build_water_report

logger = logging.getLogger("brewcalc.recipe")

MIN_EFFECTIVE_ATTENUATION = 0.60
MAX_EFFECTIVE_ATTENUATION = 0.95
REFERENCE_MASH_TEMP_C = 66.0
REFERENCE_MASH_MINUTES = 60.0
REFERENCE_FERMENT_TEMP_C = 20.0
REFERENCE_FERMENT_DAYS = 10.0

_ATTENUATIVE_FERMENTATION_STEPS = frozenset({"primary", "secondary"})


@dataclass(frozen=True)
class HopContribution:
    hop_id: str
    name: str
    usage: str
    effective_minutes: float
    utilization: float
    ibu: float


@dataclass(frozen=True)
class GravityPoints:
    """Accumulated lb * PPG * efficiency, split by fermentability."""

    fermentable: float
    non_fermentable: float
    volume_gal: float

    @property
    def total(self) -> float:
        return self.fermentable + self.non_fermentable


@dataclass(frozen=True)
class RecipeCalculations:
    og: float
    fg: float
    abv: float
    ibu: float
    srm: float
    ebc: float
    calories: int
    carbs_g: float
    effective_attenuation_pct: float
    mash_water_l: float
    sparge_water_l: float
    pre_boil_volume_l: float
    post_boil_volume_l: float
    total_water_l: float
    hop_contributions: tuple[HopContribution, ...]
    volumes: VolumeBreakdown
    water: WaterReport | None


def estimate_abv(og: float, fg: float) -> float:
    """Estimate ABV from OG and FG using a standard approximation."""
    return round(abv(og, fg), 2)


def attenuation_pct(og: float, fg: float) -> float:
    if og <= 1.0:
        return 0.0
    return round(((og - fg) / (og - 1.0)) * 100, 2)


def collect_gravity_points(recipe: Recipe, *, volumes: VolumeBreakdown | None = None) -> GravityPoints:
    """Extract collected into the post-boil volume.

    A fermentable's own efficiency wins over the recipe's mash efficiency.
    """
    if not recipe.fermentables or recipe.batch_volume_l <= 0:
        return GravityPoints(fermentable=0.0, non_fermentable=0.0, volume_gal=0.0)

    volumes = volumes or volumes_for_recipe(recipe)
    volume_gal = l_to_gal(volumes.post_boil_l)

    fermentable_points = 0.0
    non_fermentable_points = 0.0
    for fermentable in recipe.fermentables:
        efficiency_pct = fermentable.efficiency_pct
        if efficiency_pct is None:
            efficiency_pct = recipe.equipment.mash_efficiency_pct
        points = kg_to_lb(max(0.0, fermentable.weight_kg)) * max(0.0, fermentable.ppg) * efficiency_pct / 100.0
        share = fermentability_of(fermentable)
        fermentable_points += points * share
        non_fermentable_points += points * (1.0 - share)

    return GravityPoints(
        fermentable=fermentable_points,
        non_fermentable=non_fermentable_points,
        volume_gal=volume_gal,
    )


def calculate_og(recipe: Recipe, *, volumes: VolumeBreakdown | None = None) -> float:
    points = collect_gravity_points(recipe, volumes=volumes)
    return og_from_total_points(points.total, points.volume_gal)


def _base_attenuation(recipe: Recipe) -> float:
    if recipe.yeasts and recipe.yeasts[0].attenuation_pct is not None:
        return recipe.yeasts[0].attenuation_pct / 100.0
    return settings.default_attenuation_pct / 100.0


def _fermentation_profile(recipe: Recipe) -> tuple[float, float]:
    steps = [step for step in recipe.fermentation_steps if step.step_type in _ATTENUATIVE_FERMENTATION_STEPS]
    total_days = sum(max(0.0, step.duration_days) for step in steps)
    if total_days <= 0:
        return REFERENCE_FERMENT_TEMP_C, REFERENCE_FERMENT_DAYS
    weighted_temp = sum(max(0.0, step.duration_days) * step.temperature_c for step in steps)
    return weighted_temp / total_days, total_days


def effective_attenuation(recipe: Recipe) -> float:
    """Apparent attenuation (0-1) after mash and fermentation adjustments.

    Starts from the first yeast's attenuation. Cooler mash rests raise it by
    about 1% per degree below 66 C, decoction adds 0.5%, both weighted by
    rest time. Mash length moves it 0.5% per 15 minutes away from an hour,
    capped at 3%. Warmer and longer primary/secondary fermentation raise it
    too. The result stays within [0.60, 0.95].
    """
    total_minutes = 0.0
    temp_adjustment = 0.0
    decoction_adjustment = 0.0
    for step in recipe.mash_steps:
        minutes = max(0.0, step.duration_minutes)
        total_minutes += minutes
        temp_adjustment += (REFERENCE_MASH_TEMP_C - step.temperature_c) * 0.01 * minutes
        if step.step_type == "decoction":
            decoction_adjustment += 0.005 * minutes

    mash_minutes = REFERENCE_MASH_MINUTES
    if total_minutes > 0:
        temp_adjustment /= total_minutes
        decoction_adjustment /= total_minutes
        mash_minutes = total_minutes
    mash_time_adjustment = max(-0.03, min(0.03, (mash_minutes - REFERENCE_MASH_MINUTES) / 15.0 * 0.005))

    ferment_temp_c, ferment_days = _fermentation_profile(recipe)
    ferment_temp_adjustment = (ferment_temp_c - REFERENCE_FERMENT_TEMP_C) * 0.004
    ferment_days_adjustment = (ferment_days - REFERENCE_FERMENT_DAYS) * 0.002

    attenuation = (
        _base_attenuation(recipe)
        + temp_adjustment
        + decoction_adjustment
        + mash_time_adjustment
        + ferment_temp_adjustment
        + ferment_days_adjustment
    )
    return max(MIN_EFFECTIVE_ATTENUATION, min(MAX_EFFECTIVE_ATTENUATION, attenuation))


def calculate_fg(recipe: Recipe, *, volumes: VolumeBreakdown | None = None) -> float:
    points = collect_gravity_points(recipe, volumes=volumes)
    if points.total <= 0 or points.volume_gal <= 0:
        return 1.0
    residual = points.non_fermentable + points.fermentable * (1.0 - effective_attenuation(recipe))
    return sg_from_points(residual / points.volume_gal)


def _hop_minutes(hop: Hop, boil_time_min: float) -> float:
    if hop.usage == "boil":
        minutes = boil_time_min if hop.boil_minutes is None else hop.boil_minutes
        return max(0.0, min(minutes, boil_time_min))
    if hop.usage == "first wort":
        minutes = boil_time_min if hop.boil_minutes is None else min(hop.boil_minutes, boil_time_min)
        return max(0.0, minutes) + settings.first_wort_bonus_minutes
    if hop.usage == "whirlpool":
        return settings.whirlpool_default_minutes if hop.whirlpool_minutes is None else hop.whirlpool_minutes
    if hop.usage == "mash":
        return hop.boil_minutes or settings.mash_hop_default_minutes
    return 0.0


def _whirlpool_factor(temp_c: float) -> float:
    """Share of boiling-point isomerization reached at a whirlpool temperature."""
    floor_c = settings.whirlpool_min_temp_c
    if temp_c <= floor_c:
        return 0.0
    clamped = min(temp_c, floor_c + settings.whirlpool_temp_span_c)
    return ((clamped - floor_c) / settings.whirlpool_temp_span_c) ** settings.whirlpool_temp_exponent


def hop_addition_utilization(hop: Hop, *, og: float, boil_time_min: float) -> tuple[float, float]:
    """Return (effective minutes, utilization) for one addition.

    Every addition is evaluated at the recipe's final OG rather than the
    gravity in the kettle at the time it goes in.
    """
    if hop.usage == "dry hop":
        return 0.0, 0.0

    minutes = _hop_minutes(hop, max(0.0, boil_time_min))
    utilization = hop_utilization(minutes, og)
    if hop.usage == "whirlpool":
        temp_c = settings.whirlpool_default_temp_c if hop.whirlpool_temp_c is None else hop.whirlpool_temp_c
        utilization *= _whirlpool_factor(temp_c)
    elif hop.usage == "mash":
        utilization *= settings.mash_hop_utilization_factor
    return minutes, utilization


def hop_ibu_contributions(recipe: Recipe, og: float) -> tuple[HopContribution, ...]:
    contributions: list[HopContribution] = []
    for hop in recipe.hops:
        minutes, utilization = hop_addition_utilization(hop, og=og, boil_time_min=recipe.equipment.boil_time_min)
        contributions.append(
            HopContribution(
                hop_id=hop.id,
                name=hop.name,
                usage=hop.usage,
                effective_minutes=minutes,
                utilization=utilization,
                ibu=ibu_from_utilization(
                    grams=hop.grams,
                    alpha_acid_pct=hop.alpha_acid_pct,
                    utilization=utilization,
                    volume_l=recipe.batch_volume_l,
                ),
            )
        )
    return tuple(contributions)


def calculate_ibu(recipe: Recipe, og: float) -> float:
    return round(sum(contribution.ibu for contribution in hop_ibu_contributions(recipe, og)), 1)


def calculate_srm(recipe: Recipe) -> float:
    lovibond_pounds = sum(
        kg_to_lb(max(0.0, fermentable.weight_kg)) * max(0.0, fermentable.color_lovibond)
        for fermentable in recipe.fermentables
    )
    return srm_morey(malt_color_units(lovibond_pounds, l_to_gal(recipe.batch_volume_l)))


def calculate_recipe(recipe: Recipe) -> RecipeCalculations:
    """Derive every brewing number for a recipe. The recipe is not modified."""
    volumes = volumes_for_recipe(recipe)
    og = calculate_og(recipe, volumes=volumes)
    fg = calculate_fg(recipe, volumes=volumes)
    contributions = hop_ibu_contributions(recipe, og)
    ibu = round(sum(contribution.ibu for contribution in contributions), 1)
    srm = calculate_srm(recipe)
    nutrition = nutrition_per_serving(og, fg)

    water: WaterReport | None = None
    if recipe.water_chemistry is not None:
        water = build_water_report(
            recipe.water_chemistry,
            mash_water_l=volumes.mash_water_l,
            sparge_water_l=volumes.sparge_water_l,
        )

    result = RecipeCalculations(
        og=round(og, 4),
        fg=round(fg, 4),
        abv=round(abv(og, fg), 2),
        ibu=ibu,
        srm=round(srm, 1),
        ebc=round(srm_to_ebc(srm), 1),
        calories=nutrition.calories,
        carbs_g=nutrition.carbs_g,
        effective_attenuation_pct=round(effective_attenuation(recipe) * 100, 1),
        mash_water_l=round(volumes.mash_water_l, 1),
        sparge_water_l=round(volumes.sparge_water_l, 1),
        pre_boil_volume_l=round(volumes.pre_boil_l, 1),
        post_boil_volume_l=round(volumes.post_boil_l, 1),
        total_water_l=round(volumes.total_water_l, 1),
        hop_contributions=contributions,
        volumes=volumes,
        water=water,
    )
    logger.debug(
        json.dumps(
            {
                "event": "recipe_calculated",
                "recipe_id": recipe.id,
                "og": result.og,
                "fg": result.fg,
                "abv": result.abv,
                "ibu": result.ibu,
                "srm": result.srm,
                "hops": len(contributions),
                "fermentables": len(recipe.fermentables),
            }
        )
    )
    return result
