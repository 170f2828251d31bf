from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass

from brewcalc.schemas.recipe import EquipmentSettings, Hop, Recipe

logger = logging.getLogger("brewcalc.volumes")

KETTLE_HOP_USAGES = frozenset({"boil", "whirlpool", "first wort"})


@dataclass(frozen=True)
class VolumeBreakdown:
    """Water volumes through the brew day, in liters, unrounded."""

    grain_kg: float
    grain_absorption_l: float
    hop_absorption_l: float
    boil_off_l: float
    into_fermenter_l: float
    post_boil_l: float
    pre_boil_l: float
    mash_water_l: float
    first_runnings_l: float
    sparge_water_l: float
    total_water_l: float
    excess_runnings_l: float


def _non_negative(value: float | None) -> float:
    if value is None or value < 0:
        return 0.0
    return float(value)


def kettle_hop_weight_kg(hops: Iterable[Hop]) -> float:
    """Weight of hops that sit in the kettle and soak up wort."""
    return sum(_non_negative(hop.grams) for hop in hops if hop.usage in KETTLE_HOP_USAGES) / 1000.0


def total_grain_kg(recipe: Recipe) -> float:
    return sum(_non_negative(fermentable.weight_kg) for fermentable in recipe.fermentables)


def calculate_volumes(
    *,
    batch_volume_l: float,
    equipment: EquipmentSettings,
    grain_kg: float,
    kettle_hops_kg: float = 0.0,
) -> VolumeBreakdown:
    """Work backward from the packaged batch volume to the water needed.

    Losses are added back in reverse process order: fermenter, chiller, kettle
    and hop absorption, cooling shrinkage, then boil-off. The mash side splits
    the pre-boil requirement into strike water and sparge water so that
    first runnings plus sparge reach the pre-boil volume. A mash that drains
    more than the kettle needs collects only the pre-boil volume; the rest is
    reported as ``excess_runnings_l``.
    """
    batch = _non_negative(batch_volume_l)
    grain = _non_negative(grain_kg)

    hop_absorption_l = _non_negative(kettle_hops_kg) * _non_negative(equipment.hop_absorption_l_per_kg)
    boil_off_l = _non_negative(equipment.boil_off_rate_l_per_hr) * _non_negative(equipment.boil_time_min) / 60.0

    into_fermenter_l = batch + _non_negative(equipment.fermenter_loss_l)
    cooled_l = (
        into_fermenter_l
        + _non_negative(equipment.chiller_loss_l)
        + _non_negative(equipment.kettle_loss_l)
        + hop_absorption_l
    )
    post_boil_l = cooled_l * (1.0 + _non_negative(equipment.cooling_shrinkage_pct) / 100.0)
    pre_boil_l = post_boil_l + boil_off_l

    deadspace_l = _non_negative(equipment.mash_tun_deadspace_l)
    grain_absorption_l = grain * _non_negative(equipment.grain_absorption_l_per_kg)
    mash_water_l = grain * _non_negative(equipment.mash_thickness_l_per_kg) + deadspace_l

    first_runnings_l = mash_water_l - grain_absorption_l - deadspace_l
    if first_runnings_l < 0:
        logger.warning(
            json.dumps(
                {
                    "event": "first_runnings_clamped",
                    "grain_kg": round(grain, 3),
                    "mash_water_l": round(mash_water_l, 3),
                    "grain_absorption_l": round(grain_absorption_l, 3),
                }
            )
        )
        first_runnings_l = 0.0

    excess_runnings_l = max(0.0, first_runnings_l - pre_boil_l)
    if excess_runnings_l > 0:
        logger.warning(
            json.dumps(
                {
                    "event": "excess_runnings_left_in_tun",
                    "first_runnings_l": round(first_runnings_l, 3),
                    "pre_boil_l": round(pre_boil_l, 3),
                    "excess_runnings_l": round(excess_runnings_l, 3),
                }
            )
        )
        first_runnings_l = pre_boil_l

    sparge_water_l = pre_boil_l - first_runnings_l
    total_water_l = mash_water_l + sparge_water_l

    breakdown = VolumeBreakdown(
        grain_kg=grain,
        grain_absorption_l=grain_absorption_l,
        hop_absorption_l=hop_absorption_l,
        boil_off_l=boil_off_l,
        into_fermenter_l=into_fermenter_l,
        post_boil_l=post_boil_l,
        pre_boil_l=pre_boil_l,
        mash_water_l=mash_water_l,
        first_runnings_l=first_runnings_l,
        sparge_water_l=sparge_water_l,
        total_water_l=total_water_l,
        excess_runnings_l=excess_runnings_l,
    )
    logger.debug(json.dumps({"event": "volumes_calculated", **{k: round(v, 3) for k, v in asdict(breakdown).items()}}))
    return breakdown


def volumes_for_recipe(recipe: Recipe) -> VolumeBreakdown:
    return calculate_volumes(
        batch_volume_l=recipe.batch_volume_l,
        equipment=recipe.equipment,
        grain_kg=total_grain_kg(recipe),
        kettle_hops_kg=kettle_hop_weight_kg(recipe.hops),
    )
