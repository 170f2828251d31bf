from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from brewcalc.core.config import settings
from brewcalc.schemas.recipe import EquipmentSettings, MashStep

logger = logging.getLogger("brewcalc.mash")

# Heat capacity of dry grain relative to the same mass of water.
GRAIN_HEAT_CAPACITY_RATIO = 0.41

MIN_MASH_TEMP_C = 0.0
MAX_MASH_TEMP_C = 100.0


@dataclass(frozen=True)
class MashStepResult:
    index: int
    name: str
    step_type: str
    start_temp_c: float
    target_temp_c: float
    duration_minutes: float
    infusion_volume_l: float
    infusion_temp_c: float | None
    water_volume_l: float
    mash_volume_l: float
    is_strike: bool


@dataclass(frozen=True)
class MashSchedulePlan:
    steps: tuple[MashStepResult, ...]
    total_time_minutes: float
    total_infusion_water_l: float
    strike_temp_c: float | None


def strike_temperature(
    *,
    target_temp_c: float,
    mash_thickness_l_per_kg: float,
    grain_temp_c: float | None = None,
    grain_kg: float = 0.0,
    water_volume_l: float | None = None,
) -> float:
    """Water temperature that settles a dough-in at ``target_temp_c``.

    With a strike volume the full heat balance is used, and an empty grain bill
    or a dry strike needs no correction. Without one the thickness ratio stands
    in for water per kilogram of grain.
    """
    grain_temp = settings.default_grain_temp_c if grain_temp_c is None else grain_temp_c
    temp_gap = target_temp_c - grain_temp

    if water_volume_l is not None:
        if grain_kg <= 0 or water_volume_l <= 0:
            return target_temp_c
        return target_temp_c + grain_kg * GRAIN_HEAT_CAPACITY_RATIO * temp_gap / water_volume_l

    if mash_thickness_l_per_kg <= 0:
        return target_temp_c
    return target_temp_c + (GRAIN_HEAT_CAPACITY_RATIO / mash_thickness_l_per_kg) * temp_gap


def infusion_temperature(
    *,
    current_temp_c: float,
    target_temp_c: float,
    grain_kg: float,
    current_water_l: float,
    infusion_volume_l: float,
) -> float:
    """Temperature of water to add so the mash rises from current to target."""
    if infusion_volume_l <= 0:
        return target_temp_c
    mash_heat_capacity = max(0.0, grain_kg) * GRAIN_HEAT_CAPACITY_RATIO + max(0.0, current_water_l)
    return target_temp_c + (target_temp_c - current_temp_c) * mash_heat_capacity / infusion_volume_l


def total_mash_time(steps: Sequence[MashStep]) -> float:
    return sum(max(0.0, step.duration_minutes) for step in steps)


def total_infusion_water(steps: Sequence[MashStep]) -> float:
    """Infusion volumes as entered; a strike left without a volume counts as 0."""
    return sum(
        step.infusion_volume_l
        for step in steps
        if step.step_type == "infusion" and step.infusion_volume_l and step.infusion_volume_l > 0
    )


def infusion_volumes(steps: Sequence[MashStep], *, grain_kg: float, mash_thickness_l_per_kg: float) -> list[float]:
    """Liters of water added at each step.

    An infusion into a dry tun without a volume is a strike of grain weight
    times mash thickness.
    """
    water_l = 0.0
    volumes: list[float] = []
    for step in steps:
        added_l = 0.0
        if step.step_type == "infusion":
            if water_l <= 0:
                added_l = step.infusion_volume_l or grain_kg * mash_thickness_l_per_kg
            else:
                added_l = step.infusion_volume_l or 0.0
            added_l = max(0.0, added_l)
        water_l += added_l
        volumes.append(added_l)
    return volumes


def mash_volume_at_step(
    steps: Sequence[MashStep],
    index: int,
    *,
    grain_kg: float,
    equipment: EquipmentSettings,
) -> float:
    """Free liquid in the tun once steps[0..index] have been infused."""
    grain_kg = max(0.0, grain_kg)
    infused = sum(
        infusion_volumes(steps[: index + 1], grain_kg=grain_kg, mash_thickness_l_per_kg=equipment.mash_thickness_l_per_kg)
    )
    return max(0.0, infused - grain_kg * equipment.grain_absorption_l_per_kg)


def plan_mash_schedule(
    steps: Sequence[MashStep],
    *,
    grain_kg: float,
    equipment: EquipmentSettings,
    grain_temp_c: float | None = None,
) -> MashSchedulePlan:
    """Fold the ordered steps left to right, carrying temperature and water volume.

    The first infusion into a dry tun is the strike; its volume defaults to
    grain weight times mash thickness. Later infusions are solved from the
    previous step's resulting temperature and the water already in the tun.
    Temperature and decoction steps land on their own target.
    """
    grain_kg = max(0.0, grain_kg)
    current_temp = settings.default_grain_temp_c if grain_temp_c is None else grain_temp_c
    water_l = 0.0
    strike_temp_c: float | None = None
    results: list[MashStepResult] = []
    added_volumes = infusion_volumes(steps, grain_kg=grain_kg, mash_thickness_l_per_kg=equipment.mash_thickness_l_per_kg)

    for index, step in enumerate(steps):
        start_temp = current_temp
        added_l = added_volumes[index]
        water_temp: float | None = None
        is_strike = False

        if step.step_type == "infusion":
            if water_l <= 0:
                is_strike = True
                water_temp = strike_temperature(
                    target_temp_c=step.temperature_c,
                    mash_thickness_l_per_kg=equipment.mash_thickness_l_per_kg,
                    grain_temp_c=start_temp,
                    grain_kg=grain_kg,
                    water_volume_l=added_l,
                )
                strike_temp_c = water_temp
            else:
                water_temp = infusion_temperature(
                    current_temp_c=start_temp,
                    target_temp_c=step.temperature_c,
                    grain_kg=grain_kg,
                    current_water_l=water_l,
                    infusion_volume_l=added_l,
                )

        water_l += added_l
        current_temp = step.temperature_c
        results.append(
            MashStepResult(
                index=index,
                name=step.name,
                step_type=step.step_type,
                start_temp_c=start_temp,
                target_temp_c=step.temperature_c,
                duration_minutes=step.duration_minutes,
                infusion_volume_l=added_l,
                infusion_temp_c=water_temp,
                water_volume_l=water_l,
                mash_volume_l=max(0.0, water_l - grain_kg * equipment.grain_absorption_l_per_kg),
                is_strike=is_strike,
            )
        )

    plan = MashSchedulePlan(
        steps=tuple(results),
        total_time_minutes=total_mash_time(steps),
        total_infusion_water_l=water_l,
        strike_temp_c=strike_temp_c,
    )
    logger.debug(
        json.dumps(
            {
                "event": "mash_schedule_planned",
                "steps": len(results),
                "total_time_minutes": plan.total_time_minutes,
                "total_infusion_water_l": round(water_l, 2),
                "strike_temp_c": None if strike_temp_c is None else round(strike_temp_c, 1),
            }
        )
    )
    return plan


def single_infusion_schedule(
    *,
    grain_kg: float,
    equipment: EquipmentSettings,
    target_temp_c: float = 66.0,
    duration_minutes: float = 60.0,
    grain_temp_c: float | None = None,
) -> list[MashStep]:
    volume_l = grain_kg * equipment.mash_thickness_l_per_kg
    strike = strike_temperature(
        target_temp_c=target_temp_c,
        mash_thickness_l_per_kg=equipment.mash_thickness_l_per_kg,
        grain_temp_c=grain_temp_c,
        grain_kg=grain_kg,
        water_volume_l=volume_l,
    )
    return [
        MashStep(
            name="Saccharification",
            step_type="infusion",
            temperature_c=target_temp_c,
            duration_minutes=duration_minutes,
            infusion_volume_l=round(volume_l, 1),
            infusion_temp_c=round(strike, 1),
        )
    ]


def multi_step_schedule(
    *,
    grain_kg: float,
    equipment: EquipmentSettings,
    grain_temp_c: float | None = None,
) -> list[MashStep]:
    """Protein rest, saccharification rest and mash out."""
    protein_rest = single_infusion_schedule(
        grain_kg=grain_kg,
        equipment=equipment,
        target_temp_c=50.0,
        duration_minutes=15.0,
        grain_temp_c=grain_temp_c,
    )[0]
    return [
        protein_rest.model_copy(update={"name": "Protein Rest"}),
        MashStep(name="Saccharification", step_type="temperature", temperature_c=66.0, duration_minutes=45.0),
        MashStep(name="Mash Out", step_type="temperature", temperature_c=76.0, duration_minutes=10.0),
    ]


def validate_mash_step(step: MashStep) -> list[str]:
    errors: list[str] = []

    if not step.name.strip():
        errors.append("Step name is required")
    if step.temperature_c < MIN_MASH_TEMP_C or step.temperature_c > MAX_MASH_TEMP_C:
        errors.append("Temperature must be between 0°C and 100°C")
    if step.duration_minutes <= 0:
        errors.append("Duration must be greater than 0 minutes")

    if step.step_type == "infusion":
        if not step.infusion_volume_l or step.infusion_volume_l <= 0:
            errors.append("Infusion volume is required and must be greater than 0")
        if step.infusion_temp_c is not None and step.infusion_temp_c <= 0:
            errors.append("Infusion temperature must be greater than 0")
    elif step.step_type == "decoction":
        if not step.decoction_volume_l or step.decoction_volume_l <= 0:
            errors.append("Decoction volume is required and must be greater than 0")

    return errors
