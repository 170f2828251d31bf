from __future__ import annotations

import math
from dataclasses import dataclass

from brewcalc.core.config import settings
from brewcalc.services.units import g_to_oz, l_to_gal

ABV_FACTOR = 131.25
EBC_PER_SRM = 1.97

# Tinseth constants; 75 folds the metric conversion into AAU * utilization / gallons.
_TINSETH_BIGNESS_BASE = 0.000125
_TINSETH_BIGNESS_SCALE = 1.65
_TINSETH_TIME_RATE = 0.04
_TINSETH_TIME_DIVISOR = 4.15
_IBU_SCALE = 75.0


@dataclass(frozen=True)
class Nutrition:
    calories: int
    carbs_g: float


def gravity_points(sg: float) -> float:
    return (sg - 1.0) * 1000.0


def sg_from_points(points: float) -> float:
    return 1.0 + points / 1000.0


def og_from_total_points(total_points: float, volume_gal: float) -> float:
    """Convert accumulated lb*PPG*efficiency points into a gravity for the given volume."""
    if volume_gal <= 0 or total_points <= 0:
        return 1.0
    return sg_from_points(total_points / volume_gal)


def tinseth_utilization(minutes: float, wort_gravity: float) -> float:
    if minutes <= 0:
        return 0.0
    bigness = _TINSETH_BIGNESS_SCALE * math.pow(_TINSETH_BIGNESS_BASE, wort_gravity - 1.0)
    boil_time_factor = (1.0 - math.exp(-_TINSETH_TIME_RATE * minutes)) / _TINSETH_TIME_DIVISOR
    return bigness * boil_time_factor


def rager_utilization(minutes: float, wort_gravity: float) -> float:
    """Rager curve, with the high-gravity correction folded into the fraction."""
    if minutes <= 0:
        return 0.0
    utilization_pct = 18.11 + 13.86 * math.tanh((minutes - 31.32) / 18.27)
    gravity_adjustment = (wort_gravity - 1.050) / 0.2 if wort_gravity > 1.050 else 0.0
    return max(0.0, utilization_pct / 100.0) / (1.0 + gravity_adjustment)


def hop_utilization(minutes: float, wort_gravity: float) -> float:
    if settings.ibu_formula == "rager":
        return rager_utilization(minutes, wort_gravity)
    return tinseth_utilization(minutes, wort_gravity)


def ibu_from_utilization(*, grams: float, alpha_acid_pct: float, utilization: float, volume_l: float) -> float:
    volume_gal = l_to_gal(volume_l)
    if volume_gal <= 0 or grams <= 0 or alpha_acid_pct <= 0 or utilization <= 0:
        return 0.0
    alpha_acid_units = g_to_oz(grams) * alpha_acid_pct
    return alpha_acid_units * utilization * _IBU_SCALE / volume_gal


def malt_color_units(lovibond_pounds: float, volume_gal: float) -> float:
    if volume_gal <= 0 or lovibond_pounds <= 0:
        return 0.0
    return lovibond_pounds / volume_gal


def srm_morey(mcu: float) -> float:
    if mcu <= 0:
        return 0.0
    return 1.4922 * math.pow(mcu, 0.6859)


def srm_to_ebc(srm: float) -> float:
    return srm * EBC_PER_SRM


def ebc_to_srm(ebc: float) -> float:
    return ebc / EBC_PER_SRM


def srm_to_hex(srm: float) -> str:
    """Approximate display colour for a beer of the given SRM."""
    srm = max(0.0, srm)
    channels = (
        255 * math.exp(-0.1 * srm),
        255 * math.exp(-0.07 * srm),
        255 * math.exp(-0.02 * srm),
    )
    return "#" + "".join(f"{round(min(255.0, max(0.0, value))):02x}" for value in channels)


def abv(og: float, fg: float) -> float:
    return max(0.0, (og - fg) * ABV_FACTOR)


def sg_to_plato(sg: float) -> float:
    return -616.868 + 1111.14 * sg - 630.272 * sg**2 + 135.997 * sg**3


def nutrition_per_serving(og: float, fg: float) -> Nutrition:
    """Calories and carbohydrates per serving (Hall, "Brew By The Numbers")."""
    original_extract = sg_to_plato(og)
    apparent_extract = sg_to_plato(fg)
    real_extract = 0.1808 * original_extract + 0.8192 * apparent_extract
    abw = (original_extract - real_extract) / (2.0665 - 0.010665 * original_extract)

    calories_per_l = (6.9 * abw + 4.0 * (real_extract - 0.1)) * fg * 10
    carbs_per_l = (real_extract - 0.1) * fg * 10
    serving_l = settings.serving_volume_l

    return Nutrition(
        calories=max(0, round(calories_per_l * serving_l)),
        carbs_g=max(0.0, round(carbs_per_l * serving_l, 1)),
    )
