from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from brewcalc.schemas.recipe import WaterChemistrySettings
from brewcalc.schemas.water import ION_FIELDS, SALT_FIELDS, SaltAdditions, WaterProfile

logger = logging.getLogger("brewcalc.water")

# ppm contributed by 1 g of salt dissolved in 1 L, from molar mass fractions.
_GYPSUM = {"calcium_ppm": 232.8, "sulfate_ppm": 558.3}
_CALCIUM_CHLORIDE = {"calcium_ppm": 272.6, "chloride_ppm": 482.0}
_EPSOM_SALT = {"magnesium_ppm": 98.6, "sulfate_ppm": 389.6}
_TABLE_SALT = {"sodium_ppm": 393.4, "chloride_ppm": 606.6}
_BAKING_SODA = {"sodium_ppm": 273.7, "bicarbonate_ppm": 726.3}

SALT_ION_CONTRIBUTIONS: dict[str, dict[str, float]] = {
    "gypsum_g": _GYPSUM,
    "cacl2_g": _CALCIUM_CHLORIDE,
    "epsom_g": _EPSOM_SALT,
    "nacl_g": _TABLE_SALT,
    "nahco3_g": _BAKING_SODA,
}


@dataclass(frozen=True)
class SaltSplit:
    mash: SaltAdditions
    sparge: SaltAdditions


@dataclass(frozen=True)
class StyleWaterTarget:
    name: str
    profile: WaterProfile
    description: str


@dataclass(frozen=True)
class WaterReport:
    source_profile: WaterProfile
    final_profile: WaterProfile
    salts: SaltAdditions
    split: SaltSplit
    total_water_l: float
    chloride_sulfate_ratio: float | None
    balance: str
    source_profile_name: str | None
    target_profile_name: str | None
    target_profile: WaterProfile | None


def _profile(ca: float, mg: float, na: float, cl: float, so4: float, hco3: float) -> WaterProfile:
    return WaterProfile(
        calcium_ppm=ca,
        magnesium_ppm=mg,
        sodium_ppm=na,
        chloride_ppm=cl,
        sulfate_ppm=so4,
        bicarbonate_ppm=hco3,
    )


COMMON_WATER_PROFILES: dict[str, WaterProfile] = {
    "RO": _profile(0, 0, 0, 0, 0, 0),
    "Pilsen": _profile(7, 3, 2, 5, 5, 15),
    "Dortmund": _profile(225, 40, 60, 180, 120, 180),
    "Burton": _profile(275, 40, 25, 35, 470, 300),
    "Dublin": _profile(120, 4, 12, 19, 53, 319),
    "Vienna": _profile(163, 12, 10, 40, 125, 258),
    "Montreal": _profile(31, 8, 15, 26, 22, 0),
}

_STYLE_TARGETS: tuple[StyleWaterTarget, ...] = (
    StyleWaterTarget(
        name="NEIPA / Hazy IPA",
        profile=_profile(100, 20, 20, 200, 75, 49),
        description="High chloride for juicy, soft mouthfeel. Moderate sulfate for hop balance.",
    ),
    StyleWaterTarget(
        name="American IPA",
        profile=_profile(100, 15, 20, 75, 200, 49),
        description="High sulfate for crisp, dry hop character. Moderate chloride for balance.",
    ),
    StyleWaterTarget(
        name="American Pale Ale",
        profile=_profile(75, 15, 20, 50, 150, 49),
        description="High sulfate for hop accentuation. Lower chloride for clean finish.",
    ),
    StyleWaterTarget(
        name="West Coast IPA",
        profile=_profile(100, 15, 20, 50, 250, 49),
        description="Very high sulfate for aggressive hop bitterness. Low chloride for dry finish.",
    ),
    StyleWaterTarget(
        name="English IPA",
        profile=_profile(100, 15, 20, 100, 150, 100),
        description="Balanced chloride and sulfate. Higher bicarbonate for malt backbone.",
    ),
    StyleWaterTarget(
        name="Pilsner",
        profile=_profile(50, 5, 5, 50, 75, 25),
        description="Soft water with low minerals for a crisp lager.",
    ),
    StyleWaterTarget(
        name="German Pilsner",
        profile=_profile(50, 5, 5, 50, 100, 25),
        description="Soft with slightly elevated sulfate for hop spiciness.",
    ),
    StyleWaterTarget(
        name="Munich Helles",
        profile=_profile(75, 15, 10, 75, 50, 100),
        description="Higher chloride for malt-forward profile. Moderate bicarbonate.",
    ),
    StyleWaterTarget(
        name="Stout / Porter",
        profile=_profile(100, 20, 20, 100, 100, 150),
        description="Balanced chloride and sulfate. Higher bicarbonate for dark malt buffering.",
    ),
    StyleWaterTarget(
        name="Irish Stout",
        profile=_profile(120, 4, 12, 19, 53, 319),
        description="Dublin water. Very high bicarbonate for roast character.",
    ),
    StyleWaterTarget(
        name="Belgian Ale",
        profile=_profile(75, 15, 20, 100, 75, 120),
        description="Higher chloride for malt complexity. Moderate bicarbonate.",
    ),
    StyleWaterTarget(
        name="Blonde / Cream Ale",
        profile=_profile(50, 10, 15, 50, 75, 49),
        description="Clean, soft profile. Slightly elevated sulfate for crispness.",
    ),
    StyleWaterTarget(
        name="Brown Ale",
        profile=_profile(100, 20, 20, 125, 75, 100),
        description="Higher chloride for malt sweetness. Moderate bicarbonate.",
    ),
    StyleWaterTarget(
        name="Balanced",
        profile=_profile(75, 15, 20, 75, 75, 49),
        description="Equal chloride and sulfate for neutral balance.",
    ),
)

_TARGETS_BY_NAME = {target.name.lower(): target for target in _STYLE_TARGETS}
_COMMON_BY_NAME = {name.lower(): profile for name, profile in COMMON_WATER_PROFILES.items()}


def list_style_water_targets() -> list[StyleWaterTarget]:
    return list(_STYLE_TARGETS)


def resolve_water_profile(name: str | None) -> WaterProfile | None:
    """Look up a style target first, then a common source water, by name."""
    if not name or not name.strip():
        return None
    token = name.strip().lower()
    target = _TARGETS_BY_NAME.get(token)
    if target:
        return target.profile
    return _COMMON_BY_NAME.get(token)


def _ion_values(profile: WaterProfile) -> dict[str, float]:
    return {ion: getattr(profile, ion) for ion in ION_FIELDS}


def add_profiles(a: WaterProfile, b: WaterProfile) -> dict[str, float]:
    """Ion-by-ion sum. Returned as a plain mapping since deltas may go negative."""
    return {ion: getattr(a, ion) + getattr(b, ion) for ion in ION_FIELDS}


def scale_profile(profile: WaterProfile, factor: float) -> dict[str, float]:
    return {ion: value * factor for ion, value in _ion_values(profile).items()}


def clamp_profile(values: dict[str, float]) -> WaterProfile:
    return WaterProfile(**{ion: max(0.0, values.get(ion, 0.0)) for ion in ION_FIELDS})


def blend_profiles(a: WaterProfile, b: WaterProfile, *, fraction_b: float) -> WaterProfile:
    """Mix two source waters, e.g. tap cut with RO, by the volume share of ``b``."""
    fraction_b = max(0.0, min(1.0, fraction_b))
    mixed = add_profiles(clamp_profile(scale_profile(a, 1.0 - fraction_b)), clamp_profile(scale_profile(b, fraction_b)))
    return clamp_profile(mixed)


def ion_delta_from_salts(salts: SaltAdditions, volume_l: float) -> WaterProfile:
    """ppm added by the given grams of salt dissolved in ``volume_l`` liters."""
    delta = {ion: 0.0 for ion in ION_FIELDS}
    if volume_l <= 0:
        return WaterProfile(**delta)

    for salt, contributions in SALT_ION_CONTRIBUTIONS.items():
        grams = getattr(salts, salt)
        if grams <= 0:
            continue
        grams_per_l = grams / volume_l
        for ion, ppm_per_g_l in contributions.items():
            delta[ion] += grams_per_l * ppm_per_g_l
    return WaterProfile(**delta)


def final_profile(source: WaterProfile, salts: SaltAdditions, total_water_l: float) -> WaterProfile:
    if total_water_l <= 0:
        logger.warning(json.dumps({"event": "water_profile_zero_volume", "total_water_l": total_water_l}))
        return source
    return clamp_profile(add_profiles(source, ion_delta_from_salts(salts, total_water_l)))


def split_salts_proportionally(salts: SaltAdditions, *, mash_water_l: float, sparge_water_l: float) -> SaltSplit:
    """Apportion each salt between mash and sparge by each stage's share of the water."""
    mash_water_l = max(0.0, mash_water_l)
    sparge_water_l = max(0.0, sparge_water_l)
    total_water_l = mash_water_l + sparge_water_l
    if total_water_l <= 0:
        return SaltSplit(mash=SaltAdditions(), sparge=SaltAdditions())

    mash_ratio = mash_water_l / total_water_l
    sparge_ratio = sparge_water_l / total_water_l
    return SaltSplit(
        mash=SaltAdditions(**{salt: getattr(salts, salt) * mash_ratio for salt in SALT_FIELDS}),
        sparge=SaltAdditions(**{salt: getattr(salts, salt) * sparge_ratio for salt in SALT_FIELDS}),
    )


def chloride_to_sulfate_ratio(profile: WaterProfile) -> float | None:
    if profile.sulfate_ppm <= 0:
        return None
    return profile.chloride_ppm / profile.sulfate_ppm


def describe_balance(ratio: float | None) -> str:
    if ratio is None:
        return "no data"
    if ratio < 0.4:
        return "very hoppy"
    if ratio < 0.77:
        return "hoppy"
    if ratio <= 1.3:
        return "balanced"
    if ratio < 2.0:
        return "malty"
    return "very malty"


def salts_for_target(
    source: WaterProfile,
    target: WaterProfile,
    *,
    mash_water_l: float,
    sparge_water_l: float,
) -> SaltSplit:
    """Gypsum to close the sulfate gap and calcium chloride to close the chloride gap."""
    total_water_l = max(0.0, mash_water_l) + max(0.0, sparge_water_l)
    if total_water_l <= 0:
        return SaltSplit(mash=SaltAdditions(), sparge=SaltAdditions())

    sulfate_gap = max(0.0, target.sulfate_ppm - source.sulfate_ppm)
    chloride_gap = max(0.0, target.chloride_ppm - source.chloride_ppm)
    totals = SaltAdditions(
        gypsum_g=sulfate_gap * total_water_l / _GYPSUM["sulfate_ppm"],
        cacl2_g=chloride_gap * total_water_l / _CALCIUM_CHLORIDE["chloride_ppm"],
    )
    return split_salts_proportionally(totals, mash_water_l=mash_water_l, sparge_water_l=sparge_water_l)


def build_water_report(
    water: WaterChemistrySettings,
    *,
    mash_water_l: float,
    sparge_water_l: float,
) -> WaterReport:
    total_water_l = max(0.0, mash_water_l) + max(0.0, sparge_water_l)
    projected = final_profile(water.source_profile, water.salt_additions, total_water_l)
    ratio = chloride_to_sulfate_ratio(projected)

    report = WaterReport(
        source_profile=water.source_profile,
        final_profile=projected,
        salts=water.salt_additions,
        split=split_salts_proportionally(
            water.salt_additions,
            mash_water_l=mash_water_l,
            sparge_water_l=sparge_water_l,
        ),
        total_water_l=total_water_l,
        chloride_sulfate_ratio=ratio,
        balance=describe_balance(ratio),
        source_profile_name=water.source_profile_name,
        target_profile_name=water.target_profile_name,
        target_profile=resolve_water_profile(water.target_profile_name),
    )
    logger.debug(
        json.dumps(
            {
                "event": "water_report_built",
                "total_water_l": round(total_water_l, 2),
                "salts_g": round(water.salt_additions.total_g, 2),
                "chloride_sulfate_ratio": None if ratio is None else round(ratio, 2),
            }
        )
    )
    return report
