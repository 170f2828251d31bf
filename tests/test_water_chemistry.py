import pytest

from brewcalc.schemas.recipe import WaterChemistrySettings
from brewcalc.schemas.water import SaltAdditions, WaterProfile
from brewcalc.services.water_chemistry import (
    COMMON_WATER_PROFILES,
    blend_profiles,
    build_water_report,
    chloride_to_sulfate_ratio,
    describe_balance,
    final_profile,
    ion_delta_from_salts,
    resolve_water_profile,
    scale_profile,
    salts_for_target,
    split_salts_proportionally,
)


def test_final_profile_with_zero_volume_returns_source() -> None:
    source = COMMON_WATER_PROFILES["Dublin"]

    assert final_profile(source, SaltAdditions(gypsum_g=5), 0) is source
    assert final_profile(source, SaltAdditions(gypsum_g=5), -3) is source


def test_gypsum_adds_calcium_and_sulfate() -> None:
    delta = ion_delta_from_salts(SaltAdditions(gypsum_g=5), 25)

    assert delta.calcium_ppm == pytest.approx(46.56)
    assert delta.sulfate_ppm == pytest.approx(111.66)
    assert delta.chloride_ppm == 0


def test_final_profile_adds_every_salt_to_source() -> None:
    source = WaterProfile(calcium_ppm=10, sodium_ppm=5, bicarbonate_ppm=30)
    salts = SaltAdditions(cacl2_g=2, epsom_g=1, nacl_g=1, nahco3_g=1)

    profile = final_profile(source, salts, 20)

    assert profile.calcium_ppm == pytest.approx(10 + 0.1 * 272.6)
    assert profile.magnesium_ppm == pytest.approx(0.05 * 98.6)
    assert profile.sodium_ppm == pytest.approx(5 + 0.05 * 393.4 + 0.05 * 273.7)
    assert profile.chloride_ppm == pytest.approx(0.1 * 482 + 0.05 * 606.6)
    assert profile.sulfate_ppm == pytest.approx(0.05 * 389.6)
    assert profile.bicarbonate_ppm == pytest.approx(30 + 0.05 * 726.3)


def test_salts_split_in_proportion_to_water() -> None:
    split = split_salts_proportionally(SaltAdditions(gypsum_g=10, cacl2_g=4), mash_water_l=15, sparge_water_l=5)

    assert split.mash.gypsum_g == pytest.approx(7.5)
    assert split.sparge.gypsum_g == pytest.approx(2.5)
    assert split.mash.cacl2_g == pytest.approx(3.0)
    assert split.sparge.cacl2_g == pytest.approx(1.0)


def test_salt_split_without_water_is_empty() -> None:
    split = split_salts_proportionally(SaltAdditions(gypsum_g=10), mash_water_l=0, sparge_water_l=0)

    assert split.mash.total_g == 0
    assert split.sparge.total_g == 0


def test_chloride_to_sulfate_ratio() -> None:
    assert chloride_to_sulfate_ratio(WaterProfile(chloride_ppm=100)) is None
    assert chloride_to_sulfate_ratio(WaterProfile(chloride_ppm=100, sulfate_ppm=50)) == pytest.approx(2.0)
    assert describe_balance(None) == "no data"
    assert describe_balance(0.3) == "very hoppy"
    assert describe_balance(1.0) == "balanced"
    assert describe_balance(2.0) == "very malty"


def test_salts_for_target_close_sulfate_and_chloride_gaps() -> None:
    target = resolve_water_profile("American IPA")
    assert target is not None

    split = salts_for_target(COMMON_WATER_PROFILES["RO"], target, mash_water_l=15, sparge_water_l=5)

    gypsum_total = 200 * 20 / 558.3
    cacl2_total = 75 * 20 / 482
    assert split.mash.gypsum_g == pytest.approx(gypsum_total * 0.75)
    assert split.sparge.gypsum_g == pytest.approx(gypsum_total * 0.25)
    assert split.mash.cacl2_g + split.sparge.cacl2_g == pytest.approx(cacl2_total)
    assert split.mash.epsom_g == 0


def test_resolve_water_profile() -> None:
    assert resolve_water_profile("burton") == COMMON_WATER_PROFILES["Burton"]
    assert resolve_water_profile("Atlantis") is None
    assert resolve_water_profile(None) is None


def test_build_water_report() -> None:
    water = WaterChemistrySettings(
        source_profile=COMMON_WATER_PROFILES["Pilsen"],
        salt_additions=SaltAdditions(gypsum_g=4, cacl2_g=3),
        source_profile_name="Pilsen",
        target_profile_name="American Pale Ale",
    )

    report = build_water_report(water, mash_water_l=17, sparge_water_l=17.08)

    assert report.total_water_l == pytest.approx(34.08)
    assert report.final_profile == final_profile(water.source_profile, water.salt_additions, report.total_water_l)
    assert report.split.mash.gypsum_g + report.split.sparge.gypsum_g == pytest.approx(4)
    assert report.chloride_sulfate_ratio == pytest.approx(
        report.final_profile.chloride_ppm / report.final_profile.sulfate_ppm
    )
    assert report.target_profile == resolve_water_profile("American Pale Ale")


def test_scale_profile() -> None:
    scaled = scale_profile(WaterProfile(calcium_ppm=40, sulfate_ppm=100), 0.5)

    assert scaled["calcium_ppm"] == 20
    assert scaled["sulfate_ppm"] == 50
    assert scaled["chloride_ppm"] == 0


def test_blend_profiles_cuts_hard_water_with_ro() -> None:
    burton = COMMON_WATER_PROFILES["Burton"]
    ro = COMMON_WATER_PROFILES["RO"]

    half = blend_profiles(burton, ro, fraction_b=0.5)

    assert half.sulfate_ppm == pytest.approx(burton.sulfate_ppm / 2)
    assert half.calcium_ppm == pytest.approx(burton.calcium_ppm / 2)
    assert blend_profiles(burton, ro, fraction_b=0) == burton
    assert blend_profiles(burton, ro, fraction_b=2) == ro
