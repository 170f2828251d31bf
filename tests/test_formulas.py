import pytest

from brewcalc.core.config import settings
from brewcalc.services.formulas import (
    abv,
    ebc_to_srm,
    gravity_points,
    hop_utilization,
    ibu_from_utilization,
    nutrition_per_serving,
    og_from_total_points,
    rager_utilization,
    sg_from_points,
    srm_morey,
    srm_to_ebc,
    srm_to_hex,
    tinseth_utilization,
)
from brewcalc.services.units import c_to_f, f_to_c, gal_to_l, kg_to_lb, l_to_gal, lb_to_kg


def test_unit_conversions() -> None:
    assert kg_to_lb(1.0) == pytest.approx(2.20462)
    assert l_to_gal(20.0) == pytest.approx(5.28344)
    assert lb_to_kg(kg_to_lb(3.2)) == pytest.approx(3.2)
    assert gal_to_l(l_to_gal(19.0)) == pytest.approx(19.0)
    assert c_to_f(100.0) == pytest.approx(212.0)
    assert f_to_c(32.0) == pytest.approx(0.0)


def test_gravity_points_and_inverse() -> None:
    assert gravity_points(1.050) == pytest.approx(50.0)
    assert sg_from_points(50.0) == pytest.approx(1.050)
    assert og_from_total_points(305.89, 6.04426) == pytest.approx(1.0506, abs=1e-4)


def test_og_from_points_guards_empty_inputs() -> None:
    assert og_from_total_points(0.0, 5.0) == 1.0
    assert og_from_total_points(120.0, 0.0) == 1.0


def test_tinseth_utilization_reference_value() -> None:
    assert tinseth_utilization(60, 1.050) == pytest.approx(0.2307, abs=1e-3)


def test_tinseth_utilization_is_zero_without_boil_time() -> None:
    assert tinseth_utilization(0, 1.050) == 0.0
    assert tinseth_utilization(-10, 1.050) == 0.0


def test_tinseth_utilization_rises_with_time_and_falls_with_gravity() -> None:
    values = [tinseth_utilization(minutes, 1.050) for minutes in range(0, 121, 5)]
    assert values == sorted(values)
    assert values[-1] < 0.3
    assert tinseth_utilization(60, 1.080) < tinseth_utilization(60, 1.050)


def test_rager_utilization_reference_value() -> None:
    assert rager_utilization(60, 1.050) == pytest.approx(0.3082, abs=1e-3)
    assert rager_utilization(60, 1.090) < rager_utilization(60, 1.050)


def test_hop_utilization_follows_configured_formula(monkeypatch: pytest.MonkeyPatch) -> None:
    assert hop_utilization(60, 1.050) == tinseth_utilization(60, 1.050)

    monkeypatch.setattr(settings, "ibu_formula", "rager")
    assert hop_utilization(60, 1.050) == rager_utilization(60, 1.050)


def test_ibu_from_utilization_guards_zero_volume() -> None:
    assert ibu_from_utilization(grams=30, alpha_acid_pct=5.5, utilization=0.23, volume_l=0) == 0.0
    assert ibu_from_utilization(grams=30, alpha_acid_pct=5.5, utilization=0.23, volume_l=20) > 0


def test_srm_morey_and_colour_helpers() -> None:
    assert srm_morey(0) == 0.0
    assert srm_morey(10) == pytest.approx(7.24, abs=0.02)
    assert srm_to_ebc(10) == pytest.approx(19.7)
    assert ebc_to_srm(19.7) == pytest.approx(10.0)
    assert srm_to_hex(0) == "#ffffff"
    assert srm_to_hex(40).startswith("#")
    assert len(srm_to_hex(40)) == 7


def test_abv_formula() -> None:
    assert abv(1.050, 1.010) == pytest.approx(5.25)
    assert abv(1.010, 1.050) == 0.0


def test_nutrition_per_serving() -> None:
    nutrition = nutrition_per_serving(1.050, 1.010)

    assert 160 <= nutrition.calories <= 168
    assert nutrition.carbs_g == pytest.approx(15.2, abs=0.3)


def test_nutrition_never_negative_for_water() -> None:
    nutrition = nutrition_per_serving(1.0, 1.0)

    assert nutrition.calories == 0
    assert nutrition.carbs_g == 0.0
