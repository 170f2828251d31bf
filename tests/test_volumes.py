import pytest

from brewcalc.schemas.recipe import EquipmentSettings, Fermentable, Hop, Recipe
from brewcalc.services.volumes import calculate_volumes, kettle_hop_weight_kg, volumes_for_recipe


def test_default_equipment_volume_chain() -> None:
    volumes = calculate_volumes(batch_volume_l=20, equipment=EquipmentSettings(), grain_kg=5)

    assert volumes.into_fermenter_l == pytest.approx(20.5)
    assert volumes.post_boil_l == pytest.approx(22.88)
    assert volumes.boil_off_l == pytest.approx(4.0)
    assert volumes.pre_boil_l == pytest.approx(26.88)
    assert volumes.mash_water_l == pytest.approx(17.0)
    assert volumes.grain_absorption_l == pytest.approx(5.2)
    assert volumes.first_runnings_l == pytest.approx(9.8)
    assert volumes.sparge_water_l == pytest.approx(17.08)
    assert volumes.total_water_l == pytest.approx(34.08)


@pytest.mark.parametrize(
    ("equipment", "grain_kg"),
    [
        (EquipmentSettings(), 5.5),
        (EquipmentSettings(boil_time_min=90, boil_off_rate_l_per_hr=6.5, cooling_shrinkage_pct=0), 5.5),
        (EquipmentSettings(kettle_loss_l=0, chiller_loss_l=0, fermenter_loss_l=0, mash_tun_deadspace_l=0), 5.5),
        (EquipmentSettings(mash_thickness_l_per_kg=2.5, grain_absorption_l_per_kg=0.8, hop_absorption_l_per_kg=1.5), 5.5),
        (EquipmentSettings(mash_thickness_l_per_kg=5.0), 8),
        (EquipmentSettings(mash_thickness_l_per_kg=0.5), 10),
    ],
)
def test_first_runnings_plus_sparge_reach_pre_boil(equipment: EquipmentSettings, grain_kg: float) -> None:
    volumes = calculate_volumes(batch_volume_l=23, equipment=equipment, grain_kg=grain_kg, kettle_hops_kg=0.12)

    assert volumes.first_runnings_l + volumes.sparge_water_l == pytest.approx(volumes.pre_boil_l)
    assert volumes.mash_water_l + volumes.sparge_water_l == pytest.approx(volumes.total_water_l)


def test_only_kettle_hops_absorb_wort() -> None:
    hops = [
        Hop(name="Magnum", grams=60, usage="boil"),
        Hop(name="Citra", grams=40, usage="whirlpool"),
        Hop(name="Mosaic", grams=100, usage="dry hop"),
        Hop(name="Saaz", grams=10, usage="mash"),
    ]

    assert kettle_hop_weight_kg(hops) == pytest.approx(0.1)

    volumes = calculate_volumes(
        batch_volume_l=20,
        equipment=EquipmentSettings(),
        grain_kg=5,
        kettle_hops_kg=kettle_hop_weight_kg(hops),
    )
    assert volumes.hop_absorption_l == pytest.approx(0.07)


def test_negative_inputs_never_produce_negative_volumes() -> None:
    equipment = EquipmentSettings.model_construct(
        kettle_loss_l=-10.0,
        chiller_loss_l=-3.0,
        boil_off_rate_l_per_hr=-4.0,
        mash_thickness_l_per_kg=-1.0,
    )

    volumes = calculate_volumes(batch_volume_l=-5, equipment=equipment, grain_kg=-2, kettle_hops_kg=-1)

    for value in (
        volumes.into_fermenter_l,
        volumes.post_boil_l,
        volumes.pre_boil_l,
        volumes.mash_water_l,
        volumes.first_runnings_l,
        volumes.sparge_water_l,
        volumes.total_water_l,
    ):
        assert value >= 0


def test_absorption_above_thickness_clamps_first_runnings() -> None:
    equipment = EquipmentSettings(mash_thickness_l_per_kg=0.5, grain_absorption_l_per_kg=1.04)

    volumes = calculate_volumes(batch_volume_l=20, equipment=equipment, grain_kg=10)

    assert volumes.first_runnings_l == 0.0
    assert volumes.sparge_water_l == pytest.approx(volumes.pre_boil_l)


def test_volumes_for_recipe_uses_grain_and_kettle_hops() -> None:
    recipe = Recipe(
        fermentables=[Fermentable(name="Pale Malt", weight_kg=4), Fermentable(name="Munich", weight_kg=1)],
        hops=[Hop(name="Cascade", grams=100, usage="boil")],
    )

    volumes = volumes_for_recipe(recipe)

    assert volumes.grain_kg == pytest.approx(5.0)
    assert volumes.hop_absorption_l == pytest.approx(0.07)


def test_thick_mash_collects_only_pre_boil_volume() -> None:
    equipment = EquipmentSettings(mash_thickness_l_per_kg=5.0)

    volumes = calculate_volumes(batch_volume_l=20, equipment=equipment, grain_kg=8)

    assert volumes.mash_water_l == pytest.approx(42.0)
    assert volumes.pre_boil_l == pytest.approx(26.88)
    assert volumes.first_runnings_l == pytest.approx(26.88)
    assert volumes.excess_runnings_l == pytest.approx(4.8)
    assert volumes.sparge_water_l == 0.0
    assert volumes.total_water_l == pytest.approx(42.0)


def test_default_mash_leaves_no_excess_runnings() -> None:
    volumes = calculate_volumes(batch_volume_l=20, equipment=EquipmentSettings(), grain_kg=5)

    assert volumes.excess_runnings_l == 0.0
