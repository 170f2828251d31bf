from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from brewcalc.schemas.water import SaltAdditions, WaterProfile

HopUsage = Literal["boil", "whirlpool", "dry hop", "first wort", "mash"]
MashStepType = Literal["infusion", "temperature", "decoction"]
FermentationStepType = Literal["primary", "secondary", "conditioning", "cold-crash", "diacetyl-rest"]


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EquipmentSettings(BaseModel):
    boil_time_min: float = Field(default=60.0, ge=0)
    boil_off_rate_l_per_hr: float = Field(default=4.0, ge=0)
    mash_efficiency_pct: float = Field(default=75.0, ge=0, le=100)
    mash_thickness_l_per_kg: float = Field(default=3.0, ge=0)
    grain_absorption_l_per_kg: float = Field(default=1.04, ge=0)
    mash_tun_deadspace_l: float = Field(default=2.0, ge=0)
    kettle_loss_l: float = Field(default=1.0, ge=0)
    hop_absorption_l_per_kg: float = Field(default=0.7, ge=0)
    chiller_loss_l: float = Field(default=0.5, ge=0)
    fermenter_loss_l: float = Field(default=0.5, ge=0)
    cooling_shrinkage_pct: float = Field(default=4.0, ge=0)


class Fermentable(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(default="", max_length=140)
    weight_kg: float = Field(default=0.0, ge=0)
    color_lovibond: float = Field(default=0.0, ge=0)
    ppg: float = Field(default=0.0, ge=0)
    efficiency_pct: float | None = Field(default=None, ge=0, le=100)
    fermentability: float | None = Field(default=None, ge=0, le=1)
    origin_code: str | None = None


class HopFlavor(BaseModel):
    citrus: float = Field(default=0.0, ge=0, le=5)
    tropical: float = Field(default=0.0, ge=0, le=5)
    stone_fruit: float = Field(default=0.0, ge=0, le=5)
    berry: float = Field(default=0.0, ge=0, le=5)
    floral: float = Field(default=0.0, ge=0, le=5)
    grassy: float = Field(default=0.0, ge=0, le=5)
    herbal: float = Field(default=0.0, ge=0, le=5)
    spice: float = Field(default=0.0, ge=0, le=5)
    resin_pine: float = Field(default=0.0, ge=0, le=5)


class Hop(BaseModel):
    """One hop addition.

    Only the timing fields matching ``usage`` are read by the bitterness
    calculation; the others are kept as entered.
    """

    id: str = Field(default_factory=_new_id)
    name: str = Field(default="", max_length=140)
    alpha_acid_pct: float = Field(default=0.0, ge=0, le=100)
    grams: float = Field(default=0.0, ge=0)
    usage: HopUsage = "boil"
    boil_minutes: float | None = Field(default=None, ge=0)
    whirlpool_temp_c: float | None = Field(default=None, ge=0)
    whirlpool_minutes: float | None = Field(default=None, ge=0)
    dry_hop_start_day: float | None = Field(default=None, ge=0)
    dry_hop_days: float | None = Field(default=None, ge=0)
    flavor: HopFlavor | None = None


class Yeast(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(default="", max_length=140)
    laboratory: str | None = None
    attenuation_pct: float | None = Field(default=None, ge=0, le=100)


class MashStep(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    step_type: MashStepType = "infusion"
    temperature_c: float = 66.0
    duration_minutes: float = 60.0
    infusion_volume_l: float | None = None
    infusion_temp_c: float | None = None
    decoction_volume_l: float | None = None


class FermentationStep(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    step_type: FermentationStepType = "primary"
    duration_days: float = Field(default=14.0, ge=0)
    temperature_c: float = 20.0
    notes: str = ""


class OtherIngredient(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = ""
    category: str = "other"
    amount: float = Field(default=0.0, ge=0)
    unit: str = "g"
    timing: str = "boil"
    notes: str = ""


class WaterChemistrySettings(BaseModel):
    source_profile: WaterProfile = Field(default_factory=WaterProfile)
    salt_additions: SaltAdditions = Field(default_factory=SaltAdditions)
    source_profile_name: str | None = None
    target_profile_name: str | None = None


class Recipe(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = "New Recipe"
    style_code: str | None = None
    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    current_version: int = Field(default=1, ge=1)
    parent_recipe_id: str | None = None
    parent_version_number: int | None = None

    batch_volume_l: float = Field(default=20.0, ge=0)
    equipment: EquipmentSettings = Field(default_factory=EquipmentSettings)
    fermentables: list[Fermentable] = Field(default_factory=list)
    hops: list[Hop] = Field(default_factory=list)
    yeasts: list[Yeast] = Field(default_factory=list)
    mash_steps: list[MashStep] = Field(default_factory=list)
    fermentation_steps: list[FermentationStep] = Field(default_factory=list)
    water_chemistry: WaterChemistrySettings | None = None
    other_ingredients: list[OtherIngredient] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(validate_assignment=True)


class RecipeVersion(BaseModel):
    id: str = Field(default_factory=_new_id)
    recipe_id: str
    version_number: int = Field(ge=1)
    created_at: datetime = Field(default_factory=_utcnow)
    change_notes: str | None = None
    recipe_snapshot: Recipe

    model_config = ConfigDict(frozen=True)
