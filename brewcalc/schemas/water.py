from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ION_FIELDS: tuple[str, ...] = (
    "calcium_ppm",
    "magnesium_ppm",
    "sodium_ppm",
    "chloride_ppm",
    "sulfate_ppm",
    "bicarbonate_ppm",
)

SALT_FIELDS: tuple[str, ...] = ("gypsum_g", "cacl2_g", "epsom_g", "nacl_g", "nahco3_g")


class WaterProfile(BaseModel):
    calcium_ppm: float = Field(default=0.0, ge=0)
    magnesium_ppm: float = Field(default=0.0, ge=0)
    sodium_ppm: float = Field(default=0.0, ge=0)
    chloride_ppm: float = Field(default=0.0, ge=0)
    sulfate_ppm: float = Field(default=0.0, ge=0)
    bicarbonate_ppm: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(frozen=True)


class SaltAdditions(BaseModel):
    """Salt grams keyed by salt. Whole-batch totals unless stated otherwise."""

    gypsum_g: float = Field(default=0.0, ge=0)
    cacl2_g: float = Field(default=0.0, ge=0)
    epsom_g: float = Field(default=0.0, ge=0)
    nacl_g: float = Field(default=0.0, ge=0)
    nahco3_g: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def total_g(self) -> float:
        return sum(getattr(self, field) for field in SALT_FIELDS)
