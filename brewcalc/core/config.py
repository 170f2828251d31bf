from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ibu_formula: Literal["tinseth", "rager"] = "tinseth"
    first_wort_bonus_minutes: float = 20.0

    whirlpool_default_minutes: float = 15.0
    whirlpool_default_temp_c: float = 80.0
    whirlpool_min_temp_c: float = 60.0
    whirlpool_temp_span_c: float = 40.0
    whirlpool_temp_exponent: float = 1.8

    mash_hop_utilization_factor: float = 0.20
    mash_hop_default_minutes: float = 5.0

    default_attenuation_pct: float = 75.0
    default_grain_temp_c: float = 20.0
    serving_volume_l: float = 0.355

    model_config = SettingsConfigDict(env_prefix="BREWCALC_", env_file=".env", env_file_encoding="utf-8")


settings = Settings()
