import pytest
from pydantic import ValidationError

from brewcalc.core.config import Settings


def test_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.ibu_formula == "tinseth"
    assert config.default_attenuation_pct == 75.0
    assert config.mash_hop_utilization_factor == 0.20


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BREWCALC_IBU_FORMULA", "rager")
    monkeypatch.setenv("BREWCALC_WHIRLPOOL_DEFAULT_TEMP_C", "85")

    config = Settings(_env_file=None)

    assert config.ibu_formula == "rager"
    assert config.whirlpool_default_temp_c == 85


def test_unknown_ibu_formula_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BREWCALC_IBU_FORMULA", "garetz")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
