import pytest

from brewcalc.services.bjcp_styles import (
    bu_gu_ratio,
    compare_to_style,
    list_bjcp_styles,
    resolve_bjcp_style,
    srm_range_from_ebc,
)


def test_resolve_bjcp_style_by_code_and_name() -> None:
    by_code = resolve_bjcp_style("21a")
    by_name = resolve_bjcp_style(" American IPA ")

    assert by_code is not None
    assert by_code is by_name
    assert by_code.category == "IPA"


@pytest.mark.parametrize("identifier", [None, "", "   ", "99Z", "Imaginary Ale"])
def test_resolve_bjcp_style_unknown(identifier: str | None) -> None:
    assert resolve_bjcp_style(identifier) is None


def test_list_bjcp_styles_search() -> None:
    codes = [style.code for style in list_bjcp_styles("ipa")]

    assert codes == ["12C", "21A", "21C", "22A"]
    assert len(list_bjcp_styles()) == len(list_bjcp_styles(""))


def test_style_ebc_range() -> None:
    style = resolve_bjcp_style("18B")
    assert style is not None

    ebc = style.ebc
    assert ebc is not None
    assert ebc.low == pytest.approx(9.85)
    assert ebc.high == pytest.approx(19.7)
    round_trip = srm_range_from_ebc(ebc.low, ebc.high)
    assert round_trip.low == pytest.approx(5)
    assert round_trip.high == pytest.approx(10)


def test_srm_range_from_ebc() -> None:
    stat_range = srm_range_from_ebc(19.7, 39.4)

    assert stat_range.low == pytest.approx(10)
    assert stat_range.high == pytest.approx(20)
    assert stat_range.midpoint == pytest.approx(15)


def test_compare_to_style() -> None:
    comparison = compare_to_style("18B", og=1.050, fg=1.012, abv=5.0, ibu=19.1)
    assert comparison is not None

    assert comparison.metric("og").status == "in_range"
    assert comparison.metric("ibu").status == "below"
    assert comparison.metric("srm").status == "no_data"
    assert comparison.metric("color") is None
    assert comparison.in_style is False


def test_compare_to_style_all_in_range() -> None:
    comparison = compare_to_style("18B", og=1.052, fg=1.012, abv=5.2, ibu=38, srm=7)

    assert comparison is not None
    assert comparison.in_style is True


def test_compare_to_unknown_style() -> None:
    assert compare_to_style("99Z", og=1.050) is None
    assert compare_to_style(None, og=1.050) is None


def test_bu_gu_ratio() -> None:
    assert bu_gu_ratio(50, 1.050) == 1.0
    assert bu_gu_ratio(20, 1.0) is None
