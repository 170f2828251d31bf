from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from brewcalc.services.formulas import ebc_to_srm, srm_to_ebc

RangeStatus = Literal["below", "in_range", "above", "no_data"]

_METRICS: tuple[str, ...] = ("og", "fg", "abv", "ibu", "srm")


@dataclass(frozen=True)
class StatRange:
    low: float
    high: float

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2.0

    def status(self, value: float | None) -> RangeStatus:
        if value is None:
            return "no_data"
        if value < self.low:
            return "below"
        if value > self.high:
            return "above"
        return "in_range"


@dataclass(frozen=True)
class BJCPStyle:
    code: str
    name: str
    category: str
    abv: StatRange | None
    og: StatRange | None
    fg: StatRange | None
    ibu: StatRange | None
    srm: StatRange | None

    @property
    def ebc(self) -> StatRange | None:
        if self.srm is None:
            return None
        return StatRange(srm_to_ebc(self.srm.low), srm_to_ebc(self.srm.high))

    @property
    def has_ranges(self) -> bool:
        return any(getattr(self, metric) is not None for metric in _METRICS)


@dataclass(frozen=True)
class MetricComparison:
    metric: str
    value: float | None
    range: StatRange | None
    status: RangeStatus


@dataclass(frozen=True)
class StyleComparison:
    style: BJCPStyle
    metrics: tuple[MetricComparison, ...]

    @property
    def in_style(self) -> bool:
        return all(metric.status in ("in_range", "no_data") for metric in self.metrics)

    def metric(self, name: str) -> MetricComparison | None:
        return next((metric for metric in self.metrics if metric.metric == name), None)


def _style(
    code: str,
    name: str,
    category: str,
    *,
    abv: tuple[float, float],
    og: tuple[float, float],
    fg: tuple[float, float],
    ibu: tuple[float, float],
    srm: tuple[float, float],
) -> BJCPStyle:
    return BJCPStyle(
        code=code,
        name=name,
        category=category,
        abv=StatRange(*abv),
        og=StatRange(*og),
        fg=StatRange(*fg),
        ibu=StatRange(*ibu),
        srm=StatRange(*srm),
    )


_BJCP_STYLES: tuple[BJCPStyle, ...] = (
    _style("1A", "American Light Lager", "Standard American Beer",
           abv=(2.8, 4.2), og=(1.028, 1.040), fg=(0.998, 1.008), ibu=(8, 12), srm=(2, 3)),
    _style("1B", "American Lager", "Standard American Beer",
           abv=(4.2, 5.3), og=(1.040, 1.050), fg=(1.004, 1.010), ibu=(8, 18), srm=(2, 3.5)),
    _style("1C", "Cream Ale", "Standard American Beer",
           abv=(4.2, 5.6), og=(1.042, 1.055), fg=(1.006, 1.012), ibu=(8, 20), srm=(2, 5)),
    _style("1D", "American Wheat Beer", "Standard American Beer",
           abv=(4.0, 5.5), og=(1.040, 1.055), fg=(1.008, 1.013), ibu=(15, 30), srm=(3, 6)),
    _style("3B", "Czech Premium Pale Lager", "Czech Lager",
           abv=(4.2, 5.8), og=(1.044, 1.060), fg=(1.013, 1.017), ibu=(30, 45), srm=(3.5, 6)),
    _style("4A", "Munich Helles", "Pale Malty European Lager",
           abv=(4.7, 5.4), og=(1.044, 1.048), fg=(1.006, 1.012), ibu=(16, 22), srm=(3, 5)),
    _style("5B", "Kölsch", "Pale Bitter European Beer",
           abv=(4.4, 5.2), og=(1.044, 1.050), fg=(1.007, 1.011), ibu=(18, 30), srm=(3.5, 5)),
    _style("5D", "German Pils", "Pale Bitter European Beer",
           abv=(4.4, 5.2), og=(1.044, 1.050), fg=(1.008, 1.013), ibu=(22, 40), srm=(2, 4)),
    _style("6A", "Märzen", "Amber Malty European Lager",
           abv=(5.6, 6.3), og=(1.054, 1.060), fg=(1.010, 1.014), ibu=(18, 24), srm=(8, 17)),
    _style("7A", "Vienna Lager", "Amber Bitter European Beer",
           abv=(4.7, 5.5), og=(1.048, 1.055), fg=(1.010, 1.014), ibu=(18, 30), srm=(9, 15)),
    _style("8A", "Munich Dunkel", "Dark European Lager",
           abv=(4.5, 5.6), og=(1.048, 1.056), fg=(1.010, 1.016), ibu=(18, 28), srm=(17, 28)),
    _style("9A", "Doppelbock", "Strong European Beer",
           abv=(7.0, 10.0), og=(1.072, 1.112), fg=(1.016, 1.024), ibu=(16, 26), srm=(6, 25)),
    _style("10A", "Weissbier", "German Wheat Beer",
           abv=(4.3, 5.6), og=(1.044, 1.053), fg=(1.008, 1.014), ibu=(8, 15), srm=(2, 6)),
    _style("11B", "Best Bitter", "British Bitter",
           abv=(3.8, 4.6), og=(1.040, 1.048), fg=(1.008, 1.012), ibu=(25, 40), srm=(8, 16)),
    _style("12C", "English IPA", "Pale Commonwealth Beer",
           abv=(5.0, 7.5), og=(1.050, 1.070), fg=(1.010, 1.015), ibu=(40, 60), srm=(6, 14)),
    _style("13B", "British Brown Ale", "Brown British Beer",
           abv=(4.2, 5.9), og=(1.040, 1.052), fg=(1.008, 1.013), ibu=(20, 30), srm=(12, 22)),
    _style("13C", "English Porter", "Brown British Beer",
           abv=(4.0, 5.4), og=(1.040, 1.052), fg=(1.008, 1.014), ibu=(18, 35), srm=(20, 30)),
    _style("15A", "Irish Red Ale", "Irish Beer",
           abv=(3.8, 5.0), og=(1.036, 1.046), fg=(1.010, 1.014), ibu=(18, 28), srm=(9, 14)),
    _style("15B", "Irish Stout", "Irish Beer",
           abv=(3.8, 5.0), og=(1.036, 1.044), fg=(1.007, 1.011), ibu=(25, 45), srm=(25, 40)),
    _style("16A", "Sweet Stout", "Dark British Beer",
           abv=(4.0, 6.0), og=(1.044, 1.060), fg=(1.012, 1.024), ibu=(20, 40), srm=(30, 40)),
    _style("18A", "Blonde Ale", "Pale American Ale",
           abv=(3.8, 5.5), og=(1.038, 1.054), fg=(1.008, 1.013), ibu=(15, 28), srm=(3, 6)),
    _style("18B", "American Pale Ale", "Pale American Ale",
           abv=(4.5, 6.2), og=(1.045, 1.060), fg=(1.010, 1.015), ibu=(30, 50), srm=(5, 10)),
    _style("19A", "American Amber Ale", "Amber and Brown American Beer",
           abv=(4.5, 6.2), og=(1.045, 1.060), fg=(1.010, 1.015), ibu=(25, 40), srm=(10, 17)),
    _style("20A", "American Porter", "American Porter and Stout",
           abv=(4.8, 6.5), og=(1.050, 1.070), fg=(1.012, 1.018), ibu=(25, 50), srm=(22, 40)),
    _style("20B", "American Stout", "American Porter and Stout",
           abv=(5.0, 7.0), og=(1.050, 1.075), fg=(1.010, 1.022), ibu=(35, 75), srm=(30, 40)),
    _style("21A", "American IPA", "IPA",
           abv=(5.5, 7.5), og=(1.056, 1.070), fg=(1.008, 1.014), ibu=(40, 70), srm=(6, 14)),
    _style("21C", "Hazy IPA", "IPA",
           abv=(6.0, 9.0), og=(1.060, 1.085), fg=(1.010, 1.015), ibu=(25, 60), srm=(3, 7)),
    _style("22A", "Double IPA", "Strong American Ale",
           abv=(7.5, 10.0), og=(1.065, 1.085), fg=(1.008, 1.018), ibu=(60, 100), srm=(6, 14)),
    _style("24A", "Witbier", "Belgian Ale",
           abv=(4.5, 5.5), og=(1.044, 1.052), fg=(1.008, 1.012), ibu=(8, 20), srm=(2, 4)),
    _style("25B", "Saison", "Strong Belgian Ale",
           abv=(5.0, 7.0), og=(1.048, 1.065), fg=(1.002, 1.008), ibu=(20, 35), srm=(5, 14)),
    _style("26C", "Belgian Tripel", "Monastic Ale",
           abv=(7.5, 9.5), og=(1.075, 1.085), fg=(1.008, 1.014), ibu=(20, 40), srm=(4.5, 7)),
    _style("26D", "Belgian Dark Strong Ale", "Monastic Ale",
           abv=(8.0, 12.0), og=(1.075, 1.110), fg=(1.010, 1.024), ibu=(20, 35), srm=(12, 22)),
)

_BY_CODE = {style.code.upper(): style for style in _BJCP_STYLES}
_BY_NAME = {style.name.lower(): style for style in _BJCP_STYLES}


def list_bjcp_styles(search: str | None = None) -> list[BJCPStyle]:
    if not search:
        return sorted(_BJCP_STYLES, key=lambda style: style.code)

    query = search.strip().lower()
    return [
        style
        for style in sorted(_BJCP_STYLES, key=lambda row: row.code)
        if query in style.code.lower() or query in style.name.lower() or query in style.category.lower()
    ]


def resolve_bjcp_style(identifier: str | None) -> BJCPStyle | None:
    if not identifier:
        return None
    token = identifier.strip()
    if not token:
        return None

    direct = _BY_CODE.get(token.upper())
    if direct:
        return direct

    return _BY_NAME.get(token.lower())


def srm_range_from_ebc(low_ebc: float, high_ebc: float) -> StatRange:
    return StatRange(ebc_to_srm(low_ebc), ebc_to_srm(high_ebc))


def bu_gu_ratio(ibu: float, og: float) -> float | None:
    points = (og - 1.0) * 1000.0
    if points <= 0:
        return None
    return round(ibu / points, 2)


def compare_to_style(
    style_code: str | None,
    *,
    og: float | None = None,
    fg: float | None = None,
    abv: float | None = None,
    ibu: float | None = None,
    srm: float | None = None,
) -> StyleComparison | None:
    """Place each calculated value against the style's range.

    Unknown codes and styles without ranges give None; a missing value or a
    missing range for one metric is reported as ``no_data``.
    """
    style = resolve_bjcp_style(style_code)
    if style is None or not style.has_ranges:
        return None

    values = {"og": og, "fg": fg, "abv": abv, "ibu": ibu, "srm": srm}
    metrics = []
    for metric in _METRICS:
        stat_range: StatRange | None = getattr(style, metric)
        value = values[metric]
        metrics.append(
            MetricComparison(
                metric=metric,
                value=value,
                range=stat_range,
                status=stat_range.status(value) if stat_range is not None else "no_data",
            )
        )
    return StyleComparison(style=style, metrics=tuple(metrics))
