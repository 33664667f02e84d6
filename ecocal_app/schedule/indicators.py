"""
Tracked macro indicators and their release heuristics.

The set is compiled in and never mutated. Definition order is also the
secondary sort order of projected events that share a date.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

PROVIDER_SERIES_URL = "https://fred.stlouisfed.org/series/{series_id}"


class ReleaseRule(str, Enum):
    """Calendar heuristic used to approximate an indicator's release day."""
    FIRST_BUSINESS_DAY = "first_business_day"
    FIRST_FRIDAY_OF_MONTH = "first_friday_of_month"
    MID_MONTH_BUSINESS_DAY = "mid_month_business_day"
    END_OF_MONTH_BUSINESS_DAY = "end_of_month_business_day"
    FOMC_MEETING_DATE = "fomc_meeting_date"


@dataclass(frozen=True)
class IndicatorDefinition:
    """Static description of one tracked time series."""
    id: str
    label: str
    display_unit: str
    higher_is_better: Optional[bool]
    release_rule: ReleaseRule

    @property
    def source_url(self) -> str:
        return PROVIDER_SERIES_URL.format(series_id=self.id)


INDICATORS: tuple[IndicatorDefinition, ...] = (
    IndicatorDefinition("CPIAUCSL", "CPI", "%", False, ReleaseRule.MID_MONTH_BUSINESS_DAY),
    IndicatorDefinition("CPILFESL", "Core CPI", "%", False, ReleaseRule.MID_MONTH_BUSINESS_DAY),
    IndicatorDefinition("PPIACO", "PPI", "%", False, ReleaseRule.MID_MONTH_BUSINESS_DAY),
    IndicatorDefinition("PCEPI", "PCE", "%", False, ReleaseRule.END_OF_MONTH_BUSINESS_DAY),
    IndicatorDefinition("PCEPILFE", "Core PCE", "%", False, ReleaseRule.END_OF_MONTH_BUSINESS_DAY),
    IndicatorDefinition("PAYEMS", "Non-Farm Payrolls", "K", True, ReleaseRule.FIRST_FRIDAY_OF_MONTH),
    IndicatorDefinition("UNRATE", "Unemployment Rate", "%", False, ReleaseRule.FIRST_FRIDAY_OF_MONTH),
    IndicatorDefinition("GDP", "GDP", "%", True, ReleaseRule.END_OF_MONTH_BUSINESS_DAY),
    IndicatorDefinition("RSAFS", "Retail Sales", "%", True, ReleaseRule.MID_MONTH_BUSINESS_DAY),
    IndicatorDefinition("MANEMP", "ISM Manufacturing", "", True, ReleaseRule.FIRST_BUSINESS_DAY),
    IndicatorDefinition("UMCSENT", "Consumer Confidence", "", True, ReleaseRule.MID_MONTH_BUSINESS_DAY),
    IndicatorDefinition("FEDFUNDS", "Federal Funds Rate", "%", None, ReleaseRule.FOMC_MEETING_DATE),
)

INDICATOR_IDS: tuple[str, ...] = tuple(ind.id for ind in INDICATORS)

_BY_ID = {ind.id: ind for ind in INDICATORS}
_ORDER = {ind.id: position for position, ind in enumerate(INDICATORS)}


def get_indicator(indicator_id: str) -> Optional[IndicatorDefinition]:
    """Look up an indicator definition by id."""
    return _BY_ID.get(indicator_id)


def indicator_order(indicator_id: str) -> int:
    """Position of an indicator in definition order; unknown ids sort last."""
    return _ORDER.get(indicator_id, len(_ORDER))
