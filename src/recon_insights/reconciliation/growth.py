"""Monthly sales/settlement growth series."""

import logging
import re
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .amounts import parse_amount
from .models import GrowthPoint, GrowthSeries, MonthlyGrowth

logger = logging.getLogger(__name__)

VENDOR_PALETTE: Tuple[str, ...] = (
    "#6c63ff",
    "#3bb36a",
    "#00bcd4",
    "#ffb300",
    "#ff7043",
    "#ef5350",
    "#8e24aa",
    "#26a69a",
)

_WHITESPACE = re.compile(r"\s+")


def vendor_key(name: Any) -> str:
    """Column key for a vendor: whitespace replaced so it is field-name safe."""
    key = _WHITESPACE.sub("_", str(name).strip())
    return key or "vendor"


@lru_cache(maxsize=128)
def _palette_for(vendor_keys: Tuple[str, ...]) -> Tuple[Tuple[str, str], ...]:
    return tuple(
        (key, VENDOR_PALETTE[index % len(VENDOR_PALETTE)])
        for index, key in enumerate(vendor_keys)
    )


def assign_vendor_colors(vendor_keys: Sequence[str]) -> Dict[str, str]:
    """Assign palette colours by first-seen position.

    The assignment is memoized on the ordered vendor set only, so repeated
    or concurrent calls with the same vendors always agree.
    """
    return dict(_palette_for(tuple(vendor_keys)))


def _unique_keys(vendors: Sequence[str]) -> Dict[str, str]:
    keys: Dict[str, str] = {}
    # "month" is the row label column
    taken = {"month"}
    for vendor in vendors:
        key = vendor_key(vendor)
        candidate, suffix = key, 2
        while candidate in taken:
            candidate = f"{key}_{suffix}"
            suffix += 1
        taken.add(candidate)
        keys[vendor] = candidate
    return keys


def _settlement(point: Mapping[str, Any]) -> float:
    for field in ("settlement", "settlement_amount", "amount"):
        if field in point:
            return parse_amount(point[field])
    return 0.0


def build_vendor_growth(vendor_series: Any) -> GrowthSeries:
    """Combine per-vendor monthly settlement series into month-aligned rows.

    Args:
        vendor_series: Mapping of vendor name to a list of
            ``{"month": ..., "settlement": ...}`` points.

    Returns:
        GrowthSeries with one row per month (first-seen month order) holding
        ``month`` plus one column per vendor key. Months a vendor has no
        point for are 0.
    """
    if not isinstance(vendor_series, Mapping):
        return GrowthSeries()

    vendors = [str(name) for name in vendor_series]
    keys = _unique_keys(vendors)

    months: List[str] = []
    amounts: Dict[str, Dict[str, float]] = {}

    for name, points in vendor_series.items():
        key = keys[str(name)]
        if not isinstance(points, list):
            logger.debug(f"Vendor {name!r} has no monthly series")
            continue
        for point in points:
            if not isinstance(point, Mapping) or point.get("month") is None:
                continue
            month = str(point["month"])
            if month not in amounts:
                months.append(month)
                amounts[month] = {}
            amounts[month][key] = amounts[month].get(key, 0.0) + _settlement(point)

    rows = []
    for month in months:
        row: Dict[str, Any] = {"month": month}
        for vendor in vendors:
            row[keys[vendor]] = amounts[month].get(keys[vendor], 0.0)
        rows.append(row)

    return GrowthSeries(
        rows=rows,
        vendor_keys=keys,
        colors=assign_vendor_colors([keys[v] for v in vendors]),
    )


def parse_growth_points(raw: Any) -> List[GrowthPoint]:
    """Parse ``[{month, sales, settlement}, ...]`` into GrowthPoints."""
    if not isinstance(raw, list):
        return []

    points = []
    for entry in raw:
        if not isinstance(entry, Mapping) or entry.get("month") is None:
            continue
        points.append(GrowthPoint(
            month=str(entry["month"]),
            sales=parse_amount(entry.get("sales")),
            settlement=parse_amount(entry.get("settlement")),
        ))
    return points


def _growth(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def month_over_month(points: Sequence[GrowthPoint]) -> List[MonthlyGrowth]:
    """Attach month-over-month growth percentages to each point.

    The first month, and any month following a zero month, has 0 growth.
    """
    series: List[MonthlyGrowth] = []
    previous = None
    for point in points:
        sales_growth = settlement_growth = 0.0
        if previous is not None:
            sales_growth = _growth(point.sales, previous.sales)
            settlement_growth = _growth(point.settlement, previous.settlement)
        series.append(MonthlyGrowth(
            month=point.month,
            sales=point.sales,
            settlement=point.settlement,
            sales_growth=sales_growth,
            settlement_growth=settlement_growth,
        ))
        previous = point
    return series


def parse_growth_payload(raw: Any) -> Tuple[List[GrowthPoint], Any]:
    """Split a growth payload into marketplace points and vendor series.

    Accepts a bare ``[{month, sales, settlement}]`` list or
    ``{"salesAndSettlement": [...], "vendorSettlements": {...}}``.
    """
    if isinstance(raw, Mapping):
        return parse_growth_points(raw.get("salesAndSettlement")), raw.get("vendorSettlements")
    return parse_growth_points(raw), None
