"""Match rates, status bands and per-provider match views."""

import logging
from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

from .amounts import parse_amount, parse_signed_amount
from .models import ProviderCategory, ProviderMatchView, ProviderRecord, StatusBand
from .providers import COD_DISPLAY_NAME, COD_KEY

logger = logging.getLogger(__name__)

# Evaluated top-down; lower bounds are inclusive
STATUS_THRESHOLDS: Tuple[Tuple[float, StatusBand], ...] = (
    (98.0, StatusBand.EXCELLENT),
    (90.0, StatusBand.GOOD),
    (80.0, StatusBand.FAIR),
    (70.0, StatusBand.MODERATE),
    (60.0, StatusBand.WEAK),
    (50.0, StatusBand.POOR),
)

STATUS_COLORS: Dict[StatusBand, str] = {
    StatusBand.EXCELLENT: "#1b5e20",
    StatusBand.GOOD: "#3bb36a",
    StatusBand.FAIR: "#00bcd4",
    StatusBand.MODERATE: "#ffb300",
    StatusBand.WEAK: "#ff9800",
    StatusBand.POOR: "#ff7043",
    StatusBand.CRITICAL: "#ef5350",
}


def match_rate(matched: Any, unmatched: Any) -> float:
    """Return the matched share of ``matched + unmatched`` as a percentage.

    When both counts are zero there is nothing to reconcile and the rate is 0,
    not 100.
    """
    matched_value = parse_amount(matched)
    total = matched_value + parse_amount(unmatched)
    if total == 0:
        return 0.0
    return matched_value / total * 100


def mismatch_rate(matched: Any, unmatched: Any) -> float:
    return match_rate(unmatched, matched)


def classify_status(percent: Any) -> StatusBand:
    """Map a reconciliation percentage to its status band."""
    value = parse_signed_amount(percent)
    for threshold, band in STATUS_THRESHOLDS:
        if value >= threshold:
            return band
    return StatusBand.CRITICAL


def status_color(percent: Any) -> str:
    return STATUS_COLORS[classify_status(percent)]


def _make_view(
    code: str,
    name: str,
    category: ProviderCategory,
    matched_count: int,
    matched_amount: float,
    unmatched_count: int,
    unmatched_amount: float,
    members: Optional[List[ProviderMatchView]] = None,
) -> ProviderMatchView:
    percent = match_rate(matched_count, unmatched_count)
    return ProviderMatchView(
        code=code,
        display_name=name,
        category=category,
        matched_count=matched_count,
        matched_amount=matched_amount,
        unmatched_count=unmatched_count,
        unmatched_amount=unmatched_amount,
        percent_matched=percent,
        percent_mismatched=mismatch_rate(matched_count, unmatched_count),
        status=classify_status(percent),
        members=members or [],
    )


def _pair_records(
    reconciled: Sequence[ProviderRecord],
    unreconciled: Sequence[ProviderRecord],
) -> List[ProviderMatchView]:
    # Same code may appear more than once; pair the n-th occurrences
    pending: Dict[str, Deque[ProviderRecord]] = defaultdict(deque)
    for record in unreconciled:
        pending[record.code].append(record)

    views: List[ProviderMatchView] = []
    for record in reconciled:
        other = pending[record.code].popleft() if pending[record.code] else None
        views.append(_make_view(
            record.code,
            record.display_name,
            record.category,
            record.order_count,
            record.sale_amount,
            other.order_count if other else 0,
            other.sale_amount if other else 0.0,
        ))

    for code, leftovers in pending.items():
        for record in leftovers:
            views.append(_make_view(
                code,
                record.display_name,
                record.category,
                0,
                0.0,
                record.order_count,
                record.sale_amount,
            ))

    return views


def build_match_views(
    reconciled: Sequence[ProviderRecord],
    unreconciled: Sequence[ProviderRecord],
) -> List[ProviderMatchView]:
    """Pair reconciled and unreconciled provider records into match views.

    Gateways come first in first-seen order. COD partners are collected under
    a single 'Cash on Delivery' view with the partners as its members.

    Args:
        reconciled: Provider records from the reconciled block.
        unreconciled: Provider records from the unreconciled block.

    Returns:
        List of ProviderMatchView.
    """
    def by_category(records, category):
        return [r for r in records if r.category == category]

    views = _pair_records(
        by_category(reconciled, ProviderCategory.GATEWAY),
        by_category(unreconciled, ProviderCategory.GATEWAY),
    )

    members = _pair_records(
        by_category(reconciled, ProviderCategory.COD),
        by_category(unreconciled, ProviderCategory.COD),
    )
    if members:
        views.append(_make_view(
            COD_KEY,
            COD_DISPLAY_NAME,
            ProviderCategory.COD,
            sum(m.matched_count for m in members),
            sum(m.matched_amount for m in members),
            sum(m.unmatched_count for m in members),
            sum(m.unmatched_amount for m in members),
            members=members,
        ))

    logger.debug(f"Built {len(views)} provider match views ({len(members)} COD partners)")
    return views
