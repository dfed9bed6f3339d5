"""Service layer that turns raw reconciliation payloads into dashboard views."""

import logging
from typing import Any, List, Mapping, Optional

from .ageing import aggregate_ageing, parse_ageing_records
from .amounts import LocaleConfig, parse_amount, parse_count, percentage
from .growth import build_vendor_growth, month_over_month, parse_growth_payload
from .merger import merge_raw_snapshots, merge_snapshots
from .models import (
    AmountCount,
    CommissionEntry,
    DashboardViews,
    ProviderRecord,
    ReconciliationSnapshot,
    ReportContext,
    UnreconciledReason,
)
from .providers import display_name, normalize_providers, split_providers
from .rates import build_match_views, classify_status, match_rate
from .report import ReportGenerator

logger = logging.getLogger(__name__)


def _section(raw: Any, *path: str) -> Any:
    node = raw
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _pair(summary: Mapping[str, Any], amount_key: str, count_key: str) -> AmountCount:
    return AmountCount(
        amount=parse_amount(summary.get(amount_key)),
        count=parse_count(summary.get(count_key)),
    )


def _reason_label(name: Any) -> str:
    text = " ".join(str(name or "").replace("_", " ").replace("-", " ").split())
    return text.title() if text else "Unknown"


def _parse_reasons(raw: Any) -> List[UnreconciledReason]:
    if not isinstance(raw, list):
        return []
    return [
        UnreconciledReason(
            name=_reason_label(entry.get("name")),
            count=parse_count(entry.get("count")),
            amount=parse_amount(entry.get("amount")),
        )
        for entry in raw
        if isinstance(entry, Mapping)
    ]


def _parse_commission(raw: Any) -> List[CommissionEntry]:
    if not isinstance(raw, list):
        return []

    entries = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        platform = str(entry.get("platform") or "unknown").strip().lower()
        entries.append(CommissionEntry(
            platform=platform,
            display_name=display_name(platform),
            amount_settled=parse_amount(entry.get("total_amount_settled")),
            commission=parse_amount(entry.get("total_commission")),
            gst_on_commission=parse_amount(entry.get("total_gst_on_commission")),
        ))
    return entries


def _rate(raw: Mapping[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if raw.get(key) is not None:
            return parse_amount(raw[key])
    return None


def _optional_providers(raw: Any, key: str) -> Optional[List[ProviderRecord]]:
    block = _section(raw, key, "providers")
    if block is None:
        return None
    return normalize_providers(block)


def parse_snapshot(raw: Any) -> ReconciliationSnapshot:
    """Parse a raw main-summary payload into a ReconciliationSnapshot.

    Missing or malformed sections yield zero counters and empty provider
    lists; this function does not raise on bad input.

    Args:
        raw: Decoded JSON of the main-summary response.

    Returns:
        ReconciliationSnapshot with non-negative counters.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Snapshot payload is {type(raw).__name__}, not an object; using empty snapshot")
        raw = {}

    summary = _section(raw, "summary")
    if not isinstance(summary, Mapping):
        summary = {}
    unreconciled_summary = _section(raw, "UnReconcile", "summary")
    if not isinstance(unreconciled_summary, Mapping):
        unreconciled_summary = {}

    commission = _parse_commission(raw.get("commission"))
    total_transactions = _pair(summary, "total_transactions_amount", "total_transaction_orders")
    returns = _pair(summary, "total_return_amount", "total_return_orders")

    return_rate = _rate(raw, "returnRate", "return_rate")
    if return_rate is None:
        return_rate = percentage(returns.count, total_transactions.count)

    commission_rate = _rate(raw, "commissionRate", "commission_rate")
    if commission_rate is None:
        commission_rate = percentage(
            sum(c.commission for c in commission),
            sum(c.amount_settled for c in commission),
        )

    return ReconciliationSnapshot(
        total_transactions=total_transactions,
        net_sales=_pair(summary, "net_sales_amount", "net_sales_orders"),
        returns=returns,
        cancellations=_pair(summary, "total_cancellations_amount", "total_cancellations_orders"),
        reconciled=_pair(summary, "total_reconciled_amount", "total_reconciled_count"),
        unreconciled=_pair(summary, "total_unreconciled_amount", "total_unreconciled_count"),
        previous_period=_pair(summary, "previous_period_amount", "previous_period_orders"),
        difference=_pair(unreconciled_summary, "total_difference_amount", "total_orders_count"),
        less_payment_received=_pair(
            unreconciled_summary,
            "total_less_payment_received_amount",
            "total_less_payment_received_orders",
        ),
        excess_payment_received=_pair(
            unreconciled_summary,
            "total_more_payment_received_amount",
            "total_more_payment_received_orders",
        ),
        matched_orders=parse_count(unreconciled_summary.get("total_matched_orders")),
        reconciled_providers=normalize_providers(_section(raw, "Reconcile", "providers")),
        unreconciled_providers=normalize_providers(_section(raw, "UnReconcile", "providers")),
        settled_providers=_optional_providers(raw, "Settled"),
        pending_providers=_optional_providers(raw, "Pending"),
        reasons=_parse_reasons(_section(raw, "UnReconcile", "reasons")),
        commission=commission,
        return_rate=return_rate,
        commission_rate=commission_rate,
    )


class DashboardService:
    """Service for computing, merging and exporting dashboard views."""

    def __init__(self, locale: Optional[LocaleConfig] = None):
        """Initialize the dashboard service.

        Args:
            locale: Currency formatting used by text output. Defaults to rupees.
        """
        self.locale = locale or LocaleConfig()

    def build_views_from_snapshot(
        self,
        snapshot: ReconciliationSnapshot,
        ageing: Any = None,
        growth: Any = None,
    ) -> DashboardViews:
        """Compute every view for an already parsed snapshot.

        Args:
            snapshot: Parsed (possibly merged) snapshot.
            ageing: Raw ageing payload, if fetched.
            growth: Raw monthly growth payload, if fetched.

        Returns:
            DashboardViews.
        """
        settled = snapshot.settled_providers
        if settled is None:
            settled = snapshot.reconciled_providers
        pending = snapshot.pending_providers
        if pending is None:
            pending = snapshot.unreconciled_providers

        points, vendor_series = parse_growth_payload(growth)
        overall = match_rate(snapshot.reconciled.count, snapshot.unreconciled.count)

        views = DashboardViews(
            snapshot=snapshot,
            provider_matches=build_match_views(
                snapshot.reconciled_providers,
                snapshot.unreconciled_providers,
            ),
            settled=split_providers(settled),
            pending=split_providers(pending),
            ageing=aggregate_ageing(parse_ageing_records(ageing)),
            growth=month_over_month(points),
            vendor_growth=build_vendor_growth(vendor_series),
            overall_match_rate=overall,
            overall_status=classify_status(overall),
        )

        logger.info(
            f"Built dashboard views: {len(views.provider_matches)} providers, "
            f"{len(views.ageing.providers)} ageing profiles, "
            f"{len(views.growth)} growth months, match rate {overall:.2f}%"
        )
        return views

    def build_views(self, summary: Any, ageing: Any = None, growth: Any = None) -> DashboardViews:
        """Compute every view from raw payloads.

        Args:
            summary: Raw main-summary payload.
            ageing: Raw ageing payload, if fetched.
            growth: Raw monthly growth payload, if fetched.

        Returns:
            DashboardViews.
        """
        return self.build_views_from_snapshot(parse_snapshot(summary), ageing=ageing, growth=growth)

    def build_merged_views(
        self,
        primary: Any,
        secondary: Any,
        ageing: Any = None,
        growth: Any = None,
    ) -> DashboardViews:
        """Compute views over two raw main-summary payloads combined.

        Rates come from ``primary``; see ``merge_snapshots``.
        """
        snapshot = merge_snapshots(parse_snapshot(primary), parse_snapshot(secondary))
        return self.build_views_from_snapshot(snapshot, ageing=ageing, growth=growth)

    def merge(self, primary: Any, secondary: Any) -> dict:
        """Merge two raw snapshots, e.g. two date windows fetched in parallel."""
        merged = merge_raw_snapshots(primary, secondary)
        logger.info(f"Merged two snapshots ({len(merged)} top-level fields)")
        return merged

    def export_csv(self, views: DashboardViews, context: ReportContext) -> str:
        """Return the CSV export for the views."""
        return ReportGenerator(views, context).to_csv()

    def render_views(
        self,
        views: DashboardViews,
        context: ReportContext,
        format: str = "json",
        include_details: bool = True,
    ) -> str:
        """Render views in the requested format.

        Args:
            views: Computed views.
            context: Export context header.
            format: Output format ('json', 'csv', 'text').
            include_details: Include every view (for JSON format).

        Returns:
            Formatted output string.
        """
        generator = ReportGenerator(views, context)

        if format == "json":
            return generator.to_json(include_details=include_details)
        elif format == "csv":
            return generator.to_csv()
        elif format == "text":
            return generator.to_summary_text(self.locale)
        else:
            raise ValueError(f"Unsupported report format: {format}")
