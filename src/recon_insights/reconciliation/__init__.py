"""Reconciliation aggregation and ageing-analysis engine.

This module turns raw per-provider transaction and settlement counts for a
merchant's sales channels into the summary views a dashboard renders.

Features:
- Tolerant amount parsing and provider normalization (gateways and COD partners)
- Per-provider match rates and status bands
- Snapshot merging across date windows or platforms
- Settlement ageing distributions and turnaround times
- Month-aligned growth series with stable vendor colours
- Sectioned CSV export
"""

from .models import (
    AgeBucket,
    AgeingRecord,
    AgeingSummary,
    AmountCount,
    CommissionEntry,
    DashboardViews,
    DateField,
    GrowthPoint,
    GrowthSeries,
    MonthlyGrowth,
    Platform,
    ProviderAgeingView,
    ProviderCategory,
    ProviderMatchView,
    ProviderOrigin,
    ProviderRecord,
    ProviderSplit,
    ReconciliationSnapshot,
    ReportContext,
    StatusBand,
    UnreconciledReason,
)
from .amounts import (
    LocaleConfig,
    ensure_negative,
    format_currency,
    parse_amount,
    parse_count,
    sum_amount,
    sum_count,
)
from .providers import display_name, normalize_providers, split_providers
from .rates import build_match_views, classify_status, match_rate, mismatch_rate, status_color
from .merger import merge_raw_snapshots, merge_snapshots
from .ageing import ageing_chart_rows, aggregate_ageing, bucket_percentages, parse_ageing_records
from .growth import assign_vendor_colors, build_vendor_growth, month_over_month
from .report import ExportError, ReportGenerator, export_filename
from .service import DashboardService, parse_snapshot

__all__ = [
    # Models
    "AgeBucket",
    "AgeingRecord",
    "AgeingSummary",
    "AmountCount",
    "CommissionEntry",
    "DashboardViews",
    "DateField",
    "GrowthPoint",
    "GrowthSeries",
    "MonthlyGrowth",
    "Platform",
    "ProviderAgeingView",
    "ProviderCategory",
    "ProviderMatchView",
    "ProviderOrigin",
    "ProviderRecord",
    "ProviderSplit",
    "ReconciliationSnapshot",
    "ReportContext",
    "StatusBand",
    "UnreconciledReason",
    # Amounts
    "LocaleConfig",
    "ensure_negative",
    "format_currency",
    "parse_amount",
    "parse_count",
    "sum_amount",
    "sum_count",
    # Core Components
    "display_name",
    "normalize_providers",
    "split_providers",
    "build_match_views",
    "classify_status",
    "match_rate",
    "mismatch_rate",
    "status_color",
    "merge_raw_snapshots",
    "merge_snapshots",
    "ageing_chart_rows",
    "aggregate_ageing",
    "bucket_percentages",
    "parse_ageing_records",
    "assign_vendor_colors",
    "build_vendor_growth",
    "month_over_month",
    "ExportError",
    "ReportGenerator",
    "export_filename",
    "DashboardService",
    "parse_snapshot",
]
