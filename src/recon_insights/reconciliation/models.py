"""Models for reconciliation dashboard views."""

import enum
from datetime import date
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ProviderCategory(str, enum.Enum):
    """Structural category of a settlement channel."""
    GATEWAY = "gateway"
    COD = "cod"


class ProviderOrigin(str, enum.Enum):
    """Where in the raw provider block a record was found."""
    KNOWN = "known"
    COD = "cod"
    DYNAMIC = "dynamic"


class StatusBand(str, enum.Enum):
    """Severity band for a reconciliation percentage."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    MODERATE = "moderate"
    WEAK = "weak"
    POOR = "poor"
    CRITICAL = "critical"


class AgeBucket(str, enum.Enum):
    """Settlement turnaround buckets, in display order."""
    LE_1D = "<=1d"
    D2_3 = "2-3d"
    D4_7 = "4-7d"
    D8_14 = "8-14d"
    D15_30 = "15-30d"
    GT_30D = ">30d"


class DateField(str, enum.Enum):
    """Date used to select orders for a snapshot."""
    SETTLEMENT = "settlement"
    INVOICE = "invoice"


class Platform(str, enum.Enum):
    """Sales platform a snapshot was fetched for."""
    FLIPKART = "flipkart"
    AMAZON = "amazon"
    D2C = "d2c"


class AmountCount(BaseModel):
    """A monetary amount paired with the number of orders behind it."""
    amount: float = Field(default=0.0, description="Non-negative amount")
    count: int = Field(default=0, description="Number of orders")


class ProviderRecord(BaseModel):
    """One settlement or payment channel within a snapshot."""
    code: str = Field(..., description="Lowercase provider identifier")
    display_name: str = Field(..., description="Human readable provider name")
    category: ProviderCategory = Field(..., description="Gateway or COD")
    origin: ProviderOrigin = Field(default=ProviderOrigin.KNOWN)
    source_key: str = Field(default="", description="Raw key the record was read from")
    order_count: int = Field(default=0)
    sale_amount: float = Field(default=0.0)
    commission: Optional[float] = Field(None, description="Gateway commission")
    gst_on_commission: Optional[float] = Field(None, description="GST charged on the commission")


class UnreconciledReason(BaseModel):
    """A bucket of unreconciled orders sharing one reason."""
    name: str
    count: int = 0
    amount: float = 0.0


class CommissionEntry(BaseModel):
    """Commission and charges levied by one payment provider."""
    platform: str
    display_name: str
    amount_settled: float = 0.0
    commission: float = 0.0
    gst_on_commission: float = 0.0

    @property
    def total_charges(self) -> float:
        return self.commission + self.gst_on_commission


class ReconciliationSnapshot(BaseModel):
    """One computed reconciliation result for a date range and platform."""
    total_transactions: AmountCount = Field(default_factory=AmountCount)
    net_sales: AmountCount = Field(default_factory=AmountCount)
    returns: AmountCount = Field(default_factory=AmountCount)
    cancellations: AmountCount = Field(default_factory=AmountCount)
    reconciled: AmountCount = Field(default_factory=AmountCount)
    unreconciled: AmountCount = Field(default_factory=AmountCount)
    previous_period: AmountCount = Field(default_factory=AmountCount)
    difference: AmountCount = Field(default_factory=AmountCount)
    less_payment_received: AmountCount = Field(default_factory=AmountCount)
    excess_payment_received: AmountCount = Field(default_factory=AmountCount)
    matched_orders: int = Field(default=0)

    reconciled_providers: List[ProviderRecord] = Field(default_factory=list)
    unreconciled_providers: List[ProviderRecord] = Field(default_factory=list)
    settled_providers: Optional[List[ProviderRecord]] = Field(None)
    pending_providers: Optional[List[ProviderRecord]] = Field(None)
    reasons: List[UnreconciledReason] = Field(default_factory=list)
    commission: List[CommissionEntry] = Field(default_factory=list)

    # Rate fields are carried, never summed
    return_rate: float = Field(default=0.0)
    commission_rate: float = Field(default=0.0)


class ProviderSplit(BaseModel):
    """Provider records partitioned into gateways and COD partners."""
    gateways: List[ProviderRecord] = Field(default_factory=list)
    cod: List[ProviderRecord] = Field(default_factory=list)
    cod_aggregate: Optional[ProviderRecord] = Field(
        None, description="Synthesized 'Cash on Delivery' line summing all COD partners"
    )


class ProviderMatchView(BaseModel):
    """Matched and unmatched totals for one provider (or the COD group)."""
    code: str
    display_name: str
    category: ProviderCategory
    matched_count: int = 0
    matched_amount: float = 0.0
    unmatched_count: int = 0
    unmatched_amount: float = 0.0
    percent_matched: float = 0.0
    percent_mismatched: float = 0.0
    status: StatusBand = StatusBand.CRITICAL
    members: List["ProviderMatchView"] = Field(default_factory=list)


class AgeingRecord(BaseModel):
    """Settlement-time profile of one provider."""
    provider: str = Field(..., description="Provider display name")
    average_days_to_settle: float = Field(default=0.0)
    distribution: Dict[AgeBucket, int] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.distribution.get(bucket, 0) for bucket in AgeBucket)


class ProviderAgeingView(BaseModel):
    """Bucket percentages and grouped shares for one provider."""
    provider: str
    average_days_to_settle: float = 0.0
    total: int = 0
    bucket_percentages: Dict[AgeBucket, float] = Field(default_factory=dict)
    within_3_days: float = 0.0
    days_4_to_7: float = 0.0
    days_8_to_14: float = 0.0
    over_14_days: float = 0.0


class AgeingSummary(BaseModel):
    """Ageing analysis across all providers."""
    providers: List[ProviderAgeingView] = Field(default_factory=list)
    overall_average_tat: float = Field(default=0.0, description="Unweighted mean of provider TATs")
    weighted_average_tat: float = Field(default=0.0, description="Settlement-count weighted TAT")


class GrowthPoint(BaseModel):
    """Sales and settlement totals for one month."""
    month: str
    sales: float = 0.0
    settlement: float = 0.0


class MonthlyGrowth(GrowthPoint):
    """A growth point with month-over-month change percentages."""
    sales_growth: float = 0.0
    settlement_growth: float = 0.0


class GrowthSeries(BaseModel):
    """Month-aligned settlement series across vendors."""
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    vendor_keys: Dict[str, str] = Field(default_factory=dict, description="Vendor name -> column key")
    colors: Dict[str, str] = Field(default_factory=dict, description="Column key -> palette colour")


class ReportContext(BaseModel):
    """Header describing which snapshot an export was computed from."""
    start_date: date = Field(..., description="Start of the date range")
    end_date: date = Field(..., description="End of the date range")
    date_field: DateField = Field(default=DateField.SETTLEMENT)
    platform: Platform = Field(default=Platform.FLIPKART)
    active_tab: str = Field(default="summary", description="Dashboard tab the export was taken from")


class DashboardViews(BaseModel):
    """Every computed view the dashboard renders for one snapshot."""
    snapshot: ReconciliationSnapshot
    provider_matches: List[ProviderMatchView] = Field(default_factory=list)
    settled: ProviderSplit = Field(default_factory=ProviderSplit)
    pending: ProviderSplit = Field(default_factory=ProviderSplit)
    ageing: AgeingSummary = Field(default_factory=AgeingSummary)
    growth: List[MonthlyGrowth] = Field(default_factory=list)
    vendor_growth: GrowthSeries = Field(default_factory=GrowthSeries)
    overall_match_rate: float = 0.0
    overall_status: StatusBand = StatusBand.CRITICAL

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return the headline numbers without per-provider detail."""
        snap = self.snapshot
        return {
            "total_transactions": snap.total_transactions.model_dump(),
            "net_sales": snap.net_sales.model_dump(),
            "reconciled": snap.reconciled.model_dump(),
            "unreconciled": snap.unreconciled.model_dump(),
            "overall_match_rate": f"{self.overall_match_rate:.2f}%",
            "overall_status": self.overall_status.value,
            "return_rate": snap.return_rate,
            "commission_rate": snap.commission_rate,
            "providers": len(self.provider_matches),
            "average_tat_days": round(self.ageing.overall_average_tat, 1),
        }
