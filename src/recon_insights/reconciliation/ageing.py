"""Payment ageing analysis.

Turns per-provider settlement-time bucket counts into percentage
distributions and overall turnaround-time (TAT) figures. The aggregator
returns the same shape whether one or many providers are present; choosing a
single-provider detail view over a comparison chart is left to the caller.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from .amounts import parse_amount, parse_count
from .models import AgeBucket, AgeingRecord, AgeingSummary, ProviderAgeingView
from .providers import display_name

logger = logging.getLogger(__name__)

AGE_BUCKETS: List[AgeBucket] = list(AgeBucket)

_BUCKET_ALIASES: Dict[str, AgeBucket] = {bucket.value: bucket for bucket in AgeBucket}
_BUCKET_ALIASES.update({
    "≤1d": AgeBucket.LE_1D,
    "<1d": AgeBucket.LE_1D,
    "0-1d": AgeBucket.LE_1D,
    "30d+": AgeBucket.GT_30D,
})


def _ageing_entries(raw: Any) -> List[Mapping[str, Any]]:
    if isinstance(raw, Mapping):
        data = raw.get("data", raw)
        if isinstance(data, Mapping):
            raw = data.get("providerAgeingData", [])
    if not isinstance(raw, list):
        return []
    return [entry for entry in raw if isinstance(entry, Mapping)]


def parse_ageing_record(entry: Mapping[str, Any]) -> AgeingRecord:
    """Build an AgeingRecord from one raw provider ageing entry."""
    provider = entry.get("settlement_provider") or entry.get("provider") or "unknown"

    distribution = {bucket: 0 for bucket in AGE_BUCKETS}
    raw_distribution = entry.get("distribution")
    if isinstance(raw_distribution, Mapping):
        for key, value in raw_distribution.items():
            bucket = _BUCKET_ALIASES.get(str(key).strip())
            if bucket is None:
                logger.debug(f"Ignoring unknown ageing bucket {key!r} for {provider}")
                continue
            distribution[bucket] += parse_count(value)

    return AgeingRecord(
        provider=display_name(provider),
        average_days_to_settle=parse_amount(entry.get("averageDaysToSettle")),
        distribution=distribution,
    )


def parse_ageing_records(raw: Any) -> List[AgeingRecord]:
    """Parse an ageing payload.

    Accepts either a bare list of provider entries or the API response
    shape ``{"data": {"providerAgeingData": [...]}}``.
    """
    return [parse_ageing_record(entry) for entry in _ageing_entries(raw)]


def bucket_percentages(record: AgeingRecord) -> Dict[AgeBucket, float]:
    """Return each bucket's share of the provider's settlements."""
    total = record.total
    if total == 0:
        return {bucket: 0.0 for bucket in AGE_BUCKETS}
    return {
        bucket: record.distribution.get(bucket, 0) / total * 100
        for bucket in AGE_BUCKETS
    }


def provider_view(record: AgeingRecord) -> ProviderAgeingView:
    shares = bucket_percentages(record)
    return ProviderAgeingView(
        provider=record.provider,
        average_days_to_settle=record.average_days_to_settle,
        total=record.total,
        bucket_percentages=shares,
        within_3_days=shares[AgeBucket.LE_1D] + shares[AgeBucket.D2_3],
        days_4_to_7=shares[AgeBucket.D4_7],
        days_8_to_14=shares[AgeBucket.D8_14],
        over_14_days=shares[AgeBucket.D15_30] + shares[AgeBucket.GT_30D],
    )


def aggregate_ageing(records: Sequence[AgeingRecord]) -> AgeingSummary:
    """Compute per-provider distributions and overall TAT.

    The overall average TAT is the plain mean of the providers' average days
    to settle. The weighted figure weights each provider by its settlement
    count.

    Args:
        records: Ageing records, one per provider.

    Returns:
        AgeingSummary with one view per record, in input order.
    """
    views = [provider_view(record) for record in records]

    overall = 0.0
    if records:
        overall = sum(r.average_days_to_settle for r in records) / len(records)

    settled = sum(r.total for r in records)
    weighted = 0.0
    if settled:
        weighted = sum(r.average_days_to_settle * r.total for r in records) / settled

    logger.debug(f"Aggregated ageing for {len(views)} providers, avg TAT {overall:.1f} days")
    return AgeingSummary(
        providers=views,
        overall_average_tat=overall,
        weighted_average_tat=weighted,
    )


def ageing_chart_rows(summary: AgeingSummary) -> List[Dict[str, Any]]:
    """Project the summary into stacked-bar rows: provider plus one field per bucket."""
    rows = []
    for view in summary.providers:
        row: Dict[str, Any] = {"provider": view.provider}
        for bucket in AGE_BUCKETS:
            row[bucket.value] = round(view.bucket_percentages.get(bucket, 0.0), 2)
        rows.append(row)
    return rows
