"""Combine two reconciliation snapshots into one.

Amounts and counts are summed field by field. Rate fields are taken from the
primary snapshot as-is: a count-weighted recomputation is not attempted, so a
merged rate describes the primary window only.
"""

import copy
import logging
import re
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, Hashable, List, Mapping, Optional, Sequence, TypeVar

from .amounts import looks_numeric, parse_signed_amount, sum_amount, sum_count
from .models import (
    AmountCount,
    CommissionEntry,
    ProviderRecord,
    ReconciliationSnapshot,
    UnreconciledReason,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RATE_KEY = re.compile(r"(^rate$|Rate$|_rate$)")

# Identity fields for lists of mappings in raw snapshots
_LIST_KEY_FIELDS = ("platform", "code", "name", "settlement_provider", "month")

_MISSING = object()


def is_rate_field(key: Any) -> bool:
    """Return True for keys holding a percentage that must not be summed."""
    return isinstance(key, str) and bool(_RATE_KEY.search(key))


def merge_amount_count(a: AmountCount, b: AmountCount) -> AmountCount:
    return AmountCount(amount=sum_amount(a.amount, b.amount), count=sum_count(a.count, b.count))


def _merge_keyed(
    primary: Sequence[T],
    secondary: Sequence[T],
    key: Callable[[T], Hashable],
    combine: Callable[[T, T], T],
) -> List[T]:
    # n-th occurrence of a key in one list pairs with the n-th in the other
    pending: Dict[Hashable, Deque[T]] = defaultdict(deque)
    for item in secondary:
        pending[key(item)].append(item)

    merged: List[T] = []
    for item in primary:
        queue = pending[key(item)]
        merged.append(combine(item, queue.popleft()) if queue else item)

    for item in secondary:
        queue = pending[key(item)]
        if queue and queue[0] is item:
            merged.append(queue.popleft())

    return merged


def _merge_provider(a: ProviderRecord, b: ProviderRecord) -> ProviderRecord:
    def optional_sum(x: Optional[float], y: Optional[float]) -> Optional[float]:
        if x is None and y is None:
            return None
        return sum_amount(x, y)

    return a.model_copy(update={
        "order_count": sum_count(a.order_count, b.order_count),
        "sale_amount": sum_amount(a.sale_amount, b.sale_amount),
        "commission": optional_sum(a.commission, b.commission),
        "gst_on_commission": optional_sum(a.gst_on_commission, b.gst_on_commission),
    })


def merge_provider_records(
    primary: Sequence[ProviderRecord],
    secondary: Sequence[ProviderRecord],
) -> List[ProviderRecord]:
    """Sum provider records that share a category and code."""
    return _merge_keyed(primary, secondary, lambda r: (r.category, r.code), _merge_provider)


def _merge_optional_providers(
    primary: Optional[List[ProviderRecord]],
    secondary: Optional[List[ProviderRecord]],
) -> Optional[List[ProviderRecord]]:
    if primary is None and secondary is None:
        return None
    return merge_provider_records(primary or [], secondary or [])


def _merge_reason(a: UnreconciledReason, b: UnreconciledReason) -> UnreconciledReason:
    return UnreconciledReason(
        name=a.name,
        count=sum_count(a.count, b.count),
        amount=sum_amount(a.amount, b.amount),
    )


def _merge_commission(a: CommissionEntry, b: CommissionEntry) -> CommissionEntry:
    return a.model_copy(update={
        "amount_settled": sum_amount(a.amount_settled, b.amount_settled),
        "commission": sum_amount(a.commission, b.commission),
        "gst_on_commission": sum_amount(a.gst_on_commission, b.gst_on_commission),
    })


_AMOUNT_COUNT_FIELDS = (
    "total_transactions",
    "net_sales",
    "returns",
    "cancellations",
    "reconciled",
    "unreconciled",
    "previous_period",
    "difference",
    "less_payment_received",
    "excess_payment_received",
)


def merge_snapshots(a: ReconciliationSnapshot, b: ReconciliationSnapshot) -> ReconciliationSnapshot:
    """Merge two snapshots, ``a`` being the primary operand.

    Args:
        a: Primary snapshot. Its rate fields are carried over verbatim.
        b: Secondary snapshot.

    Returns:
        A new ReconciliationSnapshot; neither input is modified.
    """
    fields: Dict[str, Any] = {
        name: merge_amount_count(getattr(a, name), getattr(b, name))
        for name in _AMOUNT_COUNT_FIELDS
    }
    fields.update(
        matched_orders=sum_count(a.matched_orders, b.matched_orders),
        reconciled_providers=merge_provider_records(a.reconciled_providers, b.reconciled_providers),
        unreconciled_providers=merge_provider_records(a.unreconciled_providers, b.unreconciled_providers),
        settled_providers=_merge_optional_providers(a.settled_providers, b.settled_providers),
        pending_providers=_merge_optional_providers(a.pending_providers, b.pending_providers),
        reasons=_merge_keyed(a.reasons, b.reasons, lambda r: r.name.lower(), _merge_reason),
        commission=_merge_keyed(a.commission, b.commission, lambda c: c.platform, _merge_commission),
        return_rate=a.return_rate,
        commission_rate=a.commission_rate,
    )
    return ReconciliationSnapshot(**fields)


def _list_key(item: Any) -> Optional[str]:
    if not isinstance(item, Mapping):
        return None
    for field in _LIST_KEY_FIELDS:
        value = item.get(field)
        if isinstance(value, str) and value.strip():
            return f"{field}:{value.strip().lower()}"
    return None


def _merge_lists(primary: List[Any], secondary: List[Any]) -> List[Any]:
    keyed = all(_list_key(item) is not None for item in primary + secondary)
    if not keyed:
        return copy.deepcopy(primary) + copy.deepcopy(secondary)

    return _merge_keyed(
        [copy.deepcopy(item) for item in primary],
        [copy.deepcopy(item) for item in secondary],
        _list_key,
        merge_raw_snapshots,
    )


def _merge_value(key: Any, x: Any, y: Any) -> Any:
    if x is _MISSING or x is None:
        return copy.deepcopy(y) if y is not _MISSING else x
    if y is _MISSING or y is None:
        return copy.deepcopy(x)

    if is_rate_field(key):
        return copy.deepcopy(x)
    if isinstance(x, Mapping) and isinstance(y, Mapping):
        return merge_raw_snapshots(x, y)
    if isinstance(x, list) and isinstance(y, list):
        return _merge_lists(x, y)
    if looks_numeric(x) and looks_numeric(y):
        # Raw leaves keep their sign; debits such as difference are negative upstream
        if isinstance(x, int) and isinstance(y, int):
            return x + y
        return parse_signed_amount(x) + parse_signed_amount(y)

    # Labels and other non-additive text come from the primary snapshot
    return copy.deepcopy(x)


def merge_raw_snapshots(primary: Any, secondary: Any) -> Dict[str, Any]:
    """Merge two raw (JSON-shaped) snapshots recursively.

    Numeric leaves are summed with their sign kept, nested objects are
    merged, lists of objects are merged by their ``platform``/``code``/``name``
    identity, and rate fields (``returnRate``, ``commission_rate``, ...) come
    from ``primary``.

    Args:
        primary: Primary raw snapshot.
        secondary: Secondary raw snapshot.

    Returns:
        A new dict; neither input is modified.
    """
    if not isinstance(primary, Mapping):
        primary = {}
    if not isinstance(secondary, Mapping):
        secondary = {}

    merged: Dict[str, Any] = {}
    for key in list(primary) + [k for k in secondary if k not in primary]:
        merged[key] = _merge_value(key, primary.get(key, _MISSING), secondary.get(key, _MISSING))
    return merged
