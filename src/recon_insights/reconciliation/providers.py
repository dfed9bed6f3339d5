"""Provider normalization and gateway/COD splitting.

Provider blocks are keyed by provider name. A handful of payment gateways are
well known, the reserved ``cod`` key holds a list of logistics partners, and
any other key holding an object (or a list of objects) is a provider that was
added upstream without a code change here. Every branch produces the same
closed ``ProviderRecord`` type.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .amounts import parse_amount, parse_count
from .models import ProviderCategory, ProviderOrigin, ProviderRecord, ProviderSplit

logger = logging.getLogger(__name__)

COD_KEY = "cod"
COD_DISPLAY_NAME = "Cash on Delivery"

PROVIDER_DISPLAY_NAMES: Dict[str, str] = {
    # Payment gateways and marketplaces
    "paytm": "Paytm",
    "payu": "PayU",
    "razorpay": "Razorpay",
    "cashfree": "Cashfree",
    "phonepe": "PhonePe",
    "ccavenue": "CCAvenue",
    "easebuzz": "Easebuzz",
    "stripe": "Stripe",
    "flipkart": "Flipkart",
    "amazon": "Amazon",
    # Logistics partners collecting cash on delivery
    "bluedart": "Blue Dart",
    "blue_dart": "Blue Dart",
    "delhivery": "Delhivery",
    "dtdc": "DTDC",
    "ecom_express": "Ecom Express",
    "ecomexpress": "Ecom Express",
    "shadowfax": "Shadowfax",
    "xpressbees": "Xpressbees",
    "shiprocket": "Shiprocket",
    COD_KEY: COD_DISPLAY_NAME,
}

KNOWN_PROVIDER_KEYS = frozenset({
    "paytm", "payu", "razorpay", "cashfree", "phonepe",
    "ccavenue", "easebuzz", "stripe", "flipkart", "amazon",
})

# Entry fields that name the provider, in order of preference
_CODE_FIELDS = ("platform", "code", "name")


def display_name(code: Any) -> str:
    """Resolve a provider code to its display name, falling back to the code."""
    text = str(code).strip() if code is not None else ""
    return PROVIDER_DISPLAY_NAMES.get(text.lower(), text)


def _provider_code(entry: Mapping[str, Any], fallback: str) -> str:
    for field in _CODE_FIELDS:
        value = entry.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip().lower()
    return fallback.strip().lower()


def _to_record(entry: Mapping[str, Any], key: str, origin: ProviderOrigin) -> ProviderRecord:
    code = _provider_code(entry, key)
    category = ProviderCategory.COD if origin == ProviderOrigin.COD else ProviderCategory.GATEWAY

    commission = None
    gst = None
    if category == ProviderCategory.GATEWAY:
        # Backend spells it "comission"; accept the corrected spelling too
        commission = parse_amount(entry.get("total_comission", entry.get("total_commission")))
        gst = parse_amount(entry.get("total_gst_on_comission", entry.get("total_gst_on_commission")))

    return ProviderRecord(
        code=code,
        display_name=display_name(code),
        category=category,
        origin=origin,
        source_key=key,
        order_count=parse_count(entry.get("total_count")),
        sale_amount=parse_amount(entry.get("total_sale_amount")),
        commission=commission,
        gst_on_commission=gst,
    )


def _entries(value: Any) -> List[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, Mapping)]
    return []


def normalize_providers(raw: Any) -> List[ProviderRecord]:
    """Map a raw provider block into an ordered list of provider records.

    Args:
        raw: Mapping of provider key to provider object, with an optional
            ``cod`` key holding a list of logistics partner objects.

    Returns:
        Provider records in the order their keys appear. Duplicate codes are
        kept as separate records.
    """
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.debug(f"Ignoring provider block of type {type(raw).__name__}")
        return []

    records: List[ProviderRecord] = []

    for key, value in raw.items():
        key = str(key)
        lowered = key.lower()

        if lowered == COD_KEY:
            origin = ProviderOrigin.COD
        elif lowered in KNOWN_PROVIDER_KEYS:
            origin = ProviderOrigin.KNOWN
        else:
            origin = ProviderOrigin.DYNAMIC

        entries = _entries(value)
        if not entries:
            logger.debug(f"Skipping provider key {key!r}: no provider objects")
            continue

        if origin == ProviderOrigin.DYNAMIC:
            logger.debug(f"Including dynamically discovered provider key {key!r}")

        for entry in entries:
            records.append(_to_record(entry, key, origin))

    return records


def aggregate_cod(records: Iterable[ProviderRecord]) -> Optional[ProviderRecord]:
    """Sum COD partner records into a single 'Cash on Delivery' record."""
    members = list(records)
    if not members:
        return None

    return ProviderRecord(
        code=COD_KEY,
        display_name=COD_DISPLAY_NAME,
        category=ProviderCategory.COD,
        origin=ProviderOrigin.COD,
        source_key=COD_KEY,
        order_count=sum(r.order_count for r in members),
        sale_amount=sum(r.sale_amount for r in members),
    )


def split_providers(records: Iterable[ProviderRecord]) -> ProviderSplit:
    """Partition provider records into gateways and COD partners."""
    gateways: List[ProviderRecord] = []
    cod: List[ProviderRecord] = []

    for record in records:
        if record.category == ProviderCategory.COD:
            cod.append(record)
        else:
            gateways.append(record)

    return ProviderSplit(gateways=gateways, cod=cod, cod_aggregate=aggregate_cod(cod))
