"""Shared test fixtures and configuration."""

import copy
import pytest
from datetime import date
from typing import Dict, Any

from recon_insights.reconciliation import DateField, Platform, ReportContext


MAIN_SUMMARY: Dict[str, Any] = {
    "filters": {
        "status": "all",
        "platform": ["d2c"],
        "date_field": "settlement_date",
        "start_date": "2025-01-01",
        "end_date": "2025-01-31",
    },
    "summary": {
        "total_transactions_amount": 250000,
        "total_transaction_orders": 100,
        "net_sales_amount": 230000,
        "net_sales_orders": 92,
        "total_return_amount": 15000,
        "total_return_orders": 5,
        "total_cancellations_amount": 5000,
        "total_cancellations_orders": 3,
        "total_reconciled_amount": 200000,
        "total_reconciled_count": 80,
        "total_unreconciled_amount": 30000,
        "total_unreconciled_count": 12,
    },
    "commission": [
        {
            "platform": "paytm",
            "total_amount_settled": 100000,
            "total_commission": 2000,
            "total_gst_on_commission": 360,
        },
        {
            "platform": "payu",
            "total_amount_settled": 50000,
            "total_commission": 1000,
            "total_gst_on_commission": 180,
        },
    ],
    "Reconcile": {
        "providers": {
            "paytm": {
                "platform": "paytm",
                "total_count": 45,
                "total_sale_amount": "112,500.00",
                "total_comission": 2000,
                "total_gst_on_comission": 360,
            },
            "payU": {
                "platform": "payu",
                "total_count": 20,
                "total_sale_amount": 50000,
                "total_comission": 1000,
                "total_gst_on_comission": 180,
            },
            "cod": [
                {"platform": "delhivery", "total_count": 10, "total_sale_amount": 25000},
                {"platform": "bluedart", "total_count": 5, "total_sale_amount": 12500},
            ],
        },
    },
    "UnReconcile": {
        "summary": {
            "total_difference_amount": 4500,
            "total_orders_count": 12,
            "total_matched_orders": 80,
            "total_less_payment_received_orders": 7,
            "total_less_payment_received_amount": -3000,
            "total_more_payment_received_orders": 5,
            "total_more_payment_received_amount": 1500,
        },
        "providers": {
            "paytm": {"platform": "paytm", "total_count": 5, "total_sale_amount": 12500},
            "cod": [
                {"platform": "delhivery", "total_count": 7, "total_sale_amount": 17500},
            ],
        },
        "reasons": [
            {"name": "short_payment", "count": 7, "amount": 3000},
            {"name": "excess-payment", "count": 5, "amount": 1500},
        ],
    },
}

AGEING_RESPONSE: Dict[str, Any] = {
    "data": {
        "providerAgeingData": [
            {
                "settlement_provider": "bluedart",
                "averageDaysToSettle": 6.2,
                "distribution": {
                    "<=1d": 5, "2-3d": 18, "4-7d": 42, "8-14d": 25, "15-30d": 8, ">30d": 2,
                },
            },
            {
                "settlement_provider": "payu",
                "averageDaysToSettle": 2.3,
                "distribution": {
                    "<=1d": 35, "2-3d": 45, "4-7d": 15, "8-14d": 4, "15-30d": 1, ">30d": 0,
                },
            },
        ],
    },
}

GROWTH_RESPONSE: Dict[str, Any] = {
    "salesAndSettlement": [
        {"month": "Jan", "sales": 100000, "settlement": 90000},
        {"month": "Feb", "sales": 120000, "settlement": 99000},
        {"month": "Mar", "sales": 90000, "settlement": 99000},
    ],
    "vendorSettlements": {
        "Blue Dart": [
            {"month": "Jan", "settlement": 1000},
            {"month": "Feb", "settlement": 1500},
        ],
        "Ecom Express": [
            {"month": "Jan", "settlement": 500},
            {"month": "Feb", "settlement": 700},
        ],
    },
}


@pytest.fixture
def main_summary() -> Dict[str, Any]:
    """Return a raw main-summary payload with gateways and COD partners."""
    return copy.deepcopy(MAIN_SUMMARY)


@pytest.fixture
def ageing_response() -> Dict[str, Any]:
    """Return a raw ageing analysis response."""
    return copy.deepcopy(AGEING_RESPONSE)


@pytest.fixture
def growth_response() -> Dict[str, Any]:
    """Return a raw monthly growth response."""
    return copy.deepcopy(GROWTH_RESPONSE)


@pytest.fixture
def report_context() -> ReportContext:
    """Return a fixed export context."""
    return ReportContext(
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        date_field=DateField.SETTLEMENT,
        platform=Platform.D2C,
        active_tab="summary",
    )
