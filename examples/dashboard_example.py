"""
Dashboard usage example. Two date windows fetched in parallel from the
reconciliation backend are merged, turned into dashboard views and exported.
"""
from datetime import date

from recon_insights.reconciliation import (
    DashboardService,
    DateField,
    Platform,
    ReportContext,
    ReportGenerator,
)

FIRST_HALF = {
    "summary": {
        "total_transactions_amount": 120000,
        "total_transaction_orders": 48,
        "total_reconciled_amount": 100000,
        "total_reconciled_count": 40,
        "total_unreconciled_amount": 20000,
        "total_unreconciled_count": 8,
    },
    "Reconcile": {
        "providers": {
            "razorpay": {"total_count": 30, "total_sale_amount": "75,000"},
            "cod": [{"platform": "delhivery", "total_count": 10, "total_sale_amount": 25000}],
        },
    },
    "UnReconcile": {
        "providers": {"razorpay": {"total_count": 8, "total_sale_amount": 20000}},
    },
}

SECOND_HALF = {
    "summary": {
        "total_transactions_amount": 80000,
        "total_transaction_orders": 32,
        "total_reconciled_amount": 78000,
        "total_reconciled_count": 31,
        "total_unreconciled_amount": 2000,
        "total_unreconciled_count": 1,
    },
    "Reconcile": {
        "providers": {
            "razorpay": {"total_count": 25, "total_sale_amount": 62500},
            "cod": [{"platform": "bluedart", "total_count": 6, "total_sale_amount": 15500}],
        },
    },
    "UnReconcile": {
        "providers": {"cod": [{"platform": "bluedart", "total_count": 1, "total_sale_amount": 2000}]},
    },
}


def run():
    service = DashboardService()
    views = service.build_merged_views(FIRST_HALF, SECOND_HALF)

    context = ReportContext(
        start_date=date(2025, 3, 1),
        end_date=date(2025, 3, 31),
        date_field=DateField.SETTLEMENT,
        platform=Platform.D2C,
    )
    generator = ReportGenerator(views, context)

    print(generator.to_summary_text())
    print()
    print(generator.to_csv())


if __name__ == "__main__":
    run()
