"""Tests for provider normalization and the gateway/COD splitter."""

import pytest

from recon_insights.reconciliation import (
    ProviderCategory,
    ProviderOrigin,
    display_name,
    normalize_providers,
    split_providers,
)
from recon_insights.reconciliation.providers import COD_DISPLAY_NAME


class TestDisplayName:
    """Tests for the provider display-name lookup."""

    def test_known_codes(self):
        """Test known codes resolve case-insensitively."""
        assert display_name("payu") == "PayU"
        assert display_name("PayU") == "PayU"
        assert display_name("bluedart") == "Blue Dart"

    def test_unknown_code_falls_back(self):
        """Test unmapped codes are returned as-is."""
        assert display_name("shipfast") == "shipfast"
        assert display_name(None) == ""


class TestNormalizeProviders:
    """Tests for normalize_providers."""

    def test_known_and_cod_keys(self, main_summary):
        """Test known gateways and COD partners are mapped in key order."""
        records = normalize_providers(main_summary["Reconcile"]["providers"])

        assert [r.code for r in records] == ["paytm", "payu", "delhivery", "bluedart"]
        paytm = records[0]
        assert paytm.display_name == "Paytm"
        assert paytm.category == ProviderCategory.GATEWAY
        assert paytm.origin == ProviderOrigin.KNOWN
        assert paytm.order_count == 45
        assert paytm.sale_amount == 112500.0
        assert paytm.commission == 2000.0
        assert paytm.gst_on_commission == 360.0

        delhivery = records[2]
        assert delhivery.category == ProviderCategory.COD
        assert delhivery.origin == ProviderOrigin.COD
        assert delhivery.display_name == "Delhivery"
        assert delhivery.commission is None
        assert delhivery.gst_on_commission is None

    def test_dynamic_keys_are_included(self):
        """Test unknown keys holding objects or lists become gateway records."""
        raw = {
            "juspay": {"total_count": 3, "total_sale_amount": "900"},
            "wallets": [
                {"platform": "mobikwik", "total_count": 2, "total_sale_amount": 100},
                {"platform": "freecharge", "total_count": 1, "total_sale_amount": 50},
            ],
        }
        records = normalize_providers(raw)

        assert [r.code for r in records] == ["juspay", "mobikwik", "freecharge"]
        assert all(r.origin == ProviderOrigin.DYNAMIC for r in records)
        assert all(r.category == ProviderCategory.GATEWAY for r in records)
        assert records[0].display_name == "juspay"
        assert records[1].source_key == "wallets"

    def test_non_object_values_are_skipped(self):
        """Test scalar values and junk list items are ignored."""
        raw = {
            "total": 500,
            "note": "n/a",
            "paytm": {"total_count": 1, "total_sale_amount": 10},
            "cod": [None, "x", {"platform": "dtdc", "total_count": 2}],
        }
        records = normalize_providers(raw)

        assert [r.code for r in records] == ["paytm", "dtdc"]

    def test_duplicate_codes_are_preserved(self):
        """Test that duplicate codes under different keys are not deduplicated."""
        raw = {
            "paytm": {"platform": "paytm", "total_count": 1},
            "paytm_upi": {"platform": "paytm", "total_count": 2},
        }
        records = normalize_providers(raw)

        assert len(records) == 2
        assert [r.order_count for r in records] == [1, 2]

    def test_malformed_fields_degrade_to_zero(self):
        """Test that bad numeric fields become zero."""
        records = normalize_providers({"payu": {"total_count": "lots", "total_sale_amount": None}})

        assert records[0].order_count == 0
        assert records[0].sale_amount == 0.0

    @pytest.mark.parametrize("raw", [None, [], "providers", 42])
    def test_non_mapping_block(self, raw):
        """Test that a non-object provider block yields no records."""
        assert normalize_providers(raw) == []

    def test_negative_amounts_are_stripped(self):
        """Test sign is stripped at ingestion."""
        records = normalize_providers({"cod": [{"platform": "dtdc", "total_sale_amount": "-1,200"}]})
        assert records[0].sale_amount == 1200.0


class TestSplitProviders:
    """Tests for split_providers."""

    def test_every_record_lands_in_one_category(self, main_summary):
        """Test gateways + cod account for every record."""
        records = normalize_providers(main_summary["Reconcile"]["providers"])
        split = split_providers(records)

        assert len(split.gateways) + len(split.cod) == len(records)
        assert [r.code for r in split.gateways] == ["paytm", "payu"]
        assert [r.code for r in split.cod] == ["delhivery", "bluedart"]

    def test_cod_aggregate(self, main_summary):
        """Test the synthesized Cash on Delivery record sums its members."""
        split = split_providers(normalize_providers(main_summary["Reconcile"]["providers"]))
        aggregate = split.cod_aggregate

        assert aggregate is not None
        assert aggregate.display_name == COD_DISPLAY_NAME
        assert aggregate.category == ProviderCategory.COD
        assert aggregate.order_count == 15
        assert aggregate.sale_amount == 37500.0

    def test_no_cod_records(self):
        """Test there is no aggregate when no COD partners exist."""
        split = split_providers(normalize_providers({"paytm": {"total_count": 1}}))

        assert split.cod == []
        assert split.cod_aggregate is None

    def test_empty(self):
        """Test splitting an empty list."""
        split = split_providers([])
        assert split.gateways == [] and split.cod == []
