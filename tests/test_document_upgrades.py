"""
Tests for schema upgrades of documents written by the JSON-file service.
"""
import pytest

from kasir.core.security import hash_api_key
from kasir.services.document_upgrades import (
    CURRENT_SCHEMA_VERSION,
    document_kind,
    upgrade_document,
    upgrade_legacy_sale,
)

LEGACY_SALE = {
    "id": "200524001",
    "timestamp": "2024-05-20T03:00:00.000Z",
    "cashier": "Budi",
    "buyer": "Ani",
    "items": [
        {"id": "PEN001", "name": "Pen", "qty": 2, "price": 5, "discount": 10, "total": 9},
        {"id": "BOOK01", "name": "Notebook", "qty": 1, "price": 12.5, "discount": 0, "total": 12.5},
    ],
    "total": 21.5,
    "paymentAmount": 25,
    "change": 3.5,
}


class TestDocumentKind:
    """Tests for mapping keys to document kinds."""

    @pytest.mark.parametrize("key,kind", [
        ("sales-2024-05", "sales"),
        ("reports/daily/2024-05-20", "daily_report"),
        ("reports/monthly/2024-05", "monthly_report"),
        ("sequences/2024-05-20", "sequence"),
        ("items", "items"),
        ("api-keys", "api-keys"),
    ])
    def test_kinds(self, key, kind):
        assert document_kind(key) == kind


class TestLegacySale:
    """Tests for converting the legacy sale shape."""

    def test_lines_become_line_items(self):
        sale = upgrade_legacy_sale(LEGACY_SALE)

        assert sale["id"] == "200524001"
        assert sale["cashierUser"] == "Budi"
        assert sale["total"] == 21.5
        assert sale["paymentAmount"] == 25
        assert sale["change"] == 3.5

        pen = sale["lineItems"][0]
        assert pen["itemId"] == "PEN001"
        assert pen["quantity"] == 2
        assert pen["unitPrice"] == 5
        assert pen["discount"] == 10
        assert pen["unitPriceAfterDiscount"] == 4.5
        assert pen["lineTotal"] == 9

    def test_current_shape_is_left_alone(self):
        sale = upgrade_legacy_sale(LEGACY_SALE)

        assert upgrade_legacy_sale(sale) is sale


class TestUpgradeDocument:
    """Tests for the per-kind upgrade chain."""

    def test_sales_bucket(self):
        bucket = upgrade_document("sales-2024-05", 1, [LEGACY_SALE])

        assert len(bucket) == 1
        assert bucket[0]["lineItems"][1]["name"] == "Notebook"

    def test_daily_report_is_recomputed(self):
        body = {"date": "2024-05-20", "totalRevenue": 999, "transactionCount": 7, "transactions": [LEGACY_SALE]}

        report = upgrade_document("reports/daily/2024-05-20", 1, body)

        assert report["date"] == "2024-05-20"
        assert report["totalRevenue"] == 21.5
        assert report["transactionCount"] == 1

    def test_monthly_report_gains_rankings(self):
        body = {"transactions": [LEGACY_SALE]}

        report = upgrade_document("reports/monthly/2024-05", 1, body)

        assert report["yearMonth"] == "2024-05"
        assert report["topCustomers"] == [{"customer": "ani", "total": 21.5}]
        assert report["popularItems"][0] == {"id": "PEN001", "name": "Pen", "quantity": 2}

    def test_plaintext_api_keys_are_hashed(self):
        keys = upgrade_document("api-keys", 1, [
            {"key": "legacy-key", "user": "owner"},
            {"keyHash": "abc", "user": "kept"},
            {"key": "", "user": "dropped"},
        ])

        assert keys == [
            {"keyHash": hash_api_key("legacy-key"), "user": "owner"},
            {"keyHash": "abc", "user": "kept"},
        ]

    def test_current_version_is_untouched(self):
        body = [{"anything": True}]

        assert upgrade_document("items", CURRENT_SCHEMA_VERSION, body) is body

    def test_unknown_kind_passes_through(self):
        assert upgrade_document("sequences/2024-05-20", 1, {"count": 4}) == {"count": 4}

    def test_newer_version_is_rejected(self):
        with pytest.raises(ValueError):
            upgrade_document("items", CURRENT_SCHEMA_VERSION + 1, [])
