"""Tests for invoice totals and MRP derivation."""

from decimal import Decimal

from app.domain.models.invoice import LineItem
from app.domain.services.invoice_totals import (
    compute_invoice_totals,
    derive_mrp,
    line_amount,
    mrp_divergence,
    round_currency,
    warn_on_mrp_divergence,
)


class TestComputeInvoiceTotals:
    """Test taxable / tax / grand total aggregation."""

    def test_empty_items(self):
        totals = compute_invoice_totals([])
        assert totals.taxable_amount == Decimal("0")
        assert totals.tax_amount == Decimal("0")
        assert totals.grand_total == Decimal("0")

    def test_none_items(self):
        totals = compute_invoice_totals(None)
        assert totals.grand_total == Decimal("0")

    def test_single_item(self):
        totals = compute_invoice_totals(
            [LineItem(name="Hamper", pre_tax_price=100, quantity=2, gst_percent=18)]
        )
        assert totals.taxable_amount == Decimal("200.00")
        assert totals.tax_amount == Decimal("36.00")
        assert totals.grand_total == Decimal("236.00")

    def test_zero_price(self):
        totals = compute_invoice_totals(
            [LineItem(name="Sample", pre_tax_price=0, quantity=5, gst_percent=18)]
        )
        assert totals.taxable_amount == 0
        assert totals.tax_amount == 0
        assert totals.grand_total == 0

    def test_mixed_rates(self):
        items = [
            LineItem(pre_tax_price=1000, quantity=10, gst_percent=18),
            LineItem(pre_tax_price=500, quantity=4, gst_percent=12),
        ]
        totals = compute_invoice_totals(items)
        assert totals.taxable_amount == Decimal("12000.00")
        assert totals.tax_amount == Decimal("2040.00")
        assert totals.grand_total == Decimal("14040.00")

    def test_accepts_plain_mappings(self):
        totals = compute_invoice_totals([{"pre_tax_price": 100, "quantity": 2, "gst_percent": 18}])
        assert totals.grand_total == Decimal("236.00")

    def test_malformed_fields_count_as_zero(self):
        items = [
            {"pre_tax_price": "abc", "quantity": 3, "gst_percent": 18},
            {"pre_tax_price": -50, "quantity": 2, "gst_percent": 18},
            {"pre_tax_price": 100, "quantity": None, "gst_percent": 18},
            {"pre_tax_price": 100, "quantity": 1},
            {},
        ]
        totals = compute_invoice_totals(items)
        assert totals.taxable_amount == Decimal("100.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.grand_total == Decimal("100.00")

    def test_rounds_aggregate_not_lines(self):
        # Each line's tax is 0.045; rounding per line would give 0.05 * 3 = 0.15
        items = [{"pre_tax_price": "0.25", "quantity": 1, "gst_percent": 18}] * 3
        totals = compute_invoice_totals(items)
        assert totals.taxable_amount == Decimal("0.75")
        assert totals.tax_amount == Decimal("0.14")  # 0.135 → half-up
        assert totals.grand_total == Decimal("0.89")  # 0.885 → half-up

    def test_grand_total_rounded_from_unrounded_sum(self):
        items = [
            {"pre_tax_price": "333.333", "quantity": 3, "gst_percent": 18},
            {"pre_tax_price": "19.99", "quantity": 7, "gst_percent": 12},
        ]
        totals = compute_invoice_totals(items)
        raw_taxable = Decimal("333.333") * 3 + Decimal("19.99") * 7
        raw_tax = Decimal("333.333") * 3 * Decimal("0.18") + Decimal("19.99") * 7 * Decimal("0.12")
        assert totals.grand_total == round_currency(raw_taxable + raw_tax)

    def test_idempotent(self):
        items = [LineItem(pre_tax_price=749.5, quantity=3, gst_percent=18)]
        assert compute_invoice_totals(items) == compute_invoice_totals(items)
        assert items[0].pre_tax_price == Decimal("749.5")


class TestDeriveMrp:
    """Test tax-inclusive MRP derivation."""

    def test_twelve_percent(self):
        assert round_currency(derive_mrp(500, 12)) == Decimal("560.00")

    def test_zero_gst(self):
        assert derive_mrp(500, 0) == Decimal("500")

    def test_malformed_inputs(self):
        assert derive_mrp(None, 18) == 0
        assert derive_mrp("250", "abc") == Decimal("250")

    def test_line_amount_is_mrp_times_quantity(self):
        item = LineItem(pre_tax_price=1000, quantity=10, gst_percent=18)
        assert line_amount(item) == Decimal("11800.00")

    def test_line_amounts_reconcile_with_grand_total(self):
        items = [
            LineItem(pre_tax_price=1000, quantity=10, gst_percent=18),
            LineItem(pre_tax_price=500, quantity=4, gst_percent=12),
        ]
        total = sum(line_amount(i) for i in items)
        assert total == compute_invoice_totals(items).grand_total


class TestSuppliedMrp:
    """Independently supplied MRPs are ignored for amounts but reported."""

    def test_supplied_mrp_does_not_change_amount(self):
        item = LineItem(pre_tax_price=500, quantity=4, gst_percent=12, supplied_mrp=600)
        assert line_amount(item) == Decimal("2240.00")

    def test_divergence(self):
        item = LineItem(pre_tax_price=500, quantity=1, gst_percent=12, supplied_mrp=600)
        assert mrp_divergence(item) == Decimal("40")

    def test_no_supplied_mrp(self):
        assert mrp_divergence(LineItem(pre_tax_price=500, gst_percent=12)) is None

    def test_warn_counts_only_divergent_lines(self):
        items = [
            LineItem(id="a", pre_tax_price=1000, gst_percent=18, supplied_mrp=1180),
            LineItem(id="b", pre_tax_price=500, gst_percent=12, supplied_mrp=600),
            LineItem(id="c", pre_tax_price=500, gst_percent=12),
        ]
        assert warn_on_mrp_divergence(items, "LW-1") == 1
