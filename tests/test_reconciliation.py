"""Tests for the market-change reconciliation rules."""

import pytest

from finance_compass.engine import (
    derive_investment_row_delta,
    normalize_savings_market_changes,
    reconcile_market_change,
    relink_investment_change,
    resolve_investment_row_current_value,
    set_investment_change_value,
)
from finance_compass.models import HoldingRow, MarketChangeRow


HOLDINGS = [
    HoldingRow(id="h1", name="Wahed", amount=100),
    HoldingRow(id="h2", name="Kraken", amount=50),
]


class TestSavingsChain:
    """Savings rows chain from the bucket's base value in list order."""

    def test_explicit_value_wins(self):
        row = reconcile_market_change(MarketChangeRow(id="m", amount=999, current_value=120), 100)
        assert row.current_value == 120
        assert row.amount == 20

    def test_delta_derives_value(self):
        row = reconcile_market_change(MarketChangeRow(id="m", amount=5), 100)
        assert row.current_value == 105
        assert row.amount == 5

    def test_chain(self):
        rows = normalize_savings_market_changes([
            MarketChangeRow(id="a", amount=10),
            MarketChangeRow(id="b", current_value=150),
            MarketChangeRow(id="c", amount=-20),
        ], 100)
        assert [row.current_value for row in rows] == [110, 150, 130]
        assert [row.amount for row in rows] == [10, 40, -20]

    def test_each_delta_matches_previous_value(self):
        base = 700
        rows = normalize_savings_market_changes([
            MarketChangeRow(id="a", amount=50),
            MarketChangeRow(id="b", current_value=720),
            MarketChangeRow(id="c", amount=3),
        ], base)
        previous = base
        for row in rows:
            assert row.amount == row.current_value - previous
            previous = row.current_value

    def test_chain_follows_list_order_not_dates(self):
        rows = normalize_savings_market_changes([
            MarketChangeRow(id="late", date="01/02/2025", current_value=200),
            MarketChangeRow(id="early", date="01/01/2025", current_value=150),
        ], 100)
        assert [row.amount for row in rows] == [100, -50]

    def test_fixed_point(self):
        once = normalize_savings_market_changes([
            MarketChangeRow(id="a", amount=10),
            MarketChangeRow(id="b", current_value=90),
        ], 100)
        assert normalize_savings_market_changes(once, 100) == once

    def test_inputs_not_modified(self):
        row = MarketChangeRow(id="a", amount=10)
        normalize_savings_market_changes([row], 100)
        assert row.current_value is None


class TestInvestmentRows:
    """Investment rows are measured against their linked holding."""

    def test_resolve_explicit(self):
        row = MarketChangeRow(id="m", amount=1, current_value=140, holding_id="h1")
        assert resolve_investment_row_current_value(row, HOLDINGS) == 140

    def test_resolve_linked_delta(self):
        row = MarketChangeRow(id="m", amount=20, holding_id="h1")
        assert resolve_investment_row_current_value(row, HOLDINGS) == 120

    def test_resolve_unlinked_delta(self):
        row = MarketChangeRow(id="m", amount=20)
        assert resolve_investment_row_current_value(row, HOLDINGS) == 20

    def test_resolve_dangling_link_as_unlinked(self):
        row = MarketChangeRow(id="m", amount=20, holding_id="gone")
        assert resolve_investment_row_current_value(row, HOLDINGS) == 20

    def test_derive_delta(self):
        assert derive_investment_row_delta(130, "h1", HOLDINGS) == 30
        assert derive_investment_row_delta(130, "", HOLDINGS) == 130
        assert derive_investment_row_delta(130, None, HOLDINGS) == 130

    def test_relink_keeps_absolute_value(self):
        row = MarketChangeRow(id="m", amount=20, holding_id="h1")
        moved = relink_investment_change(row, "h2", HOLDINGS)
        assert moved.holding_id == "h2"
        assert moved.current_value == 120
        assert moved.amount == 70

    def test_unlink_stores_value_as_delta(self):
        row = MarketChangeRow(id="m", amount=20, holding_id="h1")
        moved = relink_investment_change(row, "", HOLDINGS)
        assert moved.current_value == 120
        assert moved.amount == 120

    def test_set_value(self):
        row = MarketChangeRow(id="m", amount=20, holding_id="h1")
        updated = set_investment_change_value(row, 150, HOLDINGS)
        assert updated.current_value == 150
        assert updated.amount == 50


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
