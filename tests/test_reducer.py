"""
Tests for the state reducer.

Every test builds a small explicit state and checks both the result and
that the input state was left untouched.
"""

import pytest
from pydantic import ValidationError

from finance_compass.migration import build_initial_state, migrate
from finance_compass.models import (
    AppState,
    BudgetState,
    HoldingRow,
    IncomeRow,
    InvestmentsState,
    MarketChangeRow,
    RegularDepositRow,
    SavingsBucket,
    SavingsSection,
    SavingsSectionTab,
    SavingsState,
)
from finance_compass.state import (
    AddRow,
    AddSection,
    DeleteRow,
    LinkInvestmentChange,
    RemoveSection,
    ResetState,
    RowCollection,
    SetInvestmentChangeValue,
    SetInvestmentStartDate,
    UpdateRow,
    UpdateSection,
    make_id,
    parse_action,
    reduce,
)


def make_state(market_changes=None, holdings=None, investment_changes=None) -> AppState:
    return AppState(
        budget=BudgetState(income_streams=[IncomeRow(id="i1", label="Job", monthly_amount=2000)]),
        savings=SavingsState(sections=[SavingsSection(
            id="s1",
            title="Rainy day",
            bucket=SavingsBucket(
                cash_stash=500,
                regular_deposits=[RegularDepositRow(id="r1", amount=1200)],
                market_changes=market_changes or [],
            ),
        )]),
        investments=InvestmentsState(
            holdings=holdings if holdings is not None else [
                HoldingRow(id="h1", name="Wahed", amount=100),
                HoldingRow(id="h2", name="Kraken", amount=50),
            ],
            market_changes=investment_changes or [],
        ),
    )


def bucket_rows(state: AppState):
    return state.find_section("s1").bucket.market_changes


class TestRowEdits:
    """Generic add/update/delete over row collections."""

    def test_add_row_with_id_and_values(self):
        state = make_state()
        result = reduce(state, AddRow(
            collection=RowCollection.MONTHLY_EXPENSES,
            row_id="gym",
            values={"label": "Gym", "amount": 27.99},
        ))
        assert [row.id for row in result.budget.monthly_expenses] == ["gym"]
        assert result.budget.monthly_expenses[0].amount == 27.99
        assert state.budget.monthly_expenses == []

    def test_add_row_generates_id(self):
        result = reduce(make_state(), AddRow(collection=RowCollection.INCOME_STREAMS))
        new_row = result.budget.income_streams[-1]
        assert new_row.id.startswith("income-stream-")
        assert new_row.id != "i1"
        assert new_row.monthly_amount == 0

    def test_add_row_with_taken_id_generates_fresh_one(self):
        result = reduce(make_state(), AddRow(collection=RowCollection.INCOME_STREAMS, row_id="i1"))
        ids = [row.id for row in result.budget.income_streams]
        assert len(set(ids)) == 2

    def test_bucket_rows_need_a_section(self):
        with pytest.raises(ValidationError):
            AddRow(collection=RowCollection.WITHDRAWALS)

    def test_bucket_row_prefix_uses_section(self):
        result = reduce(make_state(), AddRow(collection=RowCollection.WITHDRAWALS, section_id="s1"))
        assert result.find_section("s1").bucket.withdrawals[0].id.startswith("s1-withdraw-")

    def test_update_accepts_camel_case_and_ignores_id(self):
        state = make_state()
        result = reduce(state, UpdateRow(
            collection=RowCollection.INCOME_STREAMS,
            row_id="i1",
            patch={"monthlyAmount": 2500, "id": "hijack"},
        ))
        assert result.budget.income_streams[0].id == "i1"
        assert result.budget.income_streams[0].monthly_amount == 2500
        assert state.budget.income_streams[0].monthly_amount == 2000

    def test_update_rejects_wrong_type(self):
        with pytest.raises(ValidationError):
            reduce(make_state(), UpdateRow(
                collection=RowCollection.INCOME_STREAMS,
                row_id="i1",
                patch={"monthly_amount": "lots"},
            ))

    def test_delete_row(self):
        result = reduce(make_state(), DeleteRow(collection=RowCollection.INCOME_STREAMS, row_id="i1"))
        assert result.budget.income_streams == []

    @pytest.mark.parametrize("action", [
        UpdateRow(collection=RowCollection.INCOME_STREAMS, row_id="missing", patch={"label": "x"}),
        DeleteRow(collection=RowCollection.HOLDINGS, row_id="missing"),
        AddRow(collection=RowCollection.WITHDRAWALS, section_id="missing"),
        UpdateSection(section_id="missing", title="x"),
        RemoveSection(section_id="missing"),
        LinkInvestmentChange(row_id="missing", holding_id="h1"),
    ])
    def test_unknown_ids_are_no_ops(self, action):
        state = make_state()
        assert reduce(state, action) == state


    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_patch_rejected(self, bad):
        """NaN and infinity never reach the state."""
        with pytest.raises(ValidationError):
            reduce(make_state(), UpdateRow(
                collection=RowCollection.REGULAR_DEPOSITS,
                section_id="s1",
                row_id="r1",
                patch={"amount": bad},
            ))

    def test_non_finite_new_row_rejected(self):
        with pytest.raises(ValidationError):
            reduce(make_state(), AddRow(
                collection=RowCollection.HOLDINGS,
                values={"amount": float("nan")},
            ))


class TestBucketMarketChanges:
    """Bucket market changes are re-chained after every edit."""

    def test_new_row_starts_at_final_total(self):
        result = reduce(make_state(), AddRow(
            collection=RowCollection.BUCKET_MARKET_CHANGES,
            section_id="s1",
            row_id="m1",
        ))
        row = bucket_rows(result)[0]
        assert row.current_value == 700
        assert row.amount == 0

    def test_new_row_with_delta(self):
        result = reduce(make_state(), AddRow(
            collection=RowCollection.BUCKET_MARKET_CHANGES,
            section_id="s1",
            values={"amount": 25},
        ))
        assert bucket_rows(result)[0].current_value == 725

    def test_amount_edit_is_relative(self):
        state = make_state(market_changes=[
            MarketChangeRow(id="m1", amount=50, current_value=750),
            MarketChangeRow(id="m2", amount=50, current_value=800),
        ])
        result = reduce(state, UpdateRow(
            collection=RowCollection.BUCKET_MARKET_CHANGES,
            section_id="s1",
            row_id="m1",
            patch={"amount": 100},
        ))
        rows = bucket_rows(result)
        assert [row.current_value for row in rows] == [800, 800]
        assert [row.amount for row in rows] == [100, 0]

    def test_current_value_edit_is_absolute(self):
        state = make_state(market_changes=[
            MarketChangeRow(id="m1", amount=50, current_value=750),
            MarketChangeRow(id="m2", amount=50, current_value=800),
        ])
        result = reduce(state, UpdateRow(
            collection=RowCollection.BUCKET_MARKET_CHANGES,
            section_id="s1",
            row_id="m1",
            patch={"currentValue": 720},
        ))
        assert [row.amount for row in bucket_rows(result)] == [20, 80]

    def test_delete_rechains(self):
        state = make_state(market_changes=[
            MarketChangeRow(id="m1", amount=50, current_value=750),
            MarketChangeRow(id="m2", amount=50, current_value=800),
        ])
        result = reduce(state, DeleteRow(
            collection=RowCollection.BUCKET_MARKET_CHANGES,
            section_id="s1",
            row_id="m1",
        ))
        rows = bucket_rows(result)
        assert [row.id for row in rows] == ["m2"]
        assert rows[0].amount == 100


class TestInvestmentMarketChanges:

    def test_new_row_links_first_holding(self):
        result = reduce(make_state(), AddRow(collection=RowCollection.INVESTMENT_MARKET_CHANGES, row_id="im1"))
        row = result.investments.market_changes[0]
        assert row.holding_id == "h1"
        assert row.current_value == 100
        assert row.amount == 0

    def test_new_row_without_holdings(self):
        result = reduce(make_state(holdings=[]), AddRow(collection=RowCollection.INVESTMENT_MARKET_CHANGES))
        row = result.investments.market_changes[0]
        assert row.holding_id == ""
        assert row.current_value == 0

    def test_new_row_with_link_and_value(self):
        result = reduce(make_state(), AddRow(
            collection=RowCollection.INVESTMENT_MARKET_CHANGES,
            values={"holdingId": "h2", "currentValue": 80},
        ))
        row = result.investments.market_changes[0]
        assert row.holding_id == "h2"
        assert row.amount == 30

    def test_relink_keeps_absolute_value(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        result = reduce(state, LinkInvestmentChange(row_id="im1", holding_id="h2"))
        row = result.investments.market_changes[0]
        assert (row.holding_id, row.current_value, row.amount) == ("h2", 120, 70)

    def test_set_value(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        result = reduce(state, SetInvestmentChangeValue(row_id="im1", current_value=150))
        row = result.investments.market_changes[0]
        assert (row.current_value, row.amount) == (150, 50)

    def test_amount_edit_refreshes_value(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        result = reduce(state, UpdateRow(
            collection=RowCollection.INVESTMENT_MARKET_CHANGES,
            row_id="im1",
            patch={"amount": 30},
        ))
        row = result.investments.market_changes[0]
        assert (row.current_value, row.amount) == (130, 30)

    def test_deleting_holding_unlinks_rows(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
            MarketChangeRow(id="im2", amount=5, current_value=55, holding_id="h2"),
        ])
        result = reduce(state, DeleteRow(collection=RowCollection.HOLDINGS, row_id="h1"))
        assert [holding.id for holding in result.investments.holdings] == ["h2"]
        assert [row.holding_id for row in result.investments.market_changes] == ["", "h2"]

    def test_start_date(self):
        result = reduce(make_state(), SetInvestmentStartDate(start_date="01/02/2024"))
        assert result.investments.start_date == "01/02/2024"


    def test_new_row_with_unknown_holding_is_unassigned(self):
        result = reduce(make_state(), AddRow(
            collection=RowCollection.INVESTMENT_MARKET_CHANGES,
            values={"holdingId": "no-such-holding", "currentValue": 80},
        ))
        row = result.investments.market_changes[0]
        assert (row.holding_id, row.current_value, row.amount) == ("", 80, 80)
        assert migrate(result).investments.market_changes == result.investments.market_changes

    def test_link_to_unknown_holding_unassigns(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        result = reduce(state, LinkInvestmentChange(row_id="im1", holding_id="no-such-holding"))
        row = result.investments.market_changes[0]
        assert (row.holding_id, row.current_value, row.amount) == ("", 120, 120)
        assert migrate(result).investments.market_changes == result.investments.market_changes

    def test_non_finite_value_rejected(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        with pytest.raises(ValidationError):
            reduce(state, UpdateRow(
                collection=RowCollection.INVESTMENT_MARKET_CHANGES,
                row_id="im1",
                patch={"currentValue": float("inf")},
            ))

    def test_patch_to_unknown_holding_unassigns(self):
        state = make_state(investment_changes=[
            MarketChangeRow(id="im1", amount=20, current_value=120, holding_id="h1"),
        ])
        result = reduce(state, UpdateRow(
            collection=RowCollection.INVESTMENT_MARKET_CHANGES,
            row_id="im1",
            patch={"holdingId": "gone"},
        ))
        assert result.investments.market_changes[0].holding_id == ""


class TestSections:

    def test_add_savings_section(self):
        result = reduce(make_state(), AddSection(section_id="s2"))
        section = result.find_section("s2")
        assert section.title == "New savings section"
        assert section.tab == SavingsSectionTab.SAVINGS
        assert section.bucket == SavingsBucket()

    def test_add_investments_tracker(self):
        result = reduce(make_state(), AddSection(tab=SavingsSectionTab.INVESTMENTS))
        section = result.savings.sections[-1]
        assert section.title == "New investments tracker"
        assert section.id.startswith("savings-section-")

    def test_update_section(self):
        result = reduce(make_state(), UpdateSection(section_id="s1", title="Holiday", location="Bank", cash_stash=0))
        section = result.find_section("s1")
        assert (section.title, section.bucket.location, section.bucket.cash_stash) == ("Holiday", "Bank", 0)
        assert section.bucket.regular_deposits[0].id == "r1"

    def test_remove_section(self):
        result = reduce(make_state(), RemoveSection(section_id="s1"))
        assert result.savings.sections == []


class TestMisc:

    def test_reset(self):
        assert reduce(make_state(), ResetState()) == build_initial_state()

    def test_parse_action(self):
        action = parse_action({"type": "delete_row", "collection": "holdings", "row_id": "h1"})
        assert isinstance(action, DeleteRow)
        assert action.collection == RowCollection.HOLDINGS

    def test_parse_action_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_action({"type": "explode"})

    def test_make_id(self):
        new_id = make_id("holding", {"holding-1"})
        assert new_id.startswith("holding-")
        assert len(new_id.split("-")) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
