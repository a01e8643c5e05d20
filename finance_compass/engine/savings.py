"""
Savings Bucket Summary Engine

    base value  = regular + additional - withdrawals - cash stash
    final total = base value + sum(market-change deltas)

The cash stash is money held outside the tracked account, so it is
taken off the base value here and added back in the net worth total.
"""

from finance_compass.engine.reconciliation import normalize_savings_market_changes
from finance_compass.models.ledger import SavingsBucket
from finance_compass.models.summary import SavingsSummary


def calculate_savings_summary(bucket: SavingsBucket) -> SavingsSummary:
    """
    Summarize one bucket. Pure and deterministic.

    A zero base value gives a None ratio. A negative base value (bucket
    in deficit) is allowed and ratios are still taken against it.
    """
    regular_total = sum(row.amount for row in bucket.regular_deposits)
    regular_target_total = sum(row.target for row in bucket.regular_deposits)
    additional_total = sum(row.amount for row in bucket.additional_deposits)
    withdrawal_total = sum(row.amount for row in bucket.withdrawals)
    total_before_withdrawals = regular_total + additional_total
    base_value = total_before_withdrawals - withdrawal_total - bucket.cash_stash

    normalized_market_changes = normalize_savings_market_changes(bucket.market_changes, base_value)
    market_change_total = sum(row.amount for row in normalized_market_changes)
    market_change_ratio = market_change_total / base_value if base_value != 0 else None

    return SavingsSummary(
        regular_total=regular_total,
        regular_target_total=regular_target_total,
        additional_total=additional_total,
        withdrawal_total=withdrawal_total,
        total_before_withdrawals=total_before_withdrawals,
        base_value=base_value,
        normalized_market_changes=normalized_market_changes,
        market_change_total=market_change_total,
        market_change_ratio=market_change_ratio,
        final_total=base_value + market_change_total,
    )


def renormalize_bucket(bucket: SavingsBucket) -> SavingsBucket:
    """Return the bucket with its market-change chain reconciled."""
    summary = calculate_savings_summary(bucket)
    return bucket.model_copy(update={"market_changes": summary.normalized_market_changes})
