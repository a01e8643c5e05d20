"""Schema migration package."""

from finance_compass.migration.coercion import (
    RowIdAllocator,
    to_finite_number,
    to_optional_finite_number,
    to_text,
)
from finance_compass.migration.defaults import (
    build_default_monthly_budget_items,
    build_initial_raw_state,
    load_seed,
)
from finance_compass.migration.migrator import (
    build_initial_state,
    infer_budget_category,
    infer_holding_id_from_note,
    migrate,
    migrate_bucket,
    repair_holding_links,
)


__all__ = [
    "RowIdAllocator",
    "build_default_monthly_budget_items",
    "build_initial_raw_state",
    "build_initial_state",
    "infer_budget_category",
    "infer_holding_id_from_note",
    "load_seed",
    "migrate",
    "migrate_bucket",
    "repair_holding_links",
    "to_finite_number",
    "to_optional_finite_number",
    "to_text",
]
