"""
State Actions

Every change to the app state is described by one of these models and
applied by the reducer. Actions are plain data: they can be logged,
replayed and built from UI form values.

DESIGN DECISION: Row edits are generic over a RowCollection rather than
one action class per table. Rows in a savings bucket are addressed by
their section id plus their row id.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from finance_compass.models.ledger import SavingsSectionTab


class RowCollection(str, Enum):
    """Every editable row table."""
    # Budget
    MONTHLY_EXPENSES = "monthly_expenses"
    YEARLY_EXPENSES = "yearly_expenses"
    MONTHLY_BUDGET_ITEMS = "monthly_budget_items"
    INCOME_STREAMS = "income_streams"
    # Savings bucket (need a section_id)
    REGULAR_DEPOSITS = "regular_deposits"
    ADDITIONAL_DEPOSITS = "additional_deposits"
    WITHDRAWALS = "withdrawals"
    BUCKET_MARKET_CHANGES = "bucket_market_changes"
    # Investments
    HOLDINGS = "holdings"
    INVESTMENT_MARKET_CHANGES = "investment_market_changes"

    @property
    def is_bucket_collection(self) -> bool:
        return self in {
            RowCollection.REGULAR_DEPOSITS,
            RowCollection.ADDITIONAL_DEPOSITS,
            RowCollection.WITHDRAWALS,
            RowCollection.BUCKET_MARKET_CHANGES,
        }


class _RowAction(BaseModel):
    collection: RowCollection
    section_id: Optional[str] = Field(
        default=None,
        description="Owning savings section; required for bucket collections"
    )

    @model_validator(mode="after")
    def require_section_for_bucket_rows(self) -> "_RowAction":
        if self.collection.is_bucket_collection and not self.section_id:
            raise ValueError(f"{self.collection.value} rows need a section_id")
        return self


class AddRow(_RowAction):
    """
    Append a new row.

    `values` pre-fills fields (snake_case or camelCase names). The id is
    generated unless `row_id` is given.
    """
    type: Literal["add_row"] = "add_row"
    row_id: Optional[str] = None
    values: dict[str, Any] = Field(default_factory=dict)


class UpdateRow(_RowAction):
    """Patch fields of one row. The id itself cannot be patched."""
    type: Literal["update_row"] = "update_row"
    row_id: str
    patch: dict[str, Any] = Field(default_factory=dict)


class DeleteRow(_RowAction):
    type: Literal["delete_row"] = "delete_row"
    row_id: str


class AddSection(BaseModel):
    type: Literal["add_section"] = "add_section"
    tab: SavingsSectionTab = SavingsSectionTab.SAVINGS
    section_id: Optional[str] = None
    title: Optional[str] = None


class UpdateSection(BaseModel):
    """Change a section's title or its bucket's location / cash stash."""
    type: Literal["update_section"] = "update_section"
    section_id: str
    title: Optional[str] = None
    location: Optional[str] = None
    cash_stash: Optional[float] = Field(default=None, allow_inf_nan=False)


class RemoveSection(BaseModel):
    type: Literal["remove_section"] = "remove_section"
    section_id: str


class SetInvestmentStartDate(BaseModel):
    type: Literal["set_investment_start_date"] = "set_investment_start_date"
    start_date: str


class LinkInvestmentChange(BaseModel):
    """Re-link an investment market-change row, keeping its absolute value."""
    type: Literal["link_investment_change"] = "link_investment_change"
    row_id: str
    holding_id: str = ""


class SetInvestmentChangeValue(BaseModel):
    """Record an absolute value on an investment market-change row."""
    type: Literal["set_investment_change_value"] = "set_investment_change_value"
    row_id: str
    current_value: float = Field(allow_inf_nan=False)


class ResetState(BaseModel):
    """Reload the seed defaults."""
    type: Literal["reset_state"] = "reset_state"


Action = Annotated[
    Union[
        AddRow,
        UpdateRow,
        DeleteRow,
        AddSection,
        UpdateSection,
        RemoveSection,
        SetInvestmentStartDate,
        LinkInvestmentChange,
        SetInvestmentChangeValue,
        ResetState,
    ],
    Field(discriminator="type"),
]

_action_adapter = TypeAdapter(Action)


def parse_action(data: Any) -> Action:
    """
    Build an action from a plain mapping (e.g. `{"type": "delete_row", ...}`).

    Raises:
        pydantic.ValidationError: If the mapping is not a valid action
    """
    return _action_adapter.validate_python(data)
