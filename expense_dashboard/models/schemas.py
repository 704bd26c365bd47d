from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from expense_dashboard.utils import to_cents, validate_month

# alias so a field named "date" can still use the type with a default
Day = date

CATEGORIES = ["Food", "Entertainment", "Amenities", "Miscellaneous"]


# 🧾 Expenses
class ExpenseCreate(BaseModel):
    amount: int          # cents; "12.50" strings are dollars
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    date: date           # e.g. "2026-10-19"

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        return to_cents(v)

    @field_validator('description', 'category', mode='before')
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ExpenseUpdate(BaseModel):
    amount: Optional[int] = None
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    date: Optional[Day] = None

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        return to_cents(v)

    @field_validator('description', 'category', 'date', mode='before')
    @classmethod
    def reject_null(cls, v):
        # omitting a field keeps it; sending null is an error
        if v is None:
            raise ValueError('Field cannot be null')
        if isinstance(v, str):
            return v.strip()
        return v

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: int
    description: str
    category: str
    date: date
    created_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )


# 💰 Budgets
class BudgetSet(BaseModel):
    month: str           # "YYYY-MM"
    amount: int          # cents

    @field_validator('month', mode='before')
    @classmethod
    def check_month(cls, v):
        if not isinstance(v, str):
            raise ValueError('Month must be in YYYY-MM format')
        return validate_month(v)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v):
        return to_cents(v)


class BudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    month: str
    amount: int


# 📊 Dashboard
class PeriodTotalsResponse(BaseModel):
    today: int
    week: int
    month: int


class CategorySlice(BaseModel):
    name: str
    value: float         # dollars, for the pie chart


class TopCategory(BaseModel):
    name: str
    amount: int


class MonthlyInsightsResponse(BaseModel):
    total: int
    top_category: Optional[TopCategory] = None
    daily_average: float


class TrendPointResponse(BaseModel):
    label: str
    key: str
    total: float         # dollars


class BudgetProgressResponse(BaseModel):
    month: str
    budget: int
    spent: int
    remaining: int
    progress_fraction: float
    over_budget: bool
    label: str


class DashboardResponse(BaseModel):
    now: date
    totals: PeriodTotalsResponse
    category_breakdown: Dict[str, int]
    category_chart: List[CategorySlice]
    monthly_insights: MonthlyInsightsResponse
    weekly_trend: List[TrendPointResponse]
    monthly_trend: List[TrendPointResponse]
    budget: BudgetProgressResponse


# 🗂️ Grouped lists
class ExpenseGroupResponse(BaseModel):
    key: str
    label: str
    total: int
    expenses: List[ExpenseResponse]


class ErrorResponse(BaseModel):
    message: str
    field: Optional[str] = None
