# analytics.py - dashboard metrics computed from a snapshot of expenses
"""Pure aggregation over expense records.

Every function takes the already-fetched expenses (anything exposing
``id``, ``amount``, ``category``, ``date`` and ``description``) plus a
reference ``now`` and returns plain values. Nothing here touches the
database, and empty input always yields zero-valued metrics.

Amounts go in as integer cents. Chart series come out in dollars
(``cents / 100``), everything else stays in cents.
"""
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Iterable, List, Dict, NamedTuple, Optional

from expense_dashboard.utils import format_amount, month_key

WEEKLY_TREND_WEEKS = 6
MONTHLY_TREND_MONTHS = 6


class PeriodTotals(NamedTuple):
    today: int
    week: int
    month: int


class CategoryTotal(NamedTuple):
    name: str
    amount: int


class MonthlyInsights(NamedTuple):
    total: int
    top_category: Optional[CategoryTotal]
    daily_average: float


class TrendPoint(NamedTuple):
    label: str
    key: str
    total: float


class BudgetProgress(NamedTuple):
    budget: int
    spent: int
    remaining: int
    progress_fraction: float
    over_budget: bool
    label: str


class ExpenseGroup(NamedTuple):
    key: str
    label: str
    total: int
    expenses: list


class Dashboard(NamedTuple):
    now: date
    totals: PeriodTotals
    categories: Dict[str, int]
    insights: MonthlyInsights
    weekly_trend: List[TrendPoint]
    monthly_trend: List[TrendPoint]
    budget: BudgetProgress


def as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _same_month(day: date, now: date) -> bool:
    return day.year == now.year and day.month == now.month


def _shift_month(year: int, month: int, delta: int):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def start_of_week(now) -> date:
    """Monday of the week containing ``now``"""
    now = as_date(now)
    return now - timedelta(days=now.weekday())


# --- totals -----------------------------------------------------------------

def period_totals(expenses: Iterable, now) -> PeriodTotals:
    now = as_date(now)
    monday = start_of_week(now)
    today = week = month = 0

    for exp in expenses:
        day = as_date(exp.date)
        if day == now:
            today += exp.amount
        if monday <= day <= now:
            week += exp.amount
        if _same_month(day, now):
            month += exp.amount

    return PeriodTotals(today=today, week=week, month=month)


def category_breakdown(expenses: Iterable) -> Dict[str, int]:
    """Total cents per category over the whole history, in first-seen order"""
    totals: Dict[str, int] = {}
    for exp in expenses:
        totals[exp.category] = totals.get(exp.category, 0) + exp.amount
    return totals


def monthly_insights(expenses: Iterable, now) -> MonthlyInsights:
    now = as_date(now)
    month_expenses = [e for e in expenses if _same_month(as_date(e.date), now)]
    if not month_expenses:
        return MonthlyInsights(total=0, top_category=None, daily_average=0.0)

    total = sum(e.amount for e in month_expenses)
    per_category = category_breakdown(month_expenses)
    # max() keeps the first of equal sums, so ties go to the first-seen category
    name, amount = max(per_category.items(), key=lambda item: item[1])

    return MonthlyInsights(
        total=total,
        top_category=CategoryTotal(name=name, amount=amount),
        daily_average=total / now.day,
    )


# --- trend series -----------------------------------------------------------

def _daily_sums(expenses: Iterable) -> Dict[date, int]:
    sums: Dict[date, int] = {}
    for exp in expenses:
        day = as_date(exp.date)
        sums[day] = sums.get(day, 0) + exp.amount
    return sums


def weekly_trend(expenses: Iterable, now) -> List[TrendPoint]:
    """One point per day from six weeks before ``now`` through ``now``"""
    now = as_date(now)
    sums = _daily_sums(expenses)
    # the window is cut short at the first representable day
    span = min(WEEKLY_TREND_WEEKS * 7, (now - date.min).days)
    start = now - timedelta(days=span)

    points = []
    for offset in range(span + 1):
        day = start + timedelta(days=offset)
        points.append(TrendPoint(
            label=day.strftime("%a"),
            key=day.isoformat(),
            total=sums.get(day, 0) / 100,
        ))
    return points


def monthly_trend(expenses: Iterable, now) -> List[TrendPoint]:
    """One point per calendar month, the last six months ending with ``now``'s"""
    now = as_date(now)
    sums: Dict[str, int] = {}
    for exp in expenses:
        key = month_key(as_date(exp.date))
        sums[key] = sums.get(key, 0) + exp.amount

    points = []
    for offset in range(MONTHLY_TREND_MONTHS - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        if year < 1:
            continue
        first_day = date(year, month, 1)
        key = month_key(first_day)
        points.append(TrendPoint(
            label=first_day.strftime("%b"),
            key=key,
            total=sums.get(key, 0) / 100,
        ))
    return points


# --- budget -----------------------------------------------------------------

def budget_progress(budget_amount: Optional[int], month_total: int) -> BudgetProgress:
    budget_amount = budget_amount or 0
    remaining = budget_amount - month_total

    if budget_amount > 0:
        fraction = min(max(month_total / budget_amount, 0.0), 1.0)
    else:
        fraction = 0.0

    over_budget = remaining < 0
    prefix = "Over by" if over_budget else "Remaining"

    return BudgetProgress(
        budget=budget_amount,
        spent=month_total,
        remaining=remaining,
        progress_fraction=fraction,
        over_budget=over_budget,
        label=f"{prefix}: {format_amount(abs(remaining))}",
    )


# --- list views -------------------------------------------------------------

def search_expenses(expenses: Iterable, query: Optional[str]) -> list:
    """Case-insensitive substring match on description or category"""
    expenses = list(expenses)
    if not query:
        return expenses
    needle = query.lower()
    return [
        e for e in expenses
        if needle in (e.description or "").lower() or needle in (e.category or "").lower()
    ]


def sort_expenses(expenses: Iterable) -> list:
    """Newest first: date descending, then id descending"""
    return sorted(expenses, key=lambda e: (as_date(e.date), e.id or 0), reverse=True)


def date_label(day, now) -> str:
    day, now = as_date(day), as_date(now)
    if day == now:
        return "Today"
    if (now - day).days == 1:
        return "Yesterday"
    return f"{day.strftime('%A, %b')} {day.day}"


def group_by_date(expenses: Iterable, now) -> List[ExpenseGroup]:
    grouped: "OrderedDict[date, list]" = OrderedDict()
    for exp in sort_expenses(expenses):
        grouped.setdefault(as_date(exp.date), []).append(exp)

    return [
        ExpenseGroup(
            key=day.isoformat(),
            label=date_label(day, now),
            total=sum(e.amount for e in items),
            expenses=items,
        )
        for day, items in grouped.items()
    ]


def group_by_month(expenses: Iterable) -> List[ExpenseGroup]:
    """Calendar-month groups, newest month first"""
    grouped: "OrderedDict[str, list]" = OrderedDict()
    for exp in sort_expenses(expenses):
        grouped.setdefault(month_key(as_date(exp.date)), []).append(exp)

    groups = []
    for key, items in grouped.items():
        first_day = as_date(f"{key}-01")
        groups.append(ExpenseGroup(
            key=key,
            label=first_day.strftime("%B %Y"),
            total=sum(e.amount for e in items),
            expenses=items,
        ))
    return groups


# --- everything the dashboard shows -----------------------------------------

def build_dashboard(expenses: Iterable, budget_amount: Optional[int], now) -> Dashboard:
    now = as_date(now)
    expenses = list(expenses)
    totals = period_totals(expenses, now)

    return Dashboard(
        now=now,
        totals=totals,
        categories=category_breakdown(expenses),
        insights=monthly_insights(expenses, now),
        weekly_trend=weekly_trend(expenses, now),
        monthly_trend=monthly_trend(expenses, now),
        budget=budget_progress(budget_amount, totals.month),
    )
