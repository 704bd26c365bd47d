import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Request, Response

from expense_dashboard.errors import NotFoundError
from expense_dashboard.models.schemas import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse,
    BudgetSet, BudgetResponse,
    DashboardResponse, ExpenseGroupResponse, ErrorResponse,
)
from expense_dashboard.services import analytics
from expense_dashboard.services.export import expenses_to_csv
from expense_dashboard.services.storage import ExpenseStore, BudgetStore
from expense_dashboard.utils import MAX_INT32, month_key

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def get_expense_store(request: Request) -> ExpenseStore:
    return request.app.state.expense_store


def get_budget_store(request: Request) -> BudgetStore:
    return request.app.state.budget_store


def _group_response(group: analytics.ExpenseGroup) -> ExpenseGroupResponse:
    return ExpenseGroupResponse(
        key=group.key,
        label=group.label,
        total=group.total,
        expenses=[ExpenseResponse.model_validate(e) for e in group.expenses],
    )


# 🧾 Expenses
@router.get("/expenses", response_model=List[ExpenseResponse])
async def list_expenses(search: Optional[str] = None, store: ExpenseStore = Depends(get_expense_store)):
    expenses = await store.list()
    return analytics.search_expenses(expenses, search)


@router.get("/expenses/grouped", response_model=List[ExpenseGroupResponse])
async def grouped_expenses(
    search: Optional[str] = None,
    now: Optional[date] = None,
    store: ExpenseStore = Depends(get_expense_store),
):
    """Expenses grouped by day, newest first, with Today/Yesterday headers"""
    expenses = analytics.search_expenses(await store.list(), search)
    groups = analytics.group_by_date(expenses, now or date.today())
    return [_group_response(g) for g in groups]


@router.get("/expenses/export")
async def export_expenses(store: ExpenseStore = Depends(get_expense_store)):
    expenses = await store.list()
    filename = f"expenses_{date.today().isoformat()}.csv"
    logger.info(f"📤 Exporting {len(expenses)} expenses to {filename}")
    return Response(
        content=expenses_to_csv(expenses),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int = Path(..., ge=1, le=MAX_INT32),
    store: ExpenseStore = Depends(get_expense_store),
):
    expense = await store.get(expense_id)
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


@router.post("/expenses", response_model=ExpenseResponse, status_code=201)
async def create_expense(payload: ExpenseCreate, store: ExpenseStore = Depends(get_expense_store)):
    return await store.create(payload.model_dump())


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    payload: ExpenseUpdate,
    expense_id: int = Path(..., ge=1, le=MAX_INT32),
    store: ExpenseStore = Depends(get_expense_store),
):
    expense = await store.update(expense_id, payload.changes())
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


@router.delete("/expenses/{expense_id}", status_code=204)
async def delete_expense(
    expense_id: int = Path(..., ge=1, le=MAX_INT32),
    store: ExpenseStore = Depends(get_expense_store),
):
    # no existence check: deleting a missing id still answers 204
    await store.delete(expense_id)
    return Response(status_code=204)


@router.post("/expenses/{expense_id}/duplicate", response_model=ExpenseResponse, status_code=201)
async def duplicate_expense(
    expense_id: int = Path(..., ge=1, le=MAX_INT32),
    now: Optional[date] = None,
    store: ExpenseStore = Depends(get_expense_store),
):
    """Copy an expense onto today's date"""
    source = await store.get(expense_id)
    if source is None:
        raise NotFoundError("Expense not found")
    return await store.create({
        "amount": source.amount,
        "description": source.description,
        "category": source.category,
        "date": now or date.today(),
    })


# 💰 Budgets
@router.get("/budgets/{month}", response_model=BudgetResponse)
async def get_budget(month: str, store: BudgetStore = Depends(get_budget_store)):
    budget = await store.get(month)
    if budget is None:
        raise NotFoundError("Budget not found")
    return budget


@router.post("/budgets", response_model=BudgetResponse)
async def set_budget(payload: BudgetSet, store: BudgetStore = Depends(get_budget_store)):
    return await store.set(payload.month, payload.amount)


# 📊 Derived views
@router.get("/history", response_model=List[ExpenseGroupResponse])
async def history(search: Optional[str] = None, store: ExpenseStore = Depends(get_expense_store)):
    """Expenses grouped by calendar month, newest month first"""
    expenses = analytics.search_expenses(await store.list(), search)
    return [_group_response(g) for g in analytics.group_by_month(expenses)]


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    now: Optional[date] = None,
    expenses: ExpenseStore = Depends(get_expense_store),
    budgets: BudgetStore = Depends(get_budget_store),
):
    """Every dashboard metric for ``now`` (default today) in one payload"""
    now = now or date.today()
    month = month_key(now)
    items = await expenses.list()
    budget = await budgets.get(month)

    board = analytics.build_dashboard(items, budget.amount if budget else 0, now)
    insights = board.insights

    return DashboardResponse(
        now=board.now,
        totals=board.totals._asdict(),
        category_breakdown=board.categories,
        category_chart=[
            {"name": name, "value": cents / 100} for name, cents in board.categories.items()
        ],
        monthly_insights={
            "total": insights.total,
            "top_category": insights.top_category._asdict() if insights.top_category else None,
            "daily_average": insights.daily_average,
        },
        weekly_trend=[p._asdict() for p in board.weekly_trend],
        monthly_trend=[p._asdict() for p in board.monthly_trend],
        budget={"month": month, **board.budget._asdict()},
    )
