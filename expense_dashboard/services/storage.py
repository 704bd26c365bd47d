# storage.py - expense and budget persistence on an async SQLAlchemy session factory
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select

from expense_dashboard.errors import ValidationError
from expense_dashboard.models.orm import Expense, Budget
from expense_dashboard.utils import MAX_CENTS, format_amount

logger = logging.getLogger(__name__)

EXPENSE_FIELDS = ("amount", "description", "category", "date")


def _check_amount(amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise ValidationError("Amount must be positive", field="amount")
    if amount > MAX_CENTS:
        raise ValidationError("Amount is too large", field="amount")


class ExpenseStore:
    """CRUD over the expenses table. Each call runs in its own session."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def list(self) -> List[Expense]:
        async with self.session_factory() as session:
            query = select(Expense).order_by(Expense.date.desc(), Expense.id.desc())
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get(self, expense_id: int) -> Optional[Expense]:
        async with self.session_factory() as session:
            return await session.get(Expense, expense_id)

    async def create(self, data: Dict[str, Any]) -> Expense:
        _check_amount(data.get("amount"))
        expense = Expense(**{k: data[k] for k in EXPENSE_FIELDS})

        async with self.session_factory() as session:
            try:
                session.add(expense)
                await session.commit()
                await session.refresh(expense)
            except Exception:
                await session.rollback()
                raise

        logger.info(f"✅ Saved expense #{expense.id}: {format_amount(expense.amount)} for {expense.category}")
        return expense

    async def update(self, expense_id: int, changes: Dict[str, Any]) -> Optional[Expense]:
        changes = {k: v for k, v in changes.items() if k in EXPENSE_FIELDS}
        if "amount" in changes:
            _check_amount(changes["amount"])

        async with self.session_factory() as session:
            expense = await session.get(Expense, expense_id)
            if expense is None:
                return None
            try:
                for field, value in changes.items():
                    setattr(expense, field, value)
                await session.commit()
                await session.refresh(expense)
            except Exception:
                await session.rollback()
                raise

        logger.info(f"✏️ Updated expense #{expense_id}: {sorted(changes)}")
        return expense

    async def delete(self, expense_id: int) -> None:
        """Remove an expense; a missing id is not an error"""
        async with self.session_factory() as session:
            try:
                result = await session.execute(delete(Expense).where(Expense.id == expense_id))
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        if result.rowcount:
            logger.info(f"🗑️ Deleted expense #{expense_id}")
        else:
            logger.info(f"🗑️ Delete requested for missing expense #{expense_id}")


class BudgetStore:
    """One budget per calendar month, written with upsert semantics."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    async def get(self, month: str) -> Optional[Budget]:
        async with self.session_factory() as session:
            result = await session.execute(select(Budget).where(Budget.month == month))
            return result.scalars().first()

    async def set(self, month: str, amount: int) -> Budget:
        _check_amount(amount)

        async with self.session_factory() as session:
            try:
                budget = await self._upsert(session, month, amount)
            except IntegrityError:
                # another writer inserted this month first; overwrite it
                await session.rollback()
                budget = await self._upsert(session, month, amount)

        logger.info(f"💰 Budget for {month} set to {format_amount(amount)}")
        return budget

    async def _upsert(self, session, month: str, amount: int) -> Budget:
        result = await session.execute(select(Budget).where(Budget.month == month))
        budget = result.scalars().first()
        if budget is None:
            budget = Budget(month=month, amount=amount)
            session.add(budget)
        else:
            budget.amount = amount
        await session.commit()
        await session.refresh(budget)
        return budget
