# orm.py - SQLAlchemy tables for expenses and monthly budgets
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, func

from expense_dashboard.db import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Integer, nullable=False)  # cents
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Expense id={self.id} {self.date} {self.category} {self.amount}>"


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    month = Column(String(7), nullable=False, unique=True)  # YYYY-MM
    amount = Column(Integer, nullable=False)  # cents

    def __repr__(self):
        return f"<Budget {self.month} {self.amount}>"
