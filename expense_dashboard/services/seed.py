import logging
from datetime import date
from typing import Optional

logger = logging.getLogger(__name__)

DEMO_EXPENSES = [
    {"amount": 1250, "description": "Lunch at cafe", "category": "Food"},
    {"amount": 5500, "description": "Movie tickets", "category": "Entertainment"},
    {"amount": 15000, "description": "Electric bill", "category": "Amenities"},
]


async def seed_demo_expenses(store, today: Optional[date] = None) -> int:
    """Insert the starter expenses when the table is empty. Returns rows added."""
    if await store.list():
        return 0

    today = today or date.today()
    for item in DEMO_EXPENSES:
        await store.create({**item, "date": today})

    logger.info(f"🌱 Seeded {len(DEMO_EXPENSES)} demo expenses for {today.isoformat()}")
    return len(DEMO_EXPENSES)
