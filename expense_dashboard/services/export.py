from typing import Iterable

import pandas as pd

CSV_COLUMNS = ["Date", "Amount", "Category", "Description"]


def expenses_to_csv(expenses: Iterable) -> str:
    """Render expenses as CSV text with dollar amounts"""
    rows = [
        {
            "Date": exp.date.isoformat(),
            "Amount": f"{exp.amount / 100:.2f}",
            "Category": exp.category,
            "Description": exp.description,
        }
        for exp in expenses
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False)
