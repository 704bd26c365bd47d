import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')

# amounts and ids live in 32-bit integer columns
MAX_INT32 = 2_147_483_647
MAX_CENTS = MAX_INT32


def format_amount(cents) -> str:
    """Format integer cents as dollars, e.g. 123456 -> $1,234.56"""
    if cents is None:
        return "$0.00"
    dollars = Decimal(int(cents)) / 100
    if dollars < 0:
        return f"-${abs(dollars):,.2f}"
    return f"${dollars:,.2f}"


def to_cents(value) -> int:
    """Convert client input to positive integer cents.

    Strings are decimal dollars ("12.50" -> 1250, rounded half up).
    Numbers are already cents and must be whole.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError('Amount must be a number')

    if isinstance(value, str):
        clean_amount = value.replace('$', '').replace(',', '').replace(' ', '')
        try:
            dollars = Decimal(clean_amount)
        except InvalidOperation:
            raise ValueError(f'Invalid amount format: {value}')
        if not dollars.is_finite():
            raise ValueError(f'Invalid amount format: {value}')
        cents = int((dollars * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    elif isinstance(value, int):
        cents = value
    elif isinstance(value, (float, Decimal)):
        if value != value or value in (float('inf'), float('-inf')) or value != int(value):
            raise ValueError('Amount in cents must be a whole number')
        cents = int(value)
    else:
        raise ValueError('Amount must be a number')

    if cents <= 0:
        raise ValueError('Amount must be positive')
    if cents > MAX_CENTS:
        raise ValueError('Amount is too large')
    return cents


def validate_month(value: str) -> str:
    value = (value or "").strip()
    if not MONTH_PATTERN.match(value):
        raise ValueError('Month must be in YYYY-MM format')
    return value


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"
