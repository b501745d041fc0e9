from datetime import date
from decimal import Decimal


def fmt_decimal(value):
    """ Plain number for exports.
    - None -> ''
    - 1320.00 -> '1320', 12.50 -> '12.5'
    - never scientific notation
    """
    if value is None:
        return ""
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        return str(value)
    if not d.is_finite():
        return str(d)
    # plain digits, then trailing fractional zeros stripped; no context rounding
    text = f"{d:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def fmt_money(value, symbol="€"):
    """ Display amount with two decimals.
    - None -> 'N/A'
    """
    if value is None:
        return "N/A"
    try:
        return f"{symbol}{Decimal(str(value)):,.2f}"
    except (ArithmeticError, ValueError, TypeError):
        return str(value)


def fmt_quantity(value):
    if value is None:
        return "N/A"
    return f"{Decimal(str(value)):,.2f}"


def fmt_export_date(d: date) -> str:
    """ D/M/YYYY, no zero padding (22/11/2025, 3/1/2026). """
    return f"{d.day}/{d.month}/{d.year}"
