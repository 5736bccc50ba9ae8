"""
Money formatting for balances and movements.

Usage:
    from saldo.utils.money import format_money, format_signed_amount

    format_money(15000)                   -> "$15.000,00"
    format_signed_amount("50", True)      -> "-$50,00"
    format_signed_amount(-1500, False)    -> "+$1.500,00"
"""
from decimal import Decimal, InvalidOperation


def to_decimal(amount) -> Decimal | None:
    """
    Convert API amount (int / float / Decimal / str) to Decimal

    Returns:
        Decimal, or None if the value is empty or not a number
    """
    if amount is None or amount == "":
        return None
    if isinstance(amount, bool):
        return None
    try:
        value = Decimal(str(amount).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def format_money(amount, decimals: int = 2) -> str:
    """
    Balance format (es-AR): dot for thousands, comma for decimals

    Args:
        amount: number or numeric string; invalid values render as zero
        decimals: digits after the decimal separator
    """
    value = to_decimal(amount) or Decimal("0")
    formatted = f"{value:,.{decimals}f}"
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"${formatted}"


def format_signed_amount(amount, is_expense: bool) -> str:
    """
    Movement amount with direction sign; the sign comes from the movement
    type, never from the amount itself
    """
    value = to_decimal(amount)
    if not value:
        return format_money(0)
    sign = "-" if is_expense else "+"
    return f"{sign}{format_money(abs(value))}"
