"""
Fixed-point helpers for token amounts.

Token amounts are integers scaled by 10**decimals. All conversions run in a
high-precision decimal context so that uint256-sized values convert, add and
subtract without rounding.
"""

from decimal import Context, Decimal, localcontext

# 200 significant digits covers any uint256 at any realistic decimals
AMOUNT_CONTEXT = Context(prec=200)


def to_decimal_amount(raw_amount: int, decimals: int) -> Decimal:
    """
    Convert a raw integer amount to a human decimal amount.

    Args:
        raw_amount: Amount in the token's smallest unit
        decimals: Token decimal precision

    Returns:
        Exact Decimal value of raw_amount / 10**decimals
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    with localcontext(AMOUNT_CONTEXT):
        return Decimal(raw_amount).scaleb(-decimals)


def format_quantity(raw_balance: int, decimals: int) -> str:
    """
    Render a raw amount as a plain decimal string without trailing zeros.

    Examples:
        format_quantity(100_000000, 6) -> "100"
        format_quantity(2_500000, 6) -> "2.5"
        format_quantity(10**18 + 1, 18) -> "1.000000000000000001"
    """
    if raw_balance == 0:
        return "0"

    if decimals == 0:
        return str(raw_balance)

    formatted = format(to_decimal_amount(raw_balance, decimals), "f")

    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")

    return formatted


def sum_amounts(values) -> Decimal:
    """Sum decimals exactly."""
    with localcontext(AMOUNT_CONTEXT):
        total = Decimal(0)
        for value in values:
            total += value
        return total


def subtract_amount(total: Decimal, value: Decimal) -> Decimal:
    """Subtract exactly."""
    with localcontext(AMOUNT_CONTEXT):
        return total - value


def multiply_amount(amount: Decimal, price: Decimal) -> Decimal:
    """Multiply exactly."""
    with localcontext(AMOUNT_CONTEXT):
        return amount * price
