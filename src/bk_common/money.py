"""Exact decimal money utilities.

All amounts and balances are `decimal.Decimal` end to end, stored as
NUMERIC(20, 2). Never construct money from a float.
"""

from decimal import Decimal, InvalidOperation

from src.bk_common.errors import InvalidAmountError

MONEY_PRECISION = 20
MONEY_SCALE = 2

_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)  # 0.01
_MAX_AMOUNT = Decimal(10) ** (MONEY_PRECISION - MONEY_SCALE) - _QUANTUM

_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a stored/computed value to the money scale: '500' -> Decimal('500.00')."""
    return Decimal(value).quantize(_QUANTUM)


def parse_amount(value: Decimal | int | str) -> Decimal:
    """Validate a caller-supplied transaction amount.

    Accepts Decimal, int or a decimal string. Rejects floats (binary rounding),
    non-finite and non-positive values, more than MONEY_SCALE fraction digits
    and anything that does not fit NUMERIC(20, 2).

    Raises:
        InvalidAmountError: on any of the above.
    """
    if isinstance(value, (bool, float)):
        raise InvalidAmountError(f"{value!r} must be a decimal string, int or Decimal")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise InvalidAmountError(f"malformed amount {value!r}") from None
    else:
        raise InvalidAmountError(f"unsupported amount type {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(f"{value!r} is not a finite number")
    if amount <= 0:
        raise InvalidAmountError(f"{amount} must be positive")
    if amount > _MAX_AMOUNT:
        raise InvalidAmountError(f"{amount} exceeds the maximum of {_MAX_AMOUNT}")

    quantized = amount.quantize(_QUANTUM)
    if quantized != amount:
        raise InvalidAmountError(f"{amount} has more than {MONEY_SCALE} decimal places")
    return quantized


def format_money(amount: Decimal, currency: str = "USD") -> str:
    """Render for display: Decimal('1500') -> '$1,500.00', EUR -> '€1,500.00', JPY -> '1,500.00 JPY'."""
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"
    symbol = _SYMBOLS.get(currency)
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body} {currency}"
