"""Conversions between major-unit decimals and integer minor units"""

from decimal import Decimal, InvalidOperation

from pot_ledger.domain.exceptions import ValidationError

# Decimal places per ISO 4217 code; anything not listed uses 2
CURRENCY_DECIMALS: dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
}


def currency_decimals(currency: str) -> int:
    return CURRENCY_DECIMALS.get(currency.upper(), 2)


def to_minor_units(amount: Decimal | str | int, currency: str) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Rejects amounts with more precision than the currency supports instead of
    rounding them away, e.g. "10.005" USD is an error, "10.50" → 1050.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValidationError("amount_format", f"Not a decimal amount: {amount!r}") from e

    if not value.is_finite():
        raise ValidationError("amount_format", f"Not a finite amount: {amount!r}")

    scaled = value.scaleb(currency_decimals(currency))
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            "amount_precision",
            f"{amount} has more than {currency_decimals(currency)} decimal places for {currency}",
        )
    return int(scaled)


def from_minor_units(amount_minor: int, currency: str) -> Decimal:
    """Inverse of to_minor_units, for display"""
    places = currency_decimals(currency)
    return Decimal(amount_minor).scaleb(-places).quantize(Decimal(1).scaleb(-places))


def format_amount(amount_minor: int, currency: str) -> str:
    """Human-readable amount, e.g. 1050 USD → '10.50 USD'"""
    return f"{from_minor_units(amount_minor, currency)} {currency}"
