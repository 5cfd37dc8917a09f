"""
Amount conversion between display units and integer base units.

The ledger only ever sees base units (int). With the default 18
decimals, "1.5" is 1_500_000_000_000_000_000 base units.

Conversion is exact: the decimal digits are shifted as integers and
never pass through a rounding context.
"""

from decimal import Decimal, DecimalException

from userbank.core.exceptions import ValidationError

DEFAULT_DECIMALS = 18

# Upper bound on the digit count of a parsed amount in base units.
MAX_AMOUNT_DIGITS = 256


def parse_amount(text: str, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Parse a display amount such as "2", "0.5" or "1e-3" into base units.

    Raises ValidationError for negatives, non-numbers, values with more
    fractional digits than `decimals` allows, and values of more than
    MAX_AMOUNT_DIGITS digits once scaled.
    """
    try:
        value = Decimal(str(text).strip())
    except DecimalException as exc:
        raise ValidationError("Amount is not a number", {"amount": text}) from exc

    if not value.is_finite():
        raise ValidationError("Amount must be finite", {"amount": text})
    if value.is_signed() and value:
        raise ValidationError("Amount must be non-negative", {"amount": text})

    _, digit_tuple, exponent = value.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    significant = digits.rstrip("0")
    if not significant:
        return 0

    if value.adjusted() + decimals >= MAX_AMOUNT_DIGITS:
        raise ValidationError(
            "Amount is too large",
            {"amount": text, "max_digits": MAX_AMOUNT_DIGITS},
        )

    shift = exponent + (len(digits) - len(significant)) + decimals
    if shift < 0:
        raise ValidationError(
            "Amount has too many decimal places",
            {"amount": text, "decimals": decimals},
        )
    return int(significant) * 10 ** shift


def format_amount(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render base units as a display string with trailing zeros trimmed."""
    if decimals == 0:
        return str(amount)
    whole, frac = divmod(amount, 10 ** decimals)
    frac_text = f"{frac:0{decimals}d}".rstrip("0")
    return f"{whole}.{frac_text}" if frac_text else f"{whole}.0"
