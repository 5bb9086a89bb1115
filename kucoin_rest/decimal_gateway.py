# ============================================================================
# KuCoin REST Client v1.0.0
# Decimal Gateway - Exact Decimal Strings
# ============================================================================
#
# Purpose: Keeps balances, amounts and fees as the exact decimal strings the
#          exchange sent, converting to decimal.Decimal only on demand
#
# MANDATE:
#   - Float contamination is FORBIDDEN for monetary fields
#   - Decoded strings are stored verbatim ("0.00000001" never becomes "1E-8")
#   - Outbound Decimals are rendered in plain notation
#
# Error Codes:
#   - KC-DEC-001: Decimal conversion failed
#
# ============================================================================

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Annotated, Optional, Union

from pydantic import BeforeValidator

logger = logging.getLogger(__name__)


def _validate_decimal_string(value):
    """Accept only JSON strings holding a finite decimal (or "")."""
    if not isinstance(value, str):
        raise ValueError(
            f"expected a decimal string, got {type(value).__name__}: {value!r}"
        )
    if value == "":
        return value
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"not a decimal string: {value!r}") from None
    if not parsed.is_finite():
        raise ValueError(f"not a finite decimal: {value!r}")
    return value


# Pydantic field type for monetary values: validated, stored verbatim
DecimalString = Annotated[str, BeforeValidator(_validate_decimal_string)]


def to_decimal(
    value: Union[str, Decimal, int, None],
    precision: Optional[Decimal] = None,
    correlation_id: Optional[str] = None
) -> Decimal:
    """
    Convert a decimal string to Decimal.

    Exact by default; when precision is given the result is quantized with
    ROUND_HALF_EVEN. None and "" convert to zero.

    Raises:
        ValueError: If value cannot be converted (KC-DEC-001)
    """
    if value is None or value == "":
        result = Decimal('0')
    elif isinstance(value, float):
        logger.error(
            f"[KC-DEC-001] Float rejected | value={value} | "
            f"correlation_id={correlation_id}"
        )
        raise ValueError(f"KC-DEC-001: Refusing float value {value!r}")
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as e:
            logger.error(
                f"[KC-DEC-001] Decimal conversion failed | "
                f"value={value} | type={type(value).__name__} | "
                f"correlation_id={correlation_id} | error={e}"
            )
            raise ValueError(f"KC-DEC-001: Cannot convert '{value}' to Decimal") from e

    if precision is not None:
        result = result.quantize(precision, rounding=ROUND_HALF_EVEN)
    return result


def format_decimal(value: Decimal) -> str:
    """Render a Decimal in plain (non-exponent) notation."""
    if not value.is_finite():
        raise ValueError(f"KC-DEC-001: Cannot format non-finite Decimal {value!r}")
    text = format(value, 'f')
    if text.startswith('-') and Decimal(text) == 0:
        return text[1:]
    return text
