# src/utils/parsing.py
"""Boundary coercion for values coming from forms, JSON files and DB rows.

Everything that enters the models goes through these helpers exactly once;
the catalog functions downstream only ever see validated numbers.
"""
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Iterable, List, Optional

def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a finite decimal, or None when the value is not numeric"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None

def to_int(value: Any) -> int:
    """Stock quantity rule: floor of a finite number, never below zero"""
    number = to_decimal(value)
    if number is None:
        return 0
    return max(0, int(number.to_integral_value(rounding=ROUND_FLOOR)))

def to_price(value: Any) -> Decimal:
    """Non-negative price; anything invalid becomes zero"""
    number = to_decimal(value)
    if number is None or number < 0:
        return Decimal(0)
    return number

def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)

def split_list(value: Any, separator: str) -> List[str]:
    """Accept a list or a separated string (textarea/CSV input) and drop blanks"""
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(separator)
    elif isinstance(value, (list, tuple)):
        parts = value
    else:
        return []
    return [str(p).strip() for p in parts if p is not None and str(p).strip()]

def unique(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result

def json_number(value: Decimal):
    """Decimal to a JSON-friendly int/float"""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
