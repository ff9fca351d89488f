"""
Field normalization for rows returned by the analytics API

Keys arrive as `Table[column]` or plain names with arbitrary casing and
spacing. Values are strings, numbers or null. Nothing here raises: anything
that cannot be coerced degrades to 0 or None.
"""
import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_QUALIFIED = re.compile(r'\[(.*?)\]')
_WHITESPACE = re.compile(r'\s+')

# Bounds of the store columns: IntegerField and DecimalField(14, 2)
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1
MONEY_LIMIT = Decimal(10) ** 12
CENT = Decimal('0.01')


def clean_key(key):
    """'REL_FINANCEIRO[Mov Dt Vencto]' -> 'mov_dt_vencto'"""
    match = _QUALIFIED.search(key)
    if match:
        key = match.group(1)
    return _WHITESPACE.sub('_', key.strip().lower())


def normalize_row(row):
    return {clean_key(str(key)): value for key, value in row.items()}


def _number(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return Decimal(repr(value))
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    text = str(value).strip()
    if not text:
        return Decimal('0')
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def to_int(value):
    number = _number(value)
    if number is None or not INT_MIN - 1 < number < INT_MAX + 1:
        return 0
    # int() on Decimal truncates toward zero
    return int(number)


def to_decimal(value):
    number = _number(value)
    if number is None or abs(number) >= MONEY_LIMIT:
        return Decimal('0.00')
    number = number.quantize(CENT, rounding=ROUND_HALF_UP)
    if abs(number) >= MONEY_LIMIT:
        return Decimal('0.00')
    return number


def to_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_text(value):
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # document numbers sometimes come back as 1234.0
        return str(int(value))
    return str(value)


def to_flag(default):
    """Coercer for single-letter flags, falling back to `default` when empty"""
    def coerce(value):
        text = to_text(value)
        return text.strip() if text and text.strip() else default
    return coerce
