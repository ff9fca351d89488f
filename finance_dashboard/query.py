"""
Filtering and sorting of payable / receivable record sets

Everything here is a pure function of the records passed in and a FilterSpec.
Records are PayableRecord or ReceivableRecord instances (saved or not); the
shape-specific bits (branch column, basis dates, paid status) come from the
model properties.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from functools import cmp_to_key
from typing import Optional, Tuple

from .lookups import branch_label

DATE_BASES = ('due', 'issue', 'settlement')
STATUSES = ('all', 'open', 'paid')
ALL = 'all'


@dataclass(frozen=True)
class FilterSpec:
    """
    Filter options; each left at its default adds no constraint.

    start / end: inclusive ISO dates (YYYY-MM-DD) compared to `date_basis`
    branch: branch code, or display name when `branch_by_name` is set
    status: 'open', 'paid' or 'all'
    search_text: case-insensitive match on counterparty, document or amount
    exclude_document_types: document-type codes to leave out
    """
    start: Optional[str] = None
    end: Optional[str] = None
    date_basis: str = 'due'
    branch: Optional[str] = ALL
    branch_by_name: bool = False
    status: str = ALL
    search_text: str = ''
    exclude_document_types: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.date_basis not in DATE_BASES:
            raise ValueError(f"Unknown date basis: {self.date_basis!r}")
        if self.status not in STATUSES:
            raise ValueError(f"Unknown status: {self.status!r}")


def iso_day(value):
    """YYYY-MM-DD for a date or ISO string; None when absent or too short"""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value)
    if len(text) < 10:
        return None
    return text[:10]


def in_date_range(value, start=None, end=None):
    day = iso_day(value)
    if day is None:
        return False
    if start and day < start:
        return False
    if end and day > end:
        return False
    return True


def matches_branch(record, branch, by_name=False):
    if not branch or branch == ALL:
        return True
    code = str(record.branch)
    if by_name:
        return branch_label(code) == branch
    return code == branch


def matches_status(record, status):
    if status == ALL:
        return True
    return record.is_paid == (status == 'paid')


def matches_search(record, search_text):
    if not search_text:
        return True
    term = search_text.lower()
    return (
        term in (record.counterparty_name or '').lower()
        or term in (record.document_number or '').lower()
        or term in str(record.original_amount)
    )


def filter_records(records, spec):
    """Records satisfying every active option of `spec`, in input order"""
    result = list(records)

    if spec.search_text:
        result = [r for r in result if matches_search(r, spec.search_text)]

    if spec.status != ALL:
        result = [r for r in result if matches_status(r, spec.status)]

    if spec.branch and spec.branch != ALL:
        result = [r for r in result if matches_branch(r, spec.branch, spec.branch_by_name)]

    if spec.exclude_document_types:
        excluded = set(spec.exclude_document_types)
        result = [r for r in result if r.document_type_code not in excluded]

    if spec.start or spec.end:
        result = [
            r for r in result
            if in_date_range(r.basis_date(spec.date_basis), spec.start, spec.end)
        ]

    return result


def _is_number(value):
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _compare(a, b, descending):
    if a == b:
        return 0
    # nulls sink to the bottom in both directions
    if a is None:
        return 1
    if b is None:
        return -1

    if _is_number(a) and _is_number(b):
        result = -1 if a < b else 1
    else:
        a_text, b_text = str(a).lower(), str(b).lower()
        if a_text == b_text:
            return 0
        result = -1 if a_text < b_text else 1
    return -result if descending else result


def sort_records(records, key, direction='asc'):
    if not key:
        return list(records)
    descending = direction == 'desc'
    return sorted(
        records,
        key=cmp_to_key(lambda a, b: _compare(getattr(a, key), getattr(b, key), descending)),
    )


def available_branches(records):
    """Distinct branch codes present, in numeric order"""
    codes = {record.branch for record in records if record.branch}
    return [str(code) for code in sorted(codes)]
