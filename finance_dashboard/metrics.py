"""
Aggregates behind the dashboard cards and charts

Pure functions over record sets: status totals, predicted vs realized cash
flow, monthly buckets and top-N rankings.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from django.utils import timezone

from .lookups import UNKNOWN_COUNTERPARTY, account_label
from .query import ALL, FilterSpec, filter_records, in_date_range, iso_day

ZERO = Decimal('0')

PREDICTED = 'predicted'
REALIZED = 'realized'
VIEWS = (PREDICTED, REALIZED)

MONTH_ABBR = ('JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN',
              'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC')

TOP_LIMIT = 10
REPORT_TOP_LIMIT = 5


# ==============================================================================
# STATUS TOTALS
# ==============================================================================

@dataclass
class StatusTotals:
    total_open: Decimal = ZERO
    total_settled: Decimal = ZERO
    total_original: Decimal = ZERO
    count_open: int = 0


def status_totals(records):
    """Open / settled / original sums for KPI cards"""
    totals = StatusTotals()
    for record in records:
        totals.total_original += record.original_amount
        totals.total_settled += record.settled_amount
        if record.outstanding_balance > 0:
            totals.total_open += record.outstanding_balance
            totals.count_open += 1
    return totals


# ==============================================================================
# MONTHLY BUCKETS
# ==============================================================================

def month_key(value):
    day = iso_day(value)
    return day[:7] if day else None


def month_label(key):
    """'2026-01' -> 'JAN/26'"""
    year, month = key.split('-')
    return f"{MONTH_ABBR[int(month) - 1]}/{year[2:]}"


@dataclass
class MonthlyBucket:
    key: str
    label: str
    payable: Decimal = ZERO
    receivable: Decimal = ZERO


@dataclass
class MonthlyTotal:
    key: str
    label: str
    total: Decimal = ZERO
    paid: Decimal = ZERO


def monthly_totals(records):
    """Original vs settled amount per due-date month, for a single side"""
    months = {}
    for record in records:
        key = month_key(record.due_date)
        if key is None:
            continue
        entry = months.get(key)
        if entry is None:
            entry = months[key] = MonthlyTotal(key, month_label(key))
        entry.total += record.original_amount
        entry.paid += record.settled_amount
    return sorted(months.values(), key=lambda entry: entry.key)


# ==============================================================================
# CASH FLOW (PREDICTED vs REALIZED)
# ==============================================================================

def view_basis(view):
    if view not in VIEWS:
        raise ValueError(f"Unknown cash-flow view: {view!r}")
    return 'due' if view == PREDICTED else 'settlement'


def view_value(record, view):
    """Original amount when predicted, settled amount when realized"""
    if view == PREDICTED:
        return record.original_amount
    return record.settled_amount


def cash_flow_subset(records, view, start=None, end=None, branch=None):
    """
    Records counted by a cash-flow view.

    A record needs a basis date inside the window. Under the realized view a
    receivable with an open balance has no settlement date, so it drops out.
    """
    basis = view_basis(view)
    spec = FilterSpec(date_basis=basis, branch=branch or ALL, branch_by_name=True)
    return [
        record for record in filter_records(records, spec)
        if in_date_range(record.basis_date(basis), start, end)
    ]


def monthly_buckets(payables, receivables, view):
    """Sparse, chronologically ordered per-month sums for both sides"""
    basis = view_basis(view)
    months = {}
    for side, records in (('payable', payables), ('receivable', receivables)):
        for record in records:
            key = month_key(record.basis_date(basis))
            if key is None:
                continue
            bucket = months.get(key)
            if bucket is None:
                bucket = months[key] = MonthlyBucket(key, month_label(key))
            setattr(bucket, side, getattr(bucket, side) + view_value(record, view))
    return sorted(months.values(), key=lambda bucket: bucket.key)


@dataclass
class CashFlowSummary:
    view: str
    total_payable: Decimal = ZERO
    total_receivable: Decimal = ZERO
    months: List[MonthlyBucket] = field(default_factory=list)

    @property
    def balance(self):
        return self.total_receivable - self.total_payable


def cash_flow(payables, receivables, view=PREDICTED, start=None, end=None, branch=None):
    payables = cash_flow_subset(payables, view, start, end, branch)
    receivables = cash_flow_subset(receivables, view, start, end, branch)
    return CashFlowSummary(
        view=view,
        total_payable=sum((view_value(r, view) for r in payables), ZERO),
        total_receivable=sum((view_value(r, view) for r in receivables), ZERO),
        months=monthly_buckets(payables, receivables, view),
    )


# ==============================================================================
# TOP-N RANKINGS
# ==============================================================================

@dataclass
class RankedTotal:
    name: str
    value: Decimal


def top_groups(records, group, value, limit=TOP_LIMIT):
    """
    Sum `value(record)` per `group(record)` and keep the `limit` largest.

    Records whose group is None are skipped. Equal totals keep the order in
    which their groups were first seen.
    """
    totals = {}
    for record in records:
        name = group(record)
        if name is None:
            continue
        totals[name] = totals.get(name, ZERO) + value(record)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [RankedTotal(name, total) for name, total in ranked[:limit]]


def _counterparty(record):
    return record.counterparty_name or UNKNOWN_COUNTERPARTY


def top_counterparties(records, value=None, limit=TOP_LIMIT):
    value = value or (lambda record: record.original_amount)
    return top_groups(records, _counterparty, value, limit)


def _paid_account(record):
    if record.amount_settled > 0 and record.settlement_account_code:
        return account_label(record.settlement_account_code)
    return None


def top_accounts_paid(payables, limit=TOP_LIMIT):
    """Settlement accounts ranked by amount paid out"""
    return top_groups(payables, _paid_account, lambda record: record.amount_settled, limit)


# ==============================================================================
# PARTNER REPORT
# ==============================================================================

@dataclass
class PartnerReport:
    top_suppliers: List[RankedTotal]
    top_customers: List[RankedTotal]
    overdue_payables: list
    overdue_receivables: list

    @property
    def overdue_payable_total(self):
        return sum((r.outstanding_balance for r in self.overdue_payables), ZERO)

    @property
    def overdue_receivable_total(self):
        return sum((r.outstanding_balance for r in self.overdue_receivables), ZERO)


def is_overdue(record, today):
    due = iso_day(record.due_date)
    return bool(due) and due < iso_day(today) and record.outstanding_balance > 0


def partner_report(payables, receivables, start=None, end=None, today=None):
    """Top partners and overdue items for records due inside the window"""
    today = today or timezone.localdate()
    payables = [r for r in payables if in_date_range(r.due_date, start, end)]
    receivables = [r for r in receivables if in_date_range(r.due_date, start, end)]

    return PartnerReport(
        top_suppliers=top_counterparties(payables, limit=REPORT_TOP_LIMIT),
        top_customers=top_counterparties(receivables, limit=REPORT_TOP_LIMIT),
        overdue_payables=[r for r in payables if is_overdue(r, today)],
        overdue_receivables=[r for r in receivables if is_overdue(r, today)],
    )
