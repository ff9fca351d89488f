from datetime import date
from decimal import Decimal

import pytest

from finance_dashboard.metrics import (
    PREDICTED,
    REALIZED,
    cash_flow,
    month_label,
    monthly_buckets,
    monthly_totals,
    partner_report,
    status_totals,
    top_accounts_paid,
    top_counterparties,
    view_basis,
)
from finance_dashboard.models import PayableRecord, ReceivableRecord


def payable(entry, due=None, amount="0", outstanding="0", settled="0", branch=100, **fields):
    return PayableRecord(
        branch_code=branch,
        ledger_entry_number=entry,
        due_date=due,
        original_amount=Decimal(amount),
        outstanding_balance=Decimal(outstanding),
        amount_settled=Decimal(settled),
        **fields,
    )


def receivable(entry, due=None, amount="0", outstanding="0", org=100, **fields):
    return ReceivableRecord(
        org_code=org,
        ledger_entry_number=entry,
        due_date=due,
        original_amount=Decimal(amount),
        outstanding_balance=Decimal(outstanding),
        **fields,
    )


def test_payable_totals_use_the_settled_column():
    totals = status_totals([
        payable(1, amount="100", outstanding="40", settled="60"),
        payable(2, amount="50", outstanding="0", settled="50"),
        payable(3, amount="10", outstanding="10", settled="0"),
    ])

    assert totals.total_original == Decimal("160")
    assert totals.total_settled == Decimal("110")
    assert totals.total_open == Decimal("50")
    assert totals.count_open == 2


def test_receivable_settled_is_original_minus_outstanding():
    totals = status_totals([
        receivable(1, amount="100", outstanding="30"),
        receivable(2, amount="20", outstanding="25"),
    ])

    assert totals.total_settled == Decimal("70")
    assert totals.total_open == Decimal("55")
    assert totals.count_open == 2


def test_empty_totals_are_zero():
    totals = status_totals([])

    assert totals.total_open == totals.total_settled == totals.total_original == 0
    assert totals.count_open == 0


def test_month_label():
    assert month_label("2026-01") == "JAN/26"
    assert month_label("2025-12") == "DEC/25"


def test_view_basis():
    assert view_basis(PREDICTED) == "due"
    assert view_basis(REALIZED) == "settlement"
    with pytest.raises(ValueError):
        view_basis("forecast")


def test_predicted_cash_flow_sums_original_amounts_by_due_date():
    payables = [
        payable(1, date(2026, 1, 10), amount="300"),
        payable(2, date(2026, 3, 2), amount="200"),
        payable(3, date(2026, 5, 2), amount="999"),
    ]
    receivables = [receivable(1, date(2026, 1, 20), amount="1000")]

    summary = cash_flow(payables, receivables, view=PREDICTED, start="2026-01-01", end="2026-03-31")

    assert summary.total_payable == Decimal("500")
    assert summary.total_receivable == Decimal("1000")
    assert summary.balance == Decimal("500")
    # months without activity are omitted
    assert [(m.key, m.label, m.payable, m.receivable) for m in summary.months] == [
        ("2026-01", "JAN/26", Decimal("300"), Decimal("1000")),
        ("2026-03", "MAR/26", Decimal("200"), Decimal("0")),
    ]


def test_realized_cash_flow_skips_open_receivables():
    receivables = [
        receivable(1, amount="100", outstanding="0", settlement_date=date(2026, 2, 5)),
        receivable(2, amount="100", outstanding="40", settlement_date=date(2026, 2, 6)),
    ]
    payables = [
        payable(1, amount="80", outstanding="30", settled="50", settlement_date=date(2026, 2, 7)),
    ]

    summary = cash_flow(payables, receivables, view=REALIZED, start="2026-02-01", end="2026-02-28")

    assert summary.total_receivable == Decimal("100")
    assert summary.total_payable == Decimal("50")
    assert summary.balance == Decimal("50")
    assert [m.key for m in summary.months] == ["2026-02"]


def test_cash_flow_requires_a_basis_date_even_without_window():
    payables = [payable(1, None, amount="10"), payable(2, date(2026, 4, 1), amount="20")]

    summary = cash_flow(payables, [], view=PREDICTED)

    assert summary.total_payable == Decimal("20")


def test_cash_flow_branch_is_matched_by_name():
    payables = [
        payable(1, date(2026, 1, 1), amount="10", branch=100),
        payable(2, date(2026, 1, 1), amount="20", branch=10),
        payable(3, date(2026, 1, 1), amount="40", branch=200),
    ]

    summary = cash_flow(payables, [], view=PREDICTED, branch="AIRSLAID")

    assert summary.total_payable == Decimal("30")


def test_monthly_buckets_are_chronological():
    payables = [payable(1, date(2026, 3, 1), amount="1"), payable(2, date(2025, 11, 1), amount="2")]
    receivables = [receivable(1, date(2026, 1, 1), amount="3")]

    keys = [bucket.key for bucket in monthly_buckets(payables, receivables, PREDICTED)]

    assert keys == ["2025-11", "2026-01", "2026-03"]


def test_monthly_totals_split_total_and_paid():
    months = monthly_totals([
        receivable(1, date(2026, 1, 3), amount="100", outstanding="100"),
        receivable(2, date(2026, 1, 9), amount="50", outstanding="0"),
        receivable(3, None, amount="70"),
    ])

    assert [(m.label, m.total, m.paid) for m in months] == [("JAN/26", Decimal("150"), Decimal("50"))]


def test_top_counterparties_truncates_and_sorts_descending():
    records = [payable(n, amount=str(n * 10), counterparty_name=f"C{n:02d}") for n in range(1, 16)]

    ranked = top_counterparties(records)

    assert len(ranked) == 10
    assert ranked[0].name == "C15"
    assert ranked[0].value == Decimal("150")
    assert ranked[-1].name == "C06"
    assert len(top_counterparties(records, limit=5)) == 5


def test_top_counterparties_ties_keep_first_seen_order():
    records = [
        payable(1, amount="10", counterparty_name="B"),
        payable(2, amount="10", counterparty_name="A"),
        payable(3, amount="5", counterparty_name="B"),
        payable(4, amount="5", counterparty_name="A"),
        payable(5, amount="1", counterparty_name=None),
    ]

    ranked = top_counterparties(records)

    assert [(t.name, t.value) for t in ranked] == [
        ("B", Decimal("15")),
        ("A", Decimal("15")),
        ("UNKNOWN", Decimal("1")),
    ]


def test_top_accounts_paid_counts_only_settled_payables():
    ranked = top_accounts_paid([
        payable(1, settled="100", settlement_account_code=9255),
        payable(2, settled="50", settlement_account_code=9255),
        payable(3, settled="70", settlement_account_code=4242),
        payable(4, settled="0", settlement_account_code=9256),
        payable(5, settled="500", settlement_account_code=0),
    ])

    assert [(t.name, t.value) for t in ranked] == [
        ("SAFRA AIRSLAID", Decimal("150")),
        ("ACCOUNT 4242", Decimal("70")),
    ]


def test_partner_report_ranks_and_lists_overdue_items():
    today = date(2026, 2, 1)
    payables = [
        payable(1, date(2026, 1, 10), amount="100", outstanding="100", counterparty_name="Supplier A"),
        payable(2, date(2026, 1, 20), amount="300", outstanding="0", counterparty_name="Supplier B"),
        payable(3, date(2026, 2, 15), amount="50", outstanding="50", counterparty_name="Supplier A"),
        payable(4, date(2025, 12, 1), amount="999", outstanding="999", counterparty_name="Old"),
    ]
    receivables = [
        receivable(1, date(2026, 1, 5), amount="80", outstanding="20", counterparty_name="Customer"),
        receivable(2, date(2026, 2, 1), amount="60", outstanding="60", counterparty_name="Customer"),
    ]

    report = partner_report(payables, receivables, start="2026-01-01", end="2026-02-28", today=today)

    assert [(t.name, t.value) for t in report.top_suppliers] == [
        ("Supplier B", Decimal("300")),
        ("Supplier A", Decimal("150")),
    ]
    assert [t.name for t in report.top_customers] == ["Customer"]
    assert [r.ledger_entry_number for r in report.overdue_payables] == [1]
    # due today is not overdue yet
    assert [r.ledger_entry_number for r in report.overdue_receivables] == [1]
    assert report.overdue_payable_total == Decimal("100")
    assert report.overdue_receivable_total == Decimal("20")
