from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.urls import reverse

from finance_dashboard import views
from finance_dashboard.models import PayableRecord, ReceivableRecord
from finance_dashboard.sync import SyncOutcome

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger():
    PayableRecord.objects.create(
        branch_code=100, ledger_entry_number=1, counterparty_name="Acme",
        original_amount=Decimal("100.00"), outstanding_balance=Decimal("100.00"),
        due_date=date(2026, 1, 15), settlement_account_code=0,
    )
    PayableRecord.objects.create(
        branch_code=200, ledger_entry_number=2, counterparty_name="Beta",
        original_amount=Decimal("40.00"), outstanding_balance=Decimal("0.00"),
        amount_settled=Decimal("40.00"), settlement_account_code=9255,
        due_date=date(2026, 2, 1), settlement_date=date(2026, 2, 3),
    )
    ReceivableRecord.objects.create(
        org_code=100, ledger_entry_number=10, counterparty_name="Client",
        original_amount=Decimal("500.00"), outstanding_balance=Decimal("0.00"),
        due_date=date(2026, 1, 20), settlement_date=date(2026, 1, 22), document_type_code="DUP",
    )
    ReceivableRecord.objects.create(
        org_code=300, ledger_entry_number=11, counterparty_name="Other",
        original_amount=Decimal("80.00"), outstanding_balance=Decimal("80.00"),
        due_date=date(2026, 1, 25), settlement_date=date(2026, 1, 26), document_type_code="ADT",
    )


def test_sync_endpoint_reports_outcome(client, monkeypatch):
    monkeypatch.setattr(views, "sync", lambda target: SyncOutcome(True, 12, "Sync complete: 12 records."))

    response = client.post(reverse("finance_dashboard:api_sync", args=["payables"]))

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 12, "message": "Sync complete: 12 records."}


def test_failed_sync_is_a_bad_gateway(client, monkeypatch):
    monkeypatch.setattr(views, "sync", lambda target: SyncOutcome(False, 0, "Query error (500): boom"))

    response = client.post(reverse("finance_dashboard:api_sync", args=["receivables"]))

    assert response.status_code == 502
    assert response.json()["success"] is False


def test_sync_endpoint_rejects_unknown_target_and_get(client):
    assert client.post(reverse("finance_dashboard:api_sync", args=["invoices"])).status_code == 400
    assert client.get(reverse("finance_dashboard:api_sync", args=["payables"])).status_code == 405


def test_payables_listing(client, ledger):
    data = client.get(reverse("finance_dashboard:api_payables")).json()

    assert data["total_db_count"] == 2
    assert data["filtered_count"] == 2
    assert [r["ledger_entry_number"] for r in data["records"]] == [2, 1]
    assert data["records"][0]["status"] == "PAID"
    assert data["records"][0]["branch_name"] == "BIG TELAS"
    assert data["records"][0]["settlement_account_name"] == "SAFRA AIRSLAID"
    assert data["records"][1]["settlement_account_name"] is None
    assert data["kpis"] == {"total_open": 100.0, "total_settled": 40.0, "total_original": 140.0, "count_open": 1}
    assert [m["label"] for m in data["monthly"]] == ["JAN/26", "FEB/26"]
    assert data["branches"] == [{"code": "100", "name": "AIRSLAID"}, {"code": "200", "name": "BIG TELAS"}]
    assert data["top_accounts_paid"] == [{"name": "SAFRA AIRSLAID", "value": 40.0}]


def test_payables_listing_filters(client, ledger):
    url = reverse("finance_dashboard:api_payables")

    open_items = client.get(url, {"status": "open"}).json()
    january = client.get(url, {"start": "2026-01-01", "end": "2026-01-31"}).json()
    by_branch = client.get(url, {"branch": "200"}).json()

    assert [r["ledger_entry_number"] for r in open_items["records"]] == [1]
    assert [r["ledger_entry_number"] for r in january["records"]] == [1]
    assert [r["ledger_entry_number"] for r in by_branch["records"]] == [2]
    assert by_branch["total_db_count"] == 2


def test_receivables_listing_hides_open_settlement_date(client, ledger):
    data = client.get(reverse("finance_dashboard:api_receivables"), {"sort": "ledger_entry_number", "dir": "asc"}).json()

    settled, still_open = data["records"]
    assert settled["settlement_date"] == "2026-01-22"
    assert still_open["settlement_date"] is None
    assert "top_accounts_paid" not in data


def test_receivables_can_exclude_document_types(client, ledger):
    data = client.get(reverse("finance_dashboard:api_receivables"), {"exclude_type": "ADT"}).json()

    assert [r["ledger_entry_number"] for r in data["records"]] == [10]


def test_listing_pages_twenty_rows(client):
    PayableRecord.objects.bulk_create([
        PayableRecord(branch_code=100, ledger_entry_number=n, due_date=date(2026, 1, 1) + timedelta(days=n))
        for n in range(25)
    ])
    url = reverse("finance_dashboard:api_payables")

    first = client.get(url).json()
    second = client.get(url, {"page": 2}).json()

    assert (first["num_pages"], len(first["records"])) == (2, 20)
    assert (second["page"], len(second["records"])) == (2, 5)


@pytest.mark.parametrize("params", [
    {"status": "overdue"},
    {"basis": "posted"},
    {"sort": "password"},
    {"dir": "sideways"},
])
def test_listing_rejects_bad_parameters(client, params):
    response = client.get(reverse("finance_dashboard:api_payables"), params)

    assert response.status_code == 400
    assert "error" in response.json()


def test_cash_flow_predicted(client, ledger):
    data = client.get(reverse("finance_dashboard:api_cash_flow"), {"start": "2026-01-01", "end": "2026-01-31"}).json()

    assert data["view"] == "predicted"
    assert data["total_payable"] == 100.0
    assert data["total_receivable"] == 580.0
    assert data["balance"] == 480.0
    assert [m["key"] for m in data["months"]] == ["2026-01"]
    assert "AIRSLAID" in data["branches"]


def test_cash_flow_realized_skips_open_receivables(client, ledger):
    data = client.get(reverse("finance_dashboard:api_cash_flow"), {"view": "realized"}).json()

    assert data["total_receivable"] == 500.0
    assert data["total_payable"] == 40.0


def test_cash_flow_rejects_unknown_view(client):
    assert client.get(reverse("finance_dashboard:api_cash_flow"), {"view": "forecast"}).status_code == 400


def test_reports(client, ledger, monkeypatch):
    monkeypatch.setattr("finance_dashboard.metrics.timezone.localdate", lambda: date(2026, 3, 1))

    data = client.get(reverse("finance_dashboard:api_reports")).json()

    assert data["top_suppliers"][0] == {"name": "Acme", "value": 100.0}
    assert data["top_customers"][0] == {"name": "Client", "value": 500.0}
    assert [r["ledger_entry_number"] for r in data["overdue_payables"]] == [1]
    assert [r["ledger_entry_number"] for r in data["overdue_receivables"]] == [11]
    assert data["overdue_payable_total"] == 100.0
    assert data["overdue_receivable_total"] == 80.0
