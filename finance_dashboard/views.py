from django.core.paginator import Paginator
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .lookups import account_label, branch_label, branch_names
from .mapper import PAYABLES, RECEIVABLES, SHAPES, record_to_dict
from .metrics import (
    PREDICTED,
    VIEWS,
    cash_flow,
    monthly_totals,
    partner_report,
    status_totals,
    top_accounts_paid,
)
from .query import FilterSpec, available_branches, filter_records, sort_records
from .store import fetch_all
from .sync import sync

ITEMS_PER_PAGE = 20


def _bad_request(message):
    return JsonResponse({'error': message}, status=400)


def _money(value):
    return float(value)


def _day(value):
    return value.isoformat() if value else None


def _record_payload(record, shape):
    row = record_to_dict(record, shape)
    for name, value in row.items():
        if hasattr(value, 'isoformat'):
            row[name] = value.isoformat()
        elif hasattr(value, 'quantize'):
            row[name] = float(value)
    row['id'] = record.pk
    row['status'] = record.status
    row['branch_name'] = branch_label(record.branch)
    # an open receivable never shows a settlement date
    row['settlement_date'] = _day(record.effective_settlement_date)
    if shape is PAYABLES:
        row['settlement_account_name'] = (
            account_label(record.settlement_account_code) if record.settlement_account_code else None
        )
    return row


def _totals_payload(totals):
    return {
        'total_open': _money(totals.total_open),
        'total_settled': _money(totals.total_settled),
        'total_original': _money(totals.total_original),
        'count_open': totals.count_open,
    }


def _filter_spec(request, shape):
    params = request.GET
    excluded = tuple(params.getlist('exclude_type')) if shape is RECEIVABLES else ()
    return FilterSpec(
        start=params.get('start') or None,
        end=params.get('end') or None,
        date_basis=params.get('basis', 'due'),
        branch=params.get('branch', 'all'),
        status=params.get('status', 'all'),
        search_text=params.get('q', ''),
        exclude_document_types=excluded,
    )


# ============================================
# SYNC
# ============================================

@csrf_exempt
@require_http_methods(["POST"])
def api_sync(request, target):
    """Re-pull one dataset from Power BI and upsert it"""
    if target not in SHAPES:
        return _bad_request(f"Unknown sync target: {target}")

    outcome = sync(target)
    return JsonResponse(outcome.as_dict(), status=200 if outcome.success else 502)


# ============================================
# RECORD LISTINGS
# ============================================

def _record_listing(request, shape):
    try:
        spec = _filter_spec(request, shape)
    except ValueError as exc:
        return _bad_request(str(exc))

    sort_key = request.GET.get('sort', 'due_date')
    direction = request.GET.get('dir', 'desc')
    if sort_key not in shape.field_names or direction not in ('asc', 'desc'):
        return _bad_request(f"Invalid sort: {sort_key} {direction}")

    result = fetch_all(shape)
    filtered = filter_records(result.records, spec)
    ordered = sort_records(filtered, sort_key, direction)
    page = Paginator(ordered, ITEMS_PER_PAGE).get_page(request.GET.get('page'))

    data = {
        'total_db_count': result.total,
        'filtered_count': len(filtered),
        'page': page.number,
        'num_pages': page.paginator.num_pages,
        'records': [_record_payload(record, shape) for record in page.object_list],
        'kpis': _totals_payload(status_totals(filtered)),
        'monthly': [
            {'key': m.key, 'label': m.label, 'total': _money(m.total), 'paid': _money(m.paid)}
            for m in monthly_totals(filtered)
        ],
        'branches': [
            {'code': code, 'name': branch_label(code)} for code in available_branches(result.records)
        ],
    }
    if shape is PAYABLES:
        data['top_accounts_paid'] = [
            {'name': item.name, 'value': _money(item.value)} for item in top_accounts_paid(filtered)
        ]
    return JsonResponse(data)


@require_http_methods(["GET"])
def api_payables(request):
    """Filtered accounts-payable listing with KPIs and charts"""
    return _record_listing(request, PAYABLES)


@require_http_methods(["GET"])
def api_receivables(request):
    """Filtered accounts-receivable listing with KPIs and charts"""
    return _record_listing(request, RECEIVABLES)


# ============================================
# CASH FLOW & REPORTS
# ============================================

@require_http_methods(["GET"])
def api_cash_flow(request):
    """Predicted (by due date) or realized (by settlement date) cash flow"""
    view = request.GET.get('view', PREDICTED)
    if view not in VIEWS:
        return _bad_request(f"Unknown view: {view}")

    summary = cash_flow(
        fetch_all(PAYABLES).records,
        fetch_all(RECEIVABLES).records,
        view=view,
        start=request.GET.get('start') or None,
        end=request.GET.get('end') or None,
        branch=request.GET.get('branch') or None,
    )

    return JsonResponse({
        'view': summary.view,
        'total_payable': _money(summary.total_payable),
        'total_receivable': _money(summary.total_receivable),
        'balance': _money(summary.balance),
        'months': [
            {
                'key': bucket.key,
                'label': bucket.label,
                'payable': _money(bucket.payable),
                'receivable': _money(bucket.receivable),
            }
            for bucket in summary.months
        ],
        'branches': branch_names(),
    })


@require_http_methods(["GET"])
def api_reports(request):
    """Top partners and overdue items for the selected due-date window"""
    report = partner_report(
        fetch_all(PAYABLES).records,
        fetch_all(RECEIVABLES).records,
        start=request.GET.get('start') or None,
        end=request.GET.get('end') or None,
    )

    def overdue(records, shape):
        return [_record_payload(record, shape) for record in records]

    return JsonResponse({
        'top_suppliers': [{'name': t.name, 'value': _money(t.value)} for t in report.top_suppliers],
        'top_customers': [{'name': t.name, 'value': _money(t.value)} for t in report.top_customers],
        'overdue_payables': overdue(report.overdue_payables, PAYABLES),
        'overdue_receivables': overdue(report.overdue_receivables, RECEIVABLES),
        'overdue_payable_total': _money(report.overdue_payable_total),
        'overdue_receivable_total': _money(report.overdue_receivable_total),
    })
