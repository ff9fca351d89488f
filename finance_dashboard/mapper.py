"""
Projection of normalized analytics rows into PayableRecord / ReceivableRecord

Each shape declares an allow-list of (model field, upstream column, coercer).
Columns outside the list are dropped; missing columns get the coercer's
typed default so every declared field is always populated.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .models import PayableRecord, ReceivableRecord
from .normalizer import to_date, to_decimal, to_flag, to_int, to_text

logger = logging.getLogger(__name__)

FieldSpec = namedtuple('FieldSpec', ['name', 'source', 'coerce'])

_COMMON_FIELDS = (
    FieldSpec('counterparty_code', 'agn_in_codigo', to_int),
    FieldSpec('counterparty_name', 'fpa_st_favorecido', to_text),
    FieldSpec('original_amount', 'valor', to_decimal),
    FieldSpec('outstanding_balance', 'mov_re_saldocpacre', to_decimal),
    FieldSpec('issue_date', 'fpa_dt_emissao', to_date),
    FieldSpec('ledger_entry_number', 'mov_in_numlancto', to_int),
    FieldSpec('internal_document_id', 'fpa_st_doctointerno', to_text),
    FieldSpec('nature', 'mov_ch_natureza', to_flag('C')),
    FieldSpec('reconciled_flag', 'mov_ch_conciliado', to_flag('N')),
    FieldSpec('note', 'rcb_st_nota', to_text),
    FieldSpec('org_code', 'org_in_codigo', to_int),
)

PAYABLE_FIELDS = _COMMON_FIELDS + (
    FieldSpec('branch_code', 'fil_in_codigo', to_int),
    FieldSpec('due_date', 'mov_dt_vencto', to_date),
    FieldSpec('document_date', 'mov_dt_datadocto', to_date),
    FieldSpec('document_type_code', 'fpa_tpd_st_codigo', to_text),
    FieldSpec('document_number', 'cpa_st_documento', to_text),
    FieldSpec('installment', 'cpa_st_parcela', to_text),
    FieldSpec('payable_number', 'cpa_in_ap', to_int),
    FieldSpec('source_counter', 'fpa_in_contador', to_int),
    FieldSpec('source_number', 'fpa_in_numero', to_int),
    FieldSpec('amount_settled', 'cheqbx_re_vrbaixa', to_decimal),
    FieldSpec('interest_amount', 'cheqbx_re_vrjuros', to_decimal),
    FieldSpec('settlement_account_code', 'conta_baixa', to_int),
)

RECEIVABLE_FIELDS = _COMMON_FIELDS + (
    FieldSpec('due_date', 'dt_vencto', to_date),
    FieldSpec('settlement_date', 'dt_baixa', to_date),
    FieldSpec('entry_date', 'dt_lancamento', to_date),
    FieldSpec('document_type_code', 'fre_tpd_st_codigo', to_text),
    FieldSpec('document_number', 'cre_st_documento', to_text),
    FieldSpec('installment', 'cre_st_parcela', to_text),
    FieldSpec('receivable_number', 'fre_in_numero', to_int),
)

SETTLEMENT_DATE_COLUMN = 'cheq_dt_data'
CHECK_FRAGMENTS = ('cheq', 'check')
DATE_FRAGMENTS = ('dt', 'data', 'date')


def _exact_key(key):
    def lookup(row):
        if key in row:
            return key
        return None
    return lookup


def _fragment_scan(*fragment_groups):
    """First key containing one fragment from every group"""
    def lookup(row):
        for key in row:
            if all(any(fragment in key for fragment in group) for group in fragment_groups):
                return key
        return None
    return lookup


SETTLEMENT_DATE_STRATEGIES = (
    _exact_key(SETTLEMENT_DATE_COLUMN),
    _fragment_scan(CHECK_FRAGMENTS, DATE_FRAGMENTS),
)


def find_settlement_date_key(row, strategies=SETTLEMENT_DATE_STRATEGIES):
    """
    Best-effort lookup of the payables settlement-date column.

    The upstream dataset has renamed this column before; try the exact name
    first, then any column that looks like a check date. Returns the key
    used, or None.
    """
    for strategy in strategies:
        key = strategy(row)
        if key is not None:
            return key
    return None


@dataclass(frozen=True)
class Shape:
    name: str
    model: type
    fields: Tuple[FieldSpec, ...]
    key_fields: Tuple[str, ...]
    primary_date: str
    table_setting: str
    settlement_lookup: Optional[Callable] = None

    @property
    def field_names(self):
        names = [spec.name for spec in self.fields]
        if self.settlement_lookup is not None:
            names.append('settlement_date')
        return names

    def identity(self, record):
        return tuple(getattr(record, name) for name in self.key_fields)

    @property
    def update_fields(self):
        return [name for name in self.field_names if name not in self.key_fields] + ['synced_at']


PAYABLES = Shape(
    name='payables',
    model=PayableRecord,
    fields=PAYABLE_FIELDS,
    key_fields=('branch_code', 'ledger_entry_number'),
    primary_date='due_date',
    table_setting='PAYABLES_TABLE',
    settlement_lookup=find_settlement_date_key,
)

RECEIVABLES = Shape(
    name='receivables',
    model=ReceivableRecord,
    fields=RECEIVABLE_FIELDS,
    key_fields=('ledger_entry_number',),
    primary_date='due_date',
    table_setting='RECEIVABLES_TABLE',
)

SHAPES = {shape.name: shape for shape in (PAYABLES, RECEIVABLES)}


def get_shape(target):
    try:
        return SHAPES[target]
    except KeyError:
        raise ValueError(f"Unknown sync target: {target!r}") from None


def map_row(row, shape):
    """Build an unsaved model instance from one normalized row"""
    values = {spec.name: spec.coerce(row.get(spec.source)) for spec in shape.fields}

    if shape.settlement_lookup is not None:
        key = shape.settlement_lookup(row)
        if key is not None and key != SETTLEMENT_DATE_COLUMN:
            logger.debug("Mapped '%s' from '%s'", SETTLEMENT_DATE_COLUMN, key)
        values['settlement_date'] = to_date(row.get(key)) if key is not None else None

    return shape.model(**_fit_columns(shape.model, values))


def _fit_columns(model, values):
    """Cut text values down to their column's max_length"""
    for name, value in values.items():
        if isinstance(value, str):
            max_length = model._meta.get_field(name).max_length
            if max_length and len(value) > max_length:
                logger.debug("Truncated %s.%s to %d characters", model.__name__, name, max_length)
                values[name] = value[:max_length]
    return values


def record_to_dict(record, shape):
    return {name: getattr(record, name) for name in shape.field_names}
