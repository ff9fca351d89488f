"""
Dagster ETL Pipeline for the finance dashboard
Extracts payables / receivables from Power BI and upserts them into the store
"""
import os
from typing import List

import django
import pandas as pd
from dagster import (
    asset,
    AssetExecutionContext,
    Output,
    MetadataValue,
    define_asset_job,
    AssetSelection,
    ScheduleDefinition
)

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from finance_dashboard.mapper import PAYABLES, RECEIVABLES, record_to_dict
from finance_dashboard.sync import extract_rows, load_records, sync_guard, transform_rows


def _to_frame(records, shape) -> pd.DataFrame:
    return pd.DataFrame([record_to_dict(record, shape) for record in records], columns=shape.field_names)


def _from_frame(df: pd.DataFrame, shape) -> list:
    # object dtype keeps Decimals and dates; NaN back to None for the ORM
    rows = df.astype(object).where(pd.notna(df), None).to_dict('records')
    return [shape.model(**row) for row in rows]


def _log_balance(context, df: pd.DataFrame, label):
    if df.empty:
        context.log.warning(f"No {label} rows after transform")
        return 0.0
    open_rows = df[df['outstanding_balance'] > 0]
    total_open = float(open_rows['outstanding_balance'].sum()) if not open_rows.empty else 0.0
    context.log.info(f"  → Open items: {len(open_rows)}")
    context.log.info(f"  → Total open: ${total_open:,.2f}")
    return total_open


# ==============================================================================
# EXTRACT ASSETS - Pull raw rows from Power BI
# ==============================================================================

@asset(group_name="extract")
def raw_payable_rows(context: AssetExecutionContext) -> List[dict]:
    """Extract raw accounts-payable rows from the Power BI dataset"""
    context.log.info("Querying Power BI for payables")
    rows = extract_rows(PAYABLES)
    context.log.info(f"✓ Extracted {len(rows)} payable rows")
    return rows


@asset(group_name="extract")
def raw_receivable_rows(context: AssetExecutionContext) -> List[dict]:
    """Extract raw accounts-receivable rows from the Power BI dataset"""
    context.log.info("Querying Power BI for receivables")
    rows = extract_rows(RECEIVABLES)
    context.log.info(f"✓ Extracted {len(rows)} receivable rows")
    return rows


# ==============================================================================
# TRANSFORM ASSETS - Normalize, map and deduplicate
# ==============================================================================

@asset(group_name="transform")
def transformed_payables(context: AssetExecutionContext, raw_payable_rows: List[dict]) -> pd.DataFrame:
    """Normalize column names, coerce values and keep one row per (branch, entry)"""
    records = transform_rows(PAYABLES, raw_payable_rows)
    df = _to_frame(records, PAYABLES)
    context.log.info(f"✓ Transformed {len(raw_payable_rows)} rows into {len(df)} unique payables")
    _log_balance(context, df, "payable")
    return df


@asset(group_name="transform")
def transformed_receivables(context: AssetExecutionContext, raw_receivable_rows: List[dict]) -> pd.DataFrame:
    """Normalize column names, coerce values and keep one row per ledger entry"""
    records = transform_rows(RECEIVABLES, raw_receivable_rows)
    df = _to_frame(records, RECEIVABLES)
    context.log.info(f"✓ Transformed {len(raw_receivable_rows)} rows into {len(df)} unique receivables")
    _log_balance(context, df, "receivable")
    return df


# ==============================================================================
# LOAD ASSETS - Batched upsert into the store
# ==============================================================================

@asset(group_name="load")
def load_payables(context: AssetExecutionContext, transformed_payables: pd.DataFrame) -> Output[int]:
    """Upsert payables on UNIQUE(branch_code, ledger_entry_number)"""
    # shares the API sync lock so the two never write the table together
    with sync_guard(PAYABLES):
        written = load_records(PAYABLES, _from_frame(transformed_payables, PAYABLES))
    context.log.info(f"✓ Loaded {written} payables")

    return Output(
        written,
        metadata={
            "rows_written": MetadataValue.int(written),
            "total_open": MetadataValue.float(_log_balance(context, transformed_payables, "payable")),
        }
    )


@asset(group_name="load")
def load_receivables(context: AssetExecutionContext, transformed_receivables: pd.DataFrame) -> Output[int]:
    """Upsert receivables on UNIQUE(ledger_entry_number)"""
    with sync_guard(RECEIVABLES):
        written = load_records(RECEIVABLES, _from_frame(transformed_receivables, RECEIVABLES))
    context.log.info(f"✓ Loaded {written} receivables")

    return Output(
        written,
        metadata={
            "rows_written": MetadataValue.int(written),
            "total_open": MetadataValue.float(_log_balance(context, transformed_receivables, "receivable")),
        }
    )


# ==============================================================================
# DAGSTER JOBS & SCHEDULES
# ==============================================================================

# Job 1: Full sync of both datasets (Extract → Transform → Load)
full_sync_job = define_asset_job(
    name="full_finance_sync",
    description="Pull payables and receivables from Power BI and upsert them",
    selection=AssetSelection.all()
)

# Job 2: Payables only
payables_sync_job = define_asset_job(
    name="sync_payables",
    description="Pull and upsert accounts payable",
    selection=AssetSelection.assets(raw_payable_rows, transformed_payables, load_payables)
)

# Job 3: Receivables only
receivables_sync_job = define_asset_job(
    name="sync_receivables",
    description="Pull and upsert accounts receivable",
    selection=AssetSelection.assets(raw_receivable_rows, transformed_receivables, load_receivables)
)

# Schedule: full sync every hour during the day
hourly_sync_schedule = ScheduleDefinition(
    name="hourly_finance_sync",
    job=full_sync_job,
    cron_schedule="0 7-20 * * *",  # Every hour, 7:00 to 20:00
    execution_timezone="America/Sao_Paulo"
)
