"""
Sync job: Power BI dataset -> normalize -> map -> dedupe -> batched upsert

`sync(target)` is the single entry point used by the views; the Dagster
assets call the extract / transform / load steps one by one.
"""
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass

import requests
from django.conf import settings

from .dedup import deduplicate
from .exceptions import ConfigurationError, StoreError, SyncInProgressError, UpstreamError
from .mapper import SHAPES, get_shape, map_row
from .normalizer import normalize_row
from .powerbi import PowerBIClient
from .store import upsert_records

logger = logging.getLogger(__name__)

CONNECTION_HINT = (
    "Connection error: could not reach the analytics service. "
    "Check the network and the POWERBI_* settings."
)

# At most one writer per target at a time, API and Dagster alike
_running = {name: threading.Lock() for name in SHAPES}


@dataclass
class SyncOutcome:
    success: bool
    records_written: int = 0
    message: str = ''

    def as_dict(self):
        return {
            'success': self.success,
            'count': self.records_written,
            'message': self.message,
        }


def extract_rows(shape, client=None):
    """Pull the raw rows of the shape's source table"""
    client = client or PowerBIClient.from_settings()
    table_name = settings.POWERBI[shape.table_setting]
    return client.fetch_table(table_name, limit=settings.POWERBI['ROW_LIMIT'])


def transform_rows(shape, rows):
    """Normalize and map every row, then keep one record per identity key"""
    mapped = []
    for idx, raw in enumerate(rows):
        row = normalize_row(raw)
        if idx == 0:
            logger.debug("Clean keys sample: %s", ', '.join(row))
        mapped.append(map_row(row, shape))

    records = deduplicate(mapped, key=shape.identity)
    logger.info("Deduplicated %s: raw %d -> unique %d", shape.name, len(mapped), len(records))
    return records


def load_records(shape, records, batch_size=None):
    return upsert_records(shape, records, batch_size=batch_size)


@contextmanager
def sync_guard(shape):
    """
    Hold the single-flight lock of `shape` for the duration of the block.

    Shared by `sync()` and the Dagster load assets; raises
    SyncInProgressError when another writer of the same target is active.
    """
    lock = _running[shape.name]
    if not lock.acquire(blocking=False):
        logger.warning("Sync of %s requested while another is running", shape.name)
        raise SyncInProgressError(shape.name)
    try:
        yield
    finally:
        lock.release()


def sync(target, client=None, batch_size=None):
    """
    Re-pull `target` ('payables' or 'receivables') and upsert it.

    Always returns a SyncOutcome; failures are reported in it, never raised.
    """
    shape = get_shape(target)
    try:
        with sync_guard(shape):
            return _run(shape, client, batch_size)
    except SyncInProgressError as exc:
        return SyncOutcome(False, 0, str(exc))


def _run(shape, client, batch_size):
    logger.info("=== Sync %s started ===", shape.name)
    try:
        rows = extract_rows(shape, client)
        records = transform_rows(shape, rows)
        written = load_records(shape, records, batch_size)
    except ConfigurationError as exc:
        logger.error("Sync %s not configured: %s", shape.name, exc)
        return SyncOutcome(False, 0, str(exc))
    except UpstreamError as exc:
        logger.error("Sync %s aborted: %s", shape.name, exc)
        return SyncOutcome(False, 0, str(exc))
    except requests.RequestException as exc:
        logger.error("Sync %s could not reach Power BI: %s", shape.name, exc)
        return SyncOutcome(False, 0, f"{CONNECTION_HINT} ({exc})")
    except StoreError as exc:
        logger.error("Sync %s stopped mid-write: %s", shape.name, exc)
        return SyncOutcome(False, exc.written, str(exc))

    logger.info("=== SUCCESS: %d %s rows processed ===", written, shape.name)
    return SyncOutcome(True, written, f"Sync complete: {written} records.")
