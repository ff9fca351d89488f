"""
Destination store access

Writes are batched upserts keyed on each table's unique constraint. Reads
pull the whole table in fixed-size pages ordered by (primary date desc,
id desc) so concurrent page reads line up.
"""
import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.db import DatabaseError, connection

from .exceptions import StoreError

logger = logging.getLogger(__name__)

FetchResult = namedtuple('FetchResult', ['records', 'total'])


def upsert_records(shape, records, batch_size=None):
    """
    Insert-or-replace `records` in batches, returning the number written.

    Each batch commits on its own. A failing batch raises StoreError and
    leaves the earlier batches in place.
    """
    batch_size = batch_size or settings.FINANCE_SYNC_BATCH_SIZE
    written = 0

    for offset in range(0, len(records), batch_size):
        batch = records[offset:offset + batch_size]
        try:
            shape.model.objects.bulk_create(
                batch,
                update_conflicts=True,
                unique_fields=list(shape.key_fields),
                update_fields=shape.update_fields,
            )
        except DatabaseError as exc:
            logger.error("Batch at offset %d failed for %s: %s", offset, shape.name, exc)
            raise StoreError(offset, written, exc) from exc

        written += len(batch)
        logger.info("  → %s batch %d-%d upserted", shape.name, offset, offset + len(batch) - 1)

    return written


def _read_page(shape, start, page_size):
    ordering = (f'-{shape.primary_date}', '-id')
    return list(shape.model.objects.order_by(*ordering)[start:start + page_size])


def _read_page_in_worker(shape, start, page_size):
    try:
        return _read_page(shape, start, page_size)
    finally:
        # worker threads own their connection
        connection.close()


def fetch_all(shape, page_size=None, max_workers=None):
    """
    Read every stored record of `shape`.

    Pages are requested together on a thread pool (or inline when
    `max_workers` is 1) and concatenated in page order. Any failing page
    fails the whole read.
    """
    page_size = page_size or settings.FINANCE_READ_PAGE_SIZE
    if max_workers is None:
        max_workers = settings.FINANCE_READ_WORKERS

    total = shape.model.objects.count()
    if total == 0:
        return FetchResult([], 0)

    starts = range(0, total, page_size)
    if max_workers <= 1:
        pages = [_read_page(shape, start, page_size) for start in starts]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            pages = list(pool.map(lambda start: _read_page_in_worker(shape, start, page_size), starts))

    records = [record for page in pages for record in page]
    logger.debug("Read %d %s in %d pages", len(records), shape.name, len(pages))
    return FetchResult(records, total)
