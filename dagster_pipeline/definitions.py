"""
Dagster code location for the finance dashboard sync

Intermediate asset values (raw Power BI rows, transformed frames) are
pickled under DAGSTER_STORAGE_DIR, next to the project by default.
"""
import os
from pathlib import Path

from dagster import Definitions, FilesystemIOManager, load_assets_from_modules

from dagster_pipeline import assets
from dagster_pipeline.assets import (
    full_sync_job,
    hourly_sync_schedule,
    payables_sync_job,
    receivables_sync_job,
)

STORAGE_DIR = Path(os.getenv("DAGSTER_STORAGE_DIR") or Path(__file__).resolve().parent.parent / "dagster_storage")

defs = Definitions(
    assets=load_assets_from_modules([assets]),
    jobs=[full_sync_job, payables_sync_job, receivables_sync_job],
    schedules=[hourly_sync_schedule],
    resources={
        "io_manager": FilesystemIOManager(base_dir=str(STORAGE_DIR)),
    },
)
