import pytest


@pytest.fixture(autouse=True)
def _inline_page_reads(settings):
    # worker threads would not see the test transaction
    settings.FINANCE_READ_WORKERS = 1
