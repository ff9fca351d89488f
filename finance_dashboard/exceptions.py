class SyncError(Exception):
    """Base class for failures that abort a sync run"""


class ConfigurationError(SyncError):
    pass


class UpstreamError(SyncError):
    """Non-success answer from the identity provider or the analytics API"""

    def __init__(self, stage, status_code, body):
        self.stage = stage
        self.status_code = status_code
        self.body = body
        super().__init__(f"{stage} error ({status_code}): {body}")


class StoreError(SyncError):
    """A destination batch failed; earlier batches stay committed"""

    def __init__(self, offset, written, cause):
        self.offset = offset
        self.written = written
        self.cause = cause
        super().__init__(f"Batch at offset {offset} failed after {written} rows written: {cause}")


class SyncInProgressError(SyncError):
    """Another sync of the same target holds the single-flight lock"""

    def __init__(self, target):
        self.target = target
        super().__init__(f"A {target} sync is already running.")
