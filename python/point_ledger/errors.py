"""
Ledger Errors

Exceptions raised by the ingestion engine.
"""


class IngestionError(Exception):
    """Base ingestion error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MalformedBatchError(IngestionError):
    """The submitted batch is not a well-formed record array.

    Raised before the store is touched, so no rows are written.
    """

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"Record {index}: {message}"
        super().__init__(f"Invalid format: {message}")
