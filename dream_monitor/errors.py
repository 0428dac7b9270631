"""
Error Taxonomy for the Report Pipeline

Every failure a pipeline run can hit maps to one of these classes. They are
raised by the loaders, analyzer and store, and converted into structured
results at the pipeline boundary.
"""

from typing import Optional


class MonitorError(Exception):
    """Base class for all pipeline failures."""

    kind: str = "error"


class ConfigurationError(MonitorError):
    """A required credential or setting is missing."""

    kind = "configuration"


class UpstreamError(MonitorError):
    """An external source answered with a non-success status."""

    kind = "upstream"

    def __init__(self, source: str, status_code: Optional[int] = None, message: Optional[str] = None):
        self.source = source
        self.status_code = status_code
        if message is None:
            message = f"{source} error: {status_code}"
        super().__init__(message)


class NoDataError(MonitorError):
    """The news source returned zero articles."""

    kind = "no_data"


class ParseError(MonitorError):
    """Model output is not a JSON object, even after stripping code fences."""

    kind = "parse"

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)


class ValidationError(MonitorError):
    """Model output parsed but violates the schema (missing or out-of-range field)."""

    kind = "validation"

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)


class StorageError(MonitorError):
    """The report insert was rejected by the store."""

    kind = "storage"
