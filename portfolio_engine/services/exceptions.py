# portfolio_engine/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
knowledge. The calculation engine itself never raises them for well-formed
input: missing prices and missing histories degrade to "exclude" or "empty".
They exist for the boundaries around the engine:

- Parsing raw exchange payloads into record models
- Collaborators that fetch data from the exchange

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── RecordParseError
    └── DataSourceError
        ├── SourceUnavailableError
        └── RateLimitError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class RecordParseError(ValidationError):
    """
    Raised when a raw exchange payload cannot be parsed into a record model.

    Attributes:
        record_kind: Name of the record model (e.g., "RawTrade")
        index: 0-based position of the offending payload in its batch
        errors: Pydantic error details for the payload
    """

    def __init__(
            self,
            record_kind: str,
            index: int,
            errors: list[dict] | None = None,
    ) -> None:
        self.record_kind = record_kind
        self.index = index
        self.errors = errors or []

        field = None
        if self.errors and self.errors[0].get("loc"):
            field = ".".join(str(part) for part in self.errors[0]["loc"])

        message = f"Invalid {record_kind} payload at index {index}"
        if field:
            message += f" (field '{field}')"
        super().__init__(message, field=field)


# =============================================================================
# DATA SOURCE ERRORS
# =============================================================================


class DataSourceError(ServiceError):
    """
    Base exception for failures of the collaborators that fetch exchange data.

    Collection helpers treat this as "no data for this symbol" and keep
    going, so a partially failed fetch stays usable.

    Attributes:
        source: Name of the data source that failed (e.g., "trades:BTCUSDT")
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        super().__init__(message)


class SourceUnavailableError(DataSourceError):
    """
    Raised when the exchange cannot be reached or answers with a server error.

    This is a retryable error.
    """

    def __init__(self, source: str, reason: str) -> None:
        message = f"Data source '{source}' is unavailable: {reason}"
        super().__init__(message, source=source)
        self.reason = reason


class RateLimitError(DataSourceError):
    """
    Raised when the exchange's request weight limit has been exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by the API)
    """

    def __init__(self, source: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for data source '{source}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, source=source)
        self.retry_after = retry_after
