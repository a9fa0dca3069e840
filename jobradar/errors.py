"""Shared error hierarchy and the error taxonomy exposed by the JSON API."""

import enum

import redis


class ConfigError(RuntimeError):
    """Raised at startup when required settings are missing or malformed."""


class AppError(Exception):
    """Base class for errors raised by jobradar itself."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class HttpError(AppError):
    """Upstream replied with a non-2xx status."""

    def __init__(self, message: str, status: int, url: str, body: object = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url
        self.body = body


class UpstreamTimeoutError(AppError):
    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class UpstreamTransportError(AppError):
    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class RetryExhaustedError(AppError):
    """All retry attempts failed; the last failure is kept in ``last_error``."""

    def __init__(self, message: str, last_error: BaseException | None) -> None:
        super().__init__(message)
        self.last_error = last_error


class ErrorKind(str, enum.Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    INFRASTRUCTURE_ERROR = "INFRASTRUCTURE_ERROR"
    UPSTREAM_TRANSPORT_ERROR = "UPSTREAM_TRANSPORT_ERROR"
    UPSTREAM_RATE_LIMIT = "UPSTREAM_RATE_LIMIT"
    UPSTREAM_BAD_RESPONSE = "UPSTREAM_BAD_RESPONSE"
    UNEXPECTED = "UNEXPECTED"


STATUS_BY_KIND = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INFRASTRUCTURE_ERROR: 503,
    ErrorKind.UPSTREAM_TRANSPORT_ERROR: 502,
    ErrorKind.UPSTREAM_RATE_LIMIT: 503,
    ErrorKind.UPSTREAM_BAD_RESPONSE: 502,
    ErrorKind.UNEXPECTED: 500,
}


class AnalyzerError(AppError):
    """An error with a machine-readable kind, mapped to an HTTP status."""

    def __init__(self, message: str, kind: ErrorKind, details: object = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.details = details

    @property
    def status(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        body = {"error": self.kind.value, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


def classify_error(exc: BaseException) -> AnalyzerError:
    """Map any exception onto the API error taxonomy."""
    if isinstance(exc, AnalyzerError):
        return exc

    if isinstance(exc, RetryExhaustedError) and exc.last_error is not None:
        inner = classify_error(exc.last_error)
        return AnalyzerError(inner.message, inner.kind, inner.details)

    if isinstance(exc, HttpError):
        if exc.status == 429:
            return AnalyzerError(
                f"Upstream rate limit hit (status {exc.status})",
                ErrorKind.UPSTREAM_RATE_LIMIT,
                {"url": exc.url, "status": exc.status, "body": exc.body},
            )
        return AnalyzerError(
            f"Upstream request failed (status {exc.status})",
            ErrorKind.UPSTREAM_TRANSPORT_ERROR,
            {"url": exc.url, "status": exc.status, "body": exc.body},
        )

    if isinstance(exc, UpstreamTimeoutError):
        return AnalyzerError("Upstream request timed out", ErrorKind.UPSTREAM_TRANSPORT_ERROR, {"url": exc.url})

    if isinstance(exc, UpstreamTransportError):
        return AnalyzerError(exc.message, ErrorKind.UPSTREAM_TRANSPORT_ERROR, {"url": exc.url})

    if isinstance(exc, redis.RedisError):
        return AnalyzerError("Key/value store is unavailable", ErrorKind.INFRASTRUCTURE_ERROR, str(exc))

    return AnalyzerError("Unexpected error", ErrorKind.UNEXPECTED, str(exc) or type(exc).__name__)
