from __future__ import annotations


class TwentyClientError(Exception):
    """Base client error."""


class NetworkError(TwentyClientError):
    """Transport/network layer error."""


class RequestCancelled(TwentyClientError):
    """The caller cancelled the request before it completed."""


class RequestTimeout(RequestCancelled):
    """The request deadline elapsed before it completed."""


class InvalidRequestError(TwentyClientError):
    """The request could not be built (bad body or base URL)."""


class ResponseDecodeError(TwentyClientError):
    """A successful response carried a body that could not be decoded."""


class ApiError(TwentyClientError):
    def __init__(self, status_code: int, code: str = "", message: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"{self.code}: {self.message}"
        return f"HTTP {self.status_code}"


class UnauthorizedError(ApiError):
    def __init__(self, message: str = ""):
        super().__init__(401, "Unauthorized", message)

    def __str__(self) -> str:
        return f"unauthorized: {self.message}"


class NotFoundError(ApiError):
    def __init__(self, resource: str = "resource", id: str = "", message: str = ""):
        super().__init__(404, "Not Found", message)
        self.resource = resource
        self.id = id

    def __str__(self) -> str:
        if not self.id:
            return f"not found: {self.resource}"
        return f"not found: {self.resource} with id {self.id}"


class RateLimitedError(ApiError):
    def __init__(self, retry_after: int = 0, message: str = ""):
        super().__init__(429, "Too Many Requests", message)
        self.retry_after = retry_after

    def __str__(self) -> str:
        return f"rate limited: retry after {self.retry_after}s"


class ValidationError(ApiError):
    def __init__(self, field: str = "", message: str = "", code: str = "Bad Request"):
        super().__init__(400, code, message)
        self.field = field

    def __str__(self) -> str:
        return f"validation error: {self.field} - {self.message}"
