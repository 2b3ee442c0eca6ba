from .client import TwentyClient
from .config_types import ClientConfig, RetryPolicy
from .errors import (
    ApiError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    RequestCancelled,
    RequestTimeout,
    ResponseDecodeError,
    TwentyClientError,
    UnauthorizedError,
    ValidationError,
)
from .list_options import ListOptions

__all__ = [
    "TwentyClient",
    "ClientConfig",
    "RetryPolicy",
    "ListOptions",
    "TwentyClientError",
    "ApiError",
    "UnauthorizedError",
    "NotFoundError",
    "RateLimitedError",
    "ValidationError",
    "NetworkError",
    "RequestCancelled",
    "RequestTimeout",
    "InvalidRequestError",
    "ResponseDecodeError",
]
