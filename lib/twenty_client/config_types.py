from __future__ import annotations
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds for the retry loop. ``max_attempts=1`` means no retries."""

    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be > 0")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")

    def no_retry(self) -> RetryPolicy:
        return replace(self, max_attempts=1)


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    token: str | None = None
    debug: bool = False
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    timeout_s: float = 30.0
    client_version: str | None = None
