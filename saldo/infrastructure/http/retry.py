"""
Retry policy for transient failures (network errors, 5xx)
"""
from dataclasses import dataclass

from saldo.config import Settings
from saldo.infrastructure.http.errors import ApiError, NetworkError, ServerError


IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff

    attempts counts the first try: attempts=3 means one call plus two retries.
    4xx (including 401) is never retried. 5xx is only retried for idempotent
    methods so a POST (registration, login) is never submitted twice after
    the server has seen it. A request can override the method-based guess,
    e.g. a PUT that changes a password is not safe to repeat.
    """
    attempts: int = 3
    base_delay: float = 0.3
    max_delay: float = 3.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            attempts=max(1, settings.RETRY_ATTEMPTS),
            base_delay=max(0.0, settings.RETRY_BASE_DELAY),
            max_delay=max(0.0, settings.RETRY_MAX_DELAY),
        )

    def should_retry(
        self,
        method: str,
        error: ApiError,
        attempt: int,
        idempotent: bool | None = None,
    ) -> bool:
        """
        Args:
            method: HTTP method of the request
            error: failure of the attempt that just finished
            attempt: 1-based number of that attempt
            idempotent: overrides the method-based guess (None = by method)

        Returns:
            True if another attempt is allowed
        """
        if attempt >= self.attempts:
            return False
        if isinstance(error, NetworkError):
            return True
        if isinstance(error, ServerError):
            if idempotent is None:
                idempotent = method.upper() in IDEMPOTENT_METHODS
            return idempotent
        return False

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt"""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
