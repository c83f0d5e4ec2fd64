"""Retry policy domain value object."""

from dataclasses import dataclass

from leasekeeper.domain.exceptions import LeaseConfigError, LeaseStoreError

# Transient errno codes that indicate retryable network errors
# These are Linux errno values commonly seen in network operations
_TRANSIENT_ERRNOS = frozenset(
    {
        104,  # ECONNRESET - Connection reset by peer
        110,  # ETIMEDOUT - Connection timed out
        111,  # ECONNREFUSED - Connection refused
        113,  # EHOSTUNREACH - No route to host
        115,  # EINPROGRESS - Operation now in progress
    }
)


@dataclass(frozen=True)
class RetryPolicy:
    """Polling and failure classification policy for the election loop.

    Store failures are never retried inside a tick: the elector gives up on
    the current tick and polls again after the next delay. This policy
    decides how long that delay is and how loudly a failure is reported.

    Attributes:
        jitter_factor: Fraction of the retry period added as random jitter
                      to each delay, spreading candidates' polls apart.
                      0 disables jitter. Must be in [0, 1).
        max_delay_ratio: Upper bound on any delay as a fraction of the lease
                        duration, so a leader always renews before expiry.
                        Must be in (0, 1).
    """

    jitter_factor: float = 0.0
    max_delay_ratio: float = 0.5

    def __post_init__(self) -> None:
        """Validate retry policy configuration."""
        self._validate_jitter_factor()
        self._validate_max_delay_ratio()

    def _validate_jitter_factor(self) -> None:
        """Validate jitter_factor is in [0, 1)."""
        if not 0 <= self.jitter_factor < 1:
            raise LeaseConfigError(
                f"jitter_factor must be in [0, 1), got: {self.jitter_factor}"
            )

    def _validate_max_delay_ratio(self) -> None:
        """Validate max_delay_ratio is in (0, 1)."""
        if not 0 < self.max_delay_ratio < 1:
            raise LeaseConfigError(
                f"max_delay_ratio must be in (0, 1), got: {self.max_delay_ratio}"
            )

    def calculate_delay(
        self, retry_period: float, lease_duration: float, sample: float = 0.0
    ) -> float:
        """Calculate the wait before the next poll.

        delay = retry_period * (1 + jitter_factor * sample), capped at
        lease_duration * max_delay_ratio but never below retry_period when
        retry_period itself is under the cap.

        Args:
            retry_period: Configured poll period in seconds.
            lease_duration: Configured lease duration in seconds.
            sample: Random sample in [0, 1) used for jitter.

        Returns:
            Delay in seconds before the next tick.
        """
        delay = retry_period * (1 + self.jitter_factor * sample)
        cap = max(lease_duration * self.max_delay_ratio, retry_period)
        return float(min(delay, cap))

    def is_transient_error(self, error: BaseException) -> bool:
        """Determine if an error is transient (expected to clear on its own).

        Transient errors are temporary failures such as connection loss and
        timeouts. They are reported at warning level; anything else is
        reported as an error.

        Args:
            error: The exception to classify.

        Returns:
            True if the error is transient, False if it's a permanent error.
        """
        if isinstance(error, LeaseStoreError):
            if error.transient:
                return True
            if error.original_error is not None:
                return self.is_transient_error(error.original_error)
            return False

        if isinstance(error, ConnectionError):
            return True

        if isinstance(error, TimeoutError):
            return True

        if isinstance(error, OSError) and error.errno is not None:
            return error.errno in _TRANSIENT_ERRNOS

        return False
