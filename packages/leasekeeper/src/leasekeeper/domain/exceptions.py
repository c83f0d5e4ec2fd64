"""Domain exceptions.

Exception hierarchy:
- LeaseKeeperError: Base exception for everything raised by leasekeeper.
  - LeaseConfigError: Invalid configuration. Raised synchronously at
    construction time (settings, parser, elector), never mid-loop.
  - InvalidLeaseError: A Lease record would violate its invariants.
  - ElectorStateError: Misuse of the Elector lifecycle.
  - LeaseNotFoundError: No record exists for the key, or a conditional
    update no longer matches the stored record. Expected; drives transitions.
  - LeaseAlreadyExistsError: A record already exists for the key when
    creating. Expected; the caller lost the creation race.
  - LeaseStoreError: Backend or transport failure. Recoverable; the elector
    treats it as "could not confirm leadership this tick".
"""

from __future__ import annotations


class LeaseKeeperError(Exception):
    """Base exception for all leasekeeper errors."""


class LeaseConfigError(LeaseKeeperError):
    """Raised when leasekeeper configuration is invalid.

    Raised by domain entities (e.g., ElectorSettings), the ConfigParser and the
    Elector constructor. Configuration errors are fatal for the caller and are
    never produced by a running election loop.
    """

    pass


class InvalidLeaseError(LeaseKeeperError):
    """Raised when a Lease record violates its invariants."""


class ElectorStateError(LeaseKeeperError):
    """Raised when an Elector is used outside its lifecycle (e.g., run twice)."""


class LeaseNotFoundError(LeaseKeeperError):
    """Raised when the lease record is absent or no longer matches.

    Attributes:
        lease_key: Key of the lease record that was looked up.
    """

    def __init__(self, lease_key: str, message: str | None = None) -> None:
        super().__init__(message or f"lease {lease_key!r} not found")
        self.lease_key = lease_key


class LeaseAlreadyExistsError(LeaseKeeperError):
    """Raised when creating a lease record that already exists.

    Attributes:
        lease_key: Key of the lease record that already exists.
    """

    def __init__(self, lease_key: str) -> None:
        super().__init__(f"lease {lease_key!r} already exists")
        self.lease_key = lease_key


class LeaseStoreError(LeaseKeeperError):
    """Raised when the lease store backend fails.

    Attributes:
        message: Human-readable error description.
        operation: Store operation that failed ("get", "create", "update").
        transient: True if the failure is likely to clear on retry
                   (connection loss, timeout).
        original_error: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        transient: bool = False,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize LeaseStoreError.

        Args:
            message: Human-readable error description.
            operation: Store operation that failed.
            transient: Whether the failure is transient.
            original_error: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.transient = transient
        self.original_error = original_error
