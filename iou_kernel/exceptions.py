"""
Typed Exception Hierarchy for the IOU Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from IouKernelError:

    IouKernelError (base)
    |
    +-- EventError
    |   +-- ValidationError
    |   +-- UnsupportedEventError
    |
    +-- AccountError
    |   +-- AccountNotFoundError        (also a LookupError)
    |
    +-- InvariantError
    |   +-- InvariantViolationError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- SessionError
    |   +-- NotLoggedInError
    |   +-- UnknownCounterpartyError
    |
    +-- ConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                    | When Raised
----------------|-------------------------|-------------------------------------
Event           | VALIDATION_ERROR        | Event constructor rejected its input
                | UNSUPPORTED_EVENT       | Unknown event cannot be serialized
----------------|-------------------------|-------------------------------------
Account         | ACCOUNT_NOT_FOUND       | Event references an un-opened user
----------------|-------------------------|-------------------------------------
Invariant       | INVARIANT_VIOLATION     | Replay produced an illegal state
----------------|-------------------------|-------------------------------------
Immutability    | IMMUTABILITY_VIOLATION  | Stored ledger row updated/deleted
----------------|-------------------------|-------------------------------------
Session         | NOT_LOGGED_IN           | Command needs a current user
                | UNKNOWN_COUNTERPARTY    | Payment to a user with no account
----------------|-------------------------|-------------------------------------
Config          | CONFIG_ERROR            | Malformed configuration file

===============================================================================
HANDLING PATTERNS
===============================================================================

ValidationError is caller-facing and recoverable: the malformed event was
never built, so nothing was appended.

AccountNotFoundError means the stored ledger references an account that was
never opened. Treat the ledger as untrustworthy; do not retry.

    try:
        accounts = reconcile(events)
    except AccountNotFoundError as e:
        log.error("ledger_corrupt", extra={"username": e.username})
        raise
"""


class IouKernelError(Exception):
    """
    Base exception for all IOU kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "IOU_KERNEL_ERROR"


# Event-related exceptions


class EventError(IouKernelError):
    """Base exception for event-related errors."""

    code: str = "EVENT_ERROR"


class ValidationError(EventError):
    """
    An event constructor rejected its input.

    The event is never constructed, so it can never reach the ledger.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class UnsupportedEventError(EventError):
    """Event kind is not known to this kernel and cannot be serialized."""

    code: str = "UNSUPPORTED_EVENT"

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Unsupported event type: {event_type}")


# Account-related exceptions


class AccountError(IouKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError, LookupError):
    """An event references a username that was never opened."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, username: str, event_type: str | None = None):
        self.username = username
        self.event_type = event_type
        super().__init__(f"Account not found: {username}")


# Invariant exceptions


class InvariantError(IouKernelError):
    """Base exception for ledger invariant failures."""

    code: str = "INVARIANT_ERROR"


class InvariantViolationError(InvariantError):
    """Replaying the ledger produced a state that breaks a ledger invariant."""

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant {invariant} violated: {detail}")


# Immutability exceptions


class ImmutabilityError(IouKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete a stored ledger event."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Session exceptions


class SessionError(IouKernelError):
    """Base exception for command/session errors."""

    code: str = "SESSION_ERROR"


class NotLoggedInError(SessionError):
    """A command that moves money was issued with no current user."""

    code: str = "NOT_LOGGED_IN"

    def __init__(self):
        super().__init__("You are not logged in. No transaction has happened.")


class UnknownCounterpartyError(SessionError):
    """Payment target has no account."""

    code: str = "UNKNOWN_COUNTERPARTY"

    def __init__(self, username: str):
        self.username = username
        super().__init__(
            f"User {username} is not found. No transaction has happened."
        )


# Configuration exceptions


class ConfigError(IouKernelError):
    """Configuration file is malformed or holds an invalid value."""

    code: str = "CONFIG_ERROR"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)
