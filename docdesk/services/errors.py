"""Error taxonomy shared by the backup and ranking services."""

from __future__ import annotations


class DocdeskError(Exception):
    """Base class for service-level failures."""
    pass


class NotFound(DocdeskError):
    """Raised when a snapshot, player, or session does not exist."""
    pass


class ValidationFailure(DocdeskError):
    """Raised when stored or submitted data does not match its schema."""
    pass


class TransactionFailure(DocdeskError):
    """Raised when the storage layer aborts a commit."""
    pass


class StorageUnavailable(DocdeskError):
    """Raised when a best-effort storage operation cannot be carried out."""
    pass


class InvalidStateTransition(DocdeskError):
    """Raised when a state machine is asked for a transition it does not allow."""
    pass
