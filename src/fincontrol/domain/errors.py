"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ReferentialIntegrityError(DomainError):
    """Registry entry is still referenced and cannot be deleted."""


class StoreUnavailableError(DomainError):
    """The storage backend could not be reached or failed."""


class PartialBatchError(StoreUnavailableError):
    """A batch write failed part way through.

    ``saved`` holds the entries persisted before the failure; nothing is
    rolled back.
    """

    def __init__(self, message: str, saved: list):
        super().__init__(message)
        self.saved = saved


class StaleResponseDiscarded(Exception):
    """A response arrived for a request that has since been superseded.

    Not a user-facing error; callers drop the response.
    """

    def __init__(self, ticket: int, latest: int):
        super().__init__(f"Response for request {ticket} superseded by request {latest}")
        self.ticket = ticket
        self.latest = latest


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def registry_entry_not_found(kind: str, entry_id: str) -> str:
    """Return message for missing registry entry by ID."""
    return f"{kind} entry {entry_id} not found"


def registry_name_not_found(kind: str, name: str) -> str:
    """Return message for missing registry entry by name."""
    return f"{kind} entry '{name}' not found"


def registry_delete_blocked(kind: str, entry_id: str, reference_count: int) -> str:
    """Return message when a registry entry still has references."""
    return (
        f"Cannot delete {kind} entry {entry_id}: it is referenced by "
        f"{reference_count} record{'s' if reference_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
