"""Utility for resolving registry names to IDs."""

from fincontrol.domain.entities import RegistryKind
from fincontrol.domain.errors import NotFoundError, registry_name_not_found
from fincontrol.domain.registry import RegistryService


def resolve_entry(registry_service: RegistryService, kind: RegistryKind, reference: str) -> str:
    """Resolve a registry entry name or ID to its ID.

    Args:
        registry_service: RegistryService instance
        kind: Registry to search
        reference: Entry ID, or entry name (case-insensitive)

    Returns:
        Entry ID

    Raises:
        NotFoundError: If no entry matches
    """
    reference = reference.strip()
    entries = registry_service.list(kind)

    # IDs win over names
    for entry in entries:
        if entry.id == reference:
            return entry.id

    entry = registry_service.find_by_name(kind, reference)
    if entry is None:
        raise NotFoundError(registry_name_not_found(kind.value, reference))
    return entry.id
