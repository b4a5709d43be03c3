"""CLI helpers for registry entry resolution."""

from __future__ import annotations

import click
from fincontrol.domain.entities import RegistryKind
from fincontrol.domain.errors import NotFoundError
from fincontrol.domain.registry import RegistryService
from fincontrol.utils.registry_resolver import resolve_entry


def resolve_entry_or_exit(
    ctx: click.Context,
    registry_service: RegistryService,
    kind: RegistryKind,
    reference: str | None,
) -> str:
    """Resolve a registry name or ID, or exit with a CLI error.

    None and "" resolve to "" (unassigned).
    """
    if not reference:
        return ""
    try:
        return resolve_entry(registry_service, kind, reference)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
