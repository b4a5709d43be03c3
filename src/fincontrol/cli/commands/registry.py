"""Registry management commands (bank, category, cost-center, participant, wallet)."""

from pathlib import Path

import click
from fincontrol.cli.error_handling import handle_domain_error
from fincontrol.cli.registry_resolution import resolve_entry_or_exit
from fincontrol.domain.entities import RegistryKind, WalletExtra
from fincontrol.domain.errors import DomainError
from fincontrol.domain.registry import RegistryService

COMMAND_NAMES = {
    RegistryKind.BANKS: ("bank", "banks"),
    RegistryKind.CATEGORIES: ("category", "categories"),
    RegistryKind.COST_CENTERS: ("cost-center", "cost centers"),
    RegistryKind.PARTICIPANTS: ("participant", "participants"),
    RegistryKind.WALLETS: ("wallet", "wallets"),
}


def read_name_lines(path: str) -> list[str]:
    """Read a name list file as UTF-8, falling back to Latin-1."""
    raw = Path(path).read_bytes()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = raw.decode("latin-1")
    return text.splitlines()


def build_registry_group(kind: RegistryKind) -> click.Group:
    """Build the create/list/rename/delete/import group for one registry."""
    singular, plural = COMMAND_NAMES[kind]

    @click.group(name=singular, help=f"Manage {plural}.")
    def group():
        pass

    bank_option = click.option("--bank", help="Bank name or ID the wallet belongs to")

    def create(ctx, name: str, bank: str | None = None):
        store = ctx.obj["store"]
        service = RegistryService(store)
        extra = None
        if kind == RegistryKind.WALLETS:
            extra = WalletExtra(
                bank_id=resolve_entry_or_exit(ctx, service, RegistryKind.BANKS, bank) or None
            )
        try:
            entry = service.create(kind, name, extra)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Created {singular} '{entry.name}' (ID: {entry.id})")

    create.__doc__ = f"Create a {singular}."
    create = click.argument("name")(click.pass_context(create))
    if kind == RegistryKind.WALLETS:
        create = bank_option(create)
    group.command("create")(create)

    @group.command("list", help=f"List all {plural}.")
    @click.pass_context
    def list_entries(ctx):
        store = ctx.obj["store"]
        service = RegistryService(store)

        entries = service.list(kind)
        if not entries:
            click.echo(f"No {plural} found.")
            return

        banks = service.names(RegistryKind.BANKS) if kind == RegistryKind.WALLETS else {}
        click.echo(f"\n{plural.capitalize()}:")
        click.echo("-" * 80)
        for entry in entries:
            line = f"ID: {entry.id} | {entry.name}"
            if kind == RegistryKind.WALLETS and entry.bank_id:
                line += f" | Bank: {banks.get(entry.bank_id, entry.bank_id)}"
            click.echo(line)

    def rename(ctx, reference: str, new_name: str, bank: str | None = None):
        store = ctx.obj["store"]
        service = RegistryService(store)
        entry_id = resolve_entry_or_exit(ctx, service, kind, reference)
        extra = None
        if kind == RegistryKind.WALLETS and bank is not None:
            extra = WalletExtra(
                bank_id=resolve_entry_or_exit(ctx, service, RegistryKind.BANKS, bank) or None
            )
        try:
            entry = service.rename(kind, entry_id, new_name, extra)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Renamed {singular} to '{entry.name}'")

    rename.__doc__ = f"Rename a {singular} given by name or ID."
    rename = click.argument("reference")(click.argument("new_name")(click.pass_context(rename)))
    if kind == RegistryKind.WALLETS:
        rename = bank_option(rename)
    group.command("rename")(rename)

    @group.command("delete", help=f"Delete a {singular} given by name or ID.")
    @click.argument("reference")
    @click.pass_context
    def delete_entry(ctx, reference: str):
        store = ctx.obj["store"]
        service = RegistryService(store)
        entry_id = resolve_entry_or_exit(ctx, service, kind, reference)
        try:
            service.delete(kind, entry_id)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Deleted {singular} {reference}")

    @group.command("import", help=f"Import {plural} from a file with one name per line.")
    @click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
    @click.pass_context
    def import_entries(ctx, file_path: str):
        store = ctx.obj["store"]
        service = RegistryService(store)
        try:
            created = service.import_names(kind, read_name_lines(file_path))
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"Imported {len(created)} {plural}")
        for entry in created:
            click.echo(f"  {entry.name}")

    return group


def register_commands(cli: click.Group) -> None:
    """Register registry commands with main CLI."""
    for kind in COMMAND_NAMES:
        cli.add_command(build_registry_group(kind))
