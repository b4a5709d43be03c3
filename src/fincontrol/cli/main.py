"""Main CLI entry point."""

import logging

import click
from fincontrol.config import load_config
from fincontrol.database.factories import create_store
from fincontrol.domain.errors import DomainError
from fincontrol.logging_config import configure_logging

# Import and register all commands at module level
from fincontrol.cli.commands import (
    add,
    transaction,
    registry,
    cashflow,
    summary,
    import_cmd,
    export_cmd,
)


@click.group()
@click.option(
    "--storage",
    type=click.Choice(["sql", "local"], case_sensitive=False),
    help="Storage backend (overrides FINCONTROL_STORAGE environment variable)",
    envvar="FINCONTROL_STORAGE",
)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database or local store file (overrides FINCONTROL_DB_PATH)",
    envvar="FINCONTROL_DB_PATH",
)
@click.option(
    "--database-url",
    help="SQLAlchemy database URL (overrides FINCONTROL_DATABASE_URL)",
    envvar="FINCONTROL_DATABASE_URL",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, storage: str | None, db_path: str | None, database_url: str | None, verbose: bool):
    """Fincontrol - ledger and cash-flow projection.

    Record income and expenses across banks and wallets, move money between
    banks, schedule recurring entries and project the cash flow ahead.
    """
    ctx.ensure_object(dict)
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    # Open the store only when actually running a command (not for help)
    if ctx.invoked_subcommand is not None:
        try:
            config = load_config(
                backend=storage, database_url=database_url, data_path=db_path
            )
            store = create_store(config)
            store.connect()
            store.initialize_schema()
        except DomainError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        ctx.obj["store"] = store
        ctx.call_on_close(store.disconnect)


# Register all commands
add.register_commands(cli)
transaction.register_commands(cli)
registry.register_commands(cli)
cashflow.register_commands(cli)
summary.register_commands(cli)
import_cmd.register_commands(cli)
export_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
