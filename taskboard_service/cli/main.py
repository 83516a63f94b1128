"""Main CLI entry point for taskboard-service management commands."""

import click

from taskboard_service.cli.commands import database, reminders, server
from taskboard_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="taskboard-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Taskboard Service CLI - management commands.

    \b
    Command Groups:
      server     Run the API server
      db         Create tables, check connectivity
      reminders  Inspect due and upcoming reminders

    \b
    Quick Start:
      taskboard-service db init
      taskboard-service server run
      taskboard-service reminders preview <user-id>
    """
    ctx.ensure_object(dict)


cli.add_command(server.server)
cli.add_command(database.db)
cli.add_command(reminders.reminders)


def main() -> None:
    """Main entry point for the CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
