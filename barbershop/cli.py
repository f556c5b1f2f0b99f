import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import get_connection
from .services.bootstrap import initialize_database, reset_database
from .services.schema import pending_migrations


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create missing tables, migrate and seed."""
    result = initialize_database(get_connection())
    if not result["success"]:
        raise click.ClickException(result["message"])

    click.echo(result["message"])
    for name in result["migrations"]:
        click.echo(f"  applied {name}")


@click.command("reset-db")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@with_appcontext
def reset_db_command(yes):
    """Drop every table, recreate and reseed."""
    if not yes:
        click.confirm("This deletes all data. Continue?", abort=True)

    result = reset_database(get_connection())
    if result["status"] != "success":
        raise click.ClickException(result["message"])
    click.echo(result["message"])


@click.command("db-status")
@with_appcontext
def db_status_command():
    """Check connectivity and list pending migrations."""
    connection = get_connection()
    status = connection.check_status(timeout=current_app.config.get("DB_STATUS_TIMEOUT", 5.0))
    if not status["connected"]:
        raise click.ClickException(f"not connected: {status['message']}")
    click.echo(f"connected: {status['message']}")

    pending = pending_migrations(connection.store)
    if pending:
        click.echo("Pending migrations: " + ", ".join(pending))
    else:
        click.echo("Schema up to date")


def register_commands(app):
    for command in (init_db_command, reset_db_command, db_status_command):
        app.cli.add_command(command)
