import click
from flask.cli import with_appcontext

from agromart.extensions import db
from agromart.services import AuthService


@click.command("create-admin")
@click.option("--name", "full_name", required=True)
@click.option("--email", required=True)
@click.password_option()
@with_appcontext
def create_admin_command(full_name, email, password):
    """Create an administrator account for managing listings and machines."""
    user = AuthService.register_user(full_name=full_name, email=email, password=password, role="admin")
    click.echo(f"Created admin {user.email} ({user.id})")


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create any missing tables."""
    db.create_all()
    click.echo("Database tables created.")


def register_commands(app):
    app.cli.add_command(create_admin_command)
    app.cli.add_command(init_db_command)
