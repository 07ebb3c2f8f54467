import click
from flask import current_app
from flask.cli import with_appcontext
from pymongo.errors import PyMongoError

from cloudmart.db import ensure_indexes, get_db, ping
from cloudmart.seed import seed_products, seed_users


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Check the MongoDB connection and create indexes."""
    db = get_db()
    try:
        ping(db)
    except PyMongoError as exc:
        raise click.ClickException(f"MongoDB connection failed: {exc}")
    ensure_indexes(db)
    click.echo(f"Database '{db.name}' initialized.")


@click.command("seed")
@with_appcontext
def seed_command():
    """Create the admin/demo accounts and sample products (idempotent)."""
    db = get_db()
    ensure_indexes(db)
    users = seed_users(db, current_app.config["ADMIN_EMAIL"], current_app.config["ADMIN_PASSWORD"])
    products = seed_products(db)
    click.echo(f"Seeding complete: {users} user(s), {products} product(s) created.")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_command)
