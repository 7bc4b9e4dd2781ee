# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/merrily/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (use `flask db upgrade` against Postgres).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection:
# - python -m flask users list
#   List local user profiles with admin flags.
# - python -m flask users set-admin <user_id> [--revoke]
#   Grant or revoke the local admin flag.
#
# Catalog bootstrap:
# - python -m flask catalog seed-defaults
#   Create the default categories (Drinks, Food, Dessert) if missing.
#
# Maintenance:
# - python -m flask maintenance purge-deleted --days 90
#   Hard-delete rows soft-deleted more than N days ago.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import UserProfile
from .services import catalog_service
from .services import maintenance_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask catalog seed-defaults' to add categories.")


@click.group('users')
def users_group():
    """User profile inspection commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    profiles = db.session.query(UserProfile).order_by(UserProfile.created_at.asc()).all()
    if not profiles:
        click.echo("No user profiles found.")
        return

    click.echo(f"\n{'ID':<38} {'Name':<24} {'Email':<32} {'Admin'}")
    click.echo("-" * 100)
    for p in profiles:
        click.echo(f"{p.id:<38} {p.display_name or '':<24} {p.email or '':<32} {'yes' if p.is_admin else 'no'}")
    click.echo(f"\nTotal: {len(profiles)} users")


@users_group.command('set-admin')
@click.argument('user_id')
@click.option('--revoke', is_flag=True, help='Remove the admin flag instead of granting it')
@with_appcontext
def set_admin(user_id, revoke):
    """
    Toggle the local admin flag.

    Auth metadata on the platform is left as is; use the admin API to change it there.
    """
    profile = db.session.get(UserProfile, user_id)
    if profile is None:
        click.echo(f"FAIL No profile for user {user_id}")
        raise SystemExit(1)

    profile.is_admin = not revoke
    db.session.commit()
    state = "revoked" if revoke else "granted"
    click.echo(f"PASS Admin {state} for {profile.display_name} ({user_id})")


@click.group('catalog')
def catalog_group():
    """Product catalog bootstrap commands."""


@catalog_group.command('seed-defaults')
@with_appcontext
def seed_defaults():
    added = catalog_service.seed_default_categories()
    click.echo(f"PASS Added {added} default categories.")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('purge-deleted')
@click.option('--days', type=int, default=90, show_default=True)
@with_appcontext
def purge_deleted_cli(days):
    """Hard-delete soft-deleted rows older than the retention window."""
    counts = maintenance_service.purge_deleted(days=days)
    for table, deleted in counts.items():
        click.echo(f"Deleted {deleted} {table} older than {days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(maintenance_group)
