# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/courtside/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app courtside <group> <command> [options]
#
# System bootstrap/repair:
# - flask --app courtside system init
#   Idempotent bootstrap: creates tables, the first OWNER account and the default café tables.
# - flask --app courtside system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - flask --app courtside users list
#   List all staff accounts with role and active status.
# - flask --app courtside users create --name "Kasir 1" --email kasir@courtside.local --password "Password123!" --role KASIR
#   Create a staff account (prompts if options are omitted).
#
# Café tables:
# - flask --app courtside tables seed --count 12
#   Create tables T01..T12, skipping codes that already exist.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import User
from .models.auth import ROLE_OWNER, VALID_ROLES
from .services.auth_service import create_user, PasswordValidationError
from .services.venue_service import seed_tables


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--tables', 'table_count', type=int, default=None, help='Number of café tables to seed')
@with_appcontext
def init_system(table_count):
    """
    Initialize Courtside: schema, first OWNER account and café tables.

    Owner credentials come from SEED_OWNER_EMAIL / SEED_OWNER_PASSWORD.

    SECURITY: Change the owner password immediately in production!
    """
    click.echo("START Initializing Courtside...")

    db.create_all()
    click.echo("PASS Schema ready")

    email = current_app.config["SEED_OWNER_EMAIL"]
    password = current_app.config["SEED_OWNER_PASSWORD"]
    if db.session.query(User).filter_by(role=ROLE_OWNER).first():
        click.echo("WARN  An OWNER account already exists, skipping...")
    else:
        try:
            owner = create_user(name="Owner", email=email, password=password, role=ROLE_OWNER)
            click.echo(f"PASS Created owner: {owner.email}")
        except PasswordValidationError as e:
            click.echo(f"FAIL Password validation failed for owner: {str(e)}")
        except ServiceError as e:
            click.echo(f"FAIL Failed to create owner: {str(e)}")

    count = table_count if table_count is not None else current_app.config["SEED_TABLE_COUNT"]
    created = seed_tables(count)
    click.echo(f"PASS Tables: {len(created)} created, {count - len(created)} already present")

    click.echo("\n" + "="*60)
    click.echo("DONE Courtside Initialized Successfully!")
    click.echo("="*60)
    click.echo(f"\nOwner login: {email}")
    click.echo("\nSECURITY WARNING: change the seeded owner password in production!")
    click.echo("")


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

    click.echo("PASS Database reset complete. Run 'flask --app courtside system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address (login)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(VALID_ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """
    Create a new staff account.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter, one lowercase letter and one digit
    """
    try:
        user = create_user(name=name, email=email, password=password, role=role)
        click.echo(f"PASS Created user: {user.name} ({user.email}) with role '{user.role}'")
        click.echo("SECURITY Password securely hashed with bcrypt")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit")
    except ServiceError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all staff accounts with their roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<32} {'Role':<8} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<32} {user.role:<8} {active_str}")

    click.echo("="*80 + "\n")


@click.group('tables')
def tables_group():
    """Café table commands."""


@tables_group.command('seed')
@click.option('--count', type=int, default=10, show_default=True, help='Number of tables (T01..Tnn)')
@with_appcontext
def seed_tables_cli(count):
    """Create tables T01..Tnn; existing codes are left untouched."""
    if count < 1:
        click.echo("FAIL --count must be at least 1")
        return
    created = seed_tables(count)
    click.echo(f"PASS Created {len(created)} table(s)")
    for table in created:
        click.echo(f"     {table.code}  {table.name}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(tables_group)
