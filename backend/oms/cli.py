# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/oms/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--business "Acme Store"] [--email admin@oms.local]
#   Idempotent bootstrap: creates tables, a merchant and its admin user.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Merchant management (MULTI-TENANT):
# - python -m flask merchants list
# - python -m flask merchants create --name "Acme" --contact "Jane" --email jane@acme.test --phone 555-0100 --password "Password123"
#   Create a merchant with its first admin user.
#
# User inspection/bootstrap:
# - python -m flask users list [--merchant-id 1]
# - python -m flask users create --merchant-id 1 --username sam --email sam@acme.test --password "Password123" --role employee
#
# Maintenance:
# - python -m flask sessions cleanup
#   Delete sessions that expired or were revoked more than 30 days ago.

import click
from flask.cli import with_appcontext

from .errors import OmsError
from .extensions import db
from .models import Merchant, User
from .services import auth_service, session_service, user_service
from .validation import ROLES, CreateUserRequest


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--business', default='Default Merchant', help='Merchant (business) name')
@click.option('--username', default='admin', help='Admin username')
@click.option('--email', default='admin@oms.local', help='Admin email')
@click.option('--phone', default='0000000000', help='Admin phone number')
@click.option('--password', default='Password123!', help='Admin password')
@with_appcontext
def init_system(business, username, email, password, phone):
    """
    Create tables and, if no merchant exists yet, a merchant with its admin.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing OMS...")
    db.create_all()

    merchant = db.session.query(Merchant).first()
    if merchant:
        click.echo(f"PASS Using existing merchant: {merchant.merchant_name} (ID: {merchant.id})")
        return

    try:
        user = auth_service.register_merchant(
            username=username,
            email=email.lower(),
            password=password,
            phone_number=phone,
            business_name=business,
        )
    except OmsError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created merchant '{business}' (ID: {user.merchant_id}) with admin {user.email}")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('merchants')
def merchants_group():
    """Merchant (tenant) management commands."""


@merchants_group.command('list')
@with_appcontext
def list_merchants():
    merchants = db.session.query(Merchant).order_by(Merchant.id).all()
    if not merchants:
        click.echo("No merchants found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Contact':<20} {'Users'}")
    click.echo("=" * 80)
    for merchant in merchants:
        user_count = db.session.query(User).filter_by(merchant_id=merchant.id).count()
        click.echo(f"{merchant.id:<5} {merchant.merchant_name:<30} {merchant.contact_person_name or '-':<20} {user_count}")
    click.echo("=" * 80 + "\n")


@merchants_group.command('create')
@click.option('--name', required=True, help='Business name')
@click.option('--contact', required=True, help='Contact person (becomes the admin username)')
@click.option('--email', required=True, help='Admin email')
@click.option('--phone', required=True, help='Phone number')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@with_appcontext
def create_merchant_cli(name, contact, email, phone, password):
    """Create a new merchant (tenant) with its first admin user."""
    try:
        user = auth_service.register_merchant(
            username=contact,
            email=email.lower(),
            password=password,
            phone_number=phone,
            business_name=name,
        )
    except OmsError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created merchant: {name} (ID: {user.merchant_id}), admin user ID {user.id}")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--merchant-id', type=int, required=True, help='Merchant ID')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_user_cli(merchant_id, username, email, password, role, phone):
    """
    Create a user inside an existing merchant.

    Password must be at least 8 characters.
    """
    if not db.session.get(Merchant, merchant_id):
        click.echo(f"FAIL Merchant ID {merchant_id} not found")
        return
    try:
        user = user_service.create_user(merchant_id, CreateUserRequest(
            username=username,
            email=email.lower(),
            password=password,
            role=role,
            phone_number=phone,
        ))
    except OmsError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@click.option('--merchant-id', type=int, help='Filter by merchant ID')
@with_appcontext
def list_users(merchant_id):
    query = db.session.query(User)
    if merchant_id:
        query = query.filter_by(merchant_id=merchant_id)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Merchant':<9} {'Username':<20} {'Email':<35} {'Role'}")
    click.echo("=" * 90)
    for user in users:
        click.echo(f"{user.id:<5} {user.merchant_id:<9} {user.username:<20} {user.email:<35} {user.role}")
    click.echo("=" * 90 + "\n")


@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('cleanup')
@with_appcontext
def cleanup_sessions_cli():
    """Delete sessions that expired or were revoked more than 30 days ago."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} expired or revoked sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(merchants_group)  # Multi-tenant merchant management
    app.cli.add_command(users_group)
    app.cli.add_command(sessions_group)
