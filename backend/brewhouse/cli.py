# Overview: Flask CLI command groups for database and catalog maintenance.

# backend/brewhouse/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog seed
#   Insert the sample beers. Beers whose UPC already exists are skipped.
# - python -m flask catalog list
#   Print every beer with its id, UPC, price and stock.
#
# Orders:
# - python -m flask orders show 12
#   Print an order with its lines.

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Beer
from .services.order_service import get_order
from .services.order_store import OrderNotFoundError
from .time_utils import to_utc_z


SAMPLE_BEERS = [
    ("Mango Bobs", "ALE", "0631234200036", 500, Decimal("12.95")),
    ("Galaxy Cat", "PALE_ALE", "9122089364369", 120, Decimal("12.95")),
    ("No Hammers On The Bar", "WHEAT", "0083783375213", 250, Decimal("12.95")),
    ("Blessed", "STOUT", "4666337557578", 80, Decimal("13.95")),
    ("Pinball Porter", "PORTER", "8380495518610", 300, Decimal("11.95")),
    ("Cactus Lager", "LAGER", "0954235215416", 75, Decimal("10.95")),
]


@click.group('system')
def system_group():
    """Database maintenance commands."""


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

    click.echo("PASS Database reset complete. Run 'python -m flask catalog seed' to load sample beers.")


@click.group('catalog')
def catalog_group():
    """Beer catalog commands."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Insert the sample beers, skipping any UPC already in the catalog."""
    created = 0
    for name, style, upc, quantity, price in SAMPLE_BEERS:
        if db.session.query(Beer).filter_by(upc=upc).first():
            click.echo(f"WARN  Beer with UPC {upc} already exists, skipping...")
            continue
        db.session.add(Beer(name=name, style=style, upc=upc, quantity_on_hand=quantity, price=price))
        created += 1
    db.session.commit()

    click.echo(f"PASS Seeded {created} beer(s)")


@catalog_group.command('list')
@with_appcontext
def list_catalog():
    """List all beers."""
    beers = db.session.query(Beer).order_by(Beer.id.asc()).all()
    if not beers:
        click.echo("No beers found.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<25} {'Style':<10} {'UPC':<15} {'Price':>8} {'On hand':>8}")
    click.echo("-" * 76)
    for b in beers:
        on_hand = b.quantity_on_hand if b.quantity_on_hand is not None else "-"
        click.echo(f"{b.id:<5} {b.name:<25} {b.style:<10} {b.upc:<15} {b.price:>8} {on_hand:>8}")
    click.echo(f"\nTotal: {len(beers)} beers")


@click.group('orders')
def orders_group():
    """Beer order inspection commands."""


@orders_group.command('show')
@click.argument('order_id', type=int)
@with_appcontext
def show_order(order_id):
    """Show one order with its lines."""
    try:
        view = get_order(order_id)
    except OrderNotFoundError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"Order {view.id} (version {view.version})")
    click.echo(f"  Customer ref: {view.customer_ref}")
    click.echo(f"  Status:       {view.status}")
    click.echo(f"  Payment:      {view.payment_amount if view.payment_amount is not None else '-'}")
    click.echo(f"  Created:      {to_utc_z(view.created_date)}")
    click.echo(f"\n  {'Beer':<6} {'Name':<25} {'Qty':>5} {'Status':<10}")
    for line in view.lines:
        click.echo(f"  {line.beer_id:<6} {line.beer_name:<25} {line.order_quantity:>5} {line.status:<10}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(orders_group)
