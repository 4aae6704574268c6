"""initial beer order schema

Revision ID: b7e1c0a4d2f9
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the catalog, customer and order tables:
- beers: catalog entries, unique by UPC
- customers: customer master data (email unique at the service layer)
- beer_orders: order aggregate root, customer_ref is free text
- beer_order_lines: composite key (beer_order_id, beer_id), cascades with its order

Every table carries an integer `version` column used for optimistic locking.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7e1c0a4d2f9'
down_revision = None
branch_labels = None
depends_on = None


ORDER_STATUSES = (
    'NEW', 'VALIDATION_PENDING', 'VALIDATED', 'ALLOCATION_PENDING',
    'ALLOCATED', 'PICKED_UP', 'DELIVERED', 'CANCELLED',
)
LINE_STATUSES = ('NEW', 'ALLOCATED', 'PICKED_UP', 'CANCELLED')


def _timestamps():
    return [
        sa.Column('created_date', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_date', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    # ============================================================================
    # beers: catalog
    # ============================================================================
    op.create_table(
        'beers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('style', sa.String(length=64), nullable=False),
        sa.Column('upc', sa.String(length=64), nullable=False),
        sa.Column('quantity_on_hand', sa.Integer(), nullable=True),
        sa.Column('price', sa.Numeric(precision=19, scale=2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('upc', name='uq_beers_upc'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_beers_name', 'beers', ['name'], unique=False)

    # ============================================================================
    # customers
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('address_line1', sa.String(length=255), nullable=False),
        sa.Column('address_line2', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=128), nullable=False),
        sa.Column('state', sa.String(length=64), nullable=False),
        sa.Column('postal_code', sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_email', 'customers', ['email'], unique=False)
    op.create_index('ix_customers_phone', 'customers', ['phone'], unique=False)

    # ============================================================================
    # beer_orders: aggregate root
    # ============================================================================
    op.create_table(
        'beer_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('customer_ref', sa.String(length=255), nullable=False),
        sa.Column('payment_amount', sa.Numeric(precision=19, scale=2), nullable=True),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='beerorderstatus',
                                    native_enum=False, length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_beer_orders_customer_ref', 'beer_orders', ['customer_ref'], unique=False)

    # ============================================================================
    # beer_order_lines: owned by beer_orders, keyed by (order, beer)
    # ============================================================================
    op.create_table(
        'beer_order_lines',
        sa.Column('beer_order_id', sa.Integer(), nullable=False),
        sa.Column('beer_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('order_quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.Enum(*LINE_STATUSES, name='beerorderlinestatus',
                                    native_enum=False, length=32), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('order_quantity > 0', name='ck_beer_order_lines_quantity_positive'),
        sa.ForeignKeyConstraint(['beer_order_id'], ['beer_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['beer_id'], ['beers.id'], ),
        sa.PrimaryKeyConstraint('beer_order_id', 'beer_id')
    )
    op.create_index('ix_beer_order_lines_order', 'beer_order_lines', ['beer_order_id'], unique=False)
    op.create_index('ix_beer_order_lines_beer', 'beer_order_lines', ['beer_id'], unique=False)


def downgrade():
    op.drop_index('ix_beer_order_lines_beer', table_name='beer_order_lines')
    op.drop_index('ix_beer_order_lines_order', table_name='beer_order_lines')
    op.drop_table('beer_order_lines')
    op.drop_index('ix_beer_orders_customer_ref', table_name='beer_orders')
    op.drop_table('beer_orders')
    op.drop_index('ix_customers_phone', table_name='customers')
    op.drop_index('ix_customers_email', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_beers_name', table_name='beers')
    op.drop_table('beers')
