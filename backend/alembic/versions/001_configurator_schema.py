"""configurator_schema

Revision ID: 001_configurator
Revises:
Create Date: 2026-10-19

Creates the configurator tables:
- product_types (kitchen / wardrobe)
- option_categories (wizard steps, conditional display rules)
- option_values (option cards with price factor + specifications)
- order_requests (submitted configurations with client contact)

All DDL uses IF NOT EXISTS patterns so the migration is idempotent, safe to
run even when Base.metadata.create_all() already created the tables.
"""
import logging
from alembic import op
import sqlalchemy as sa
from sqlalchemy import text
from sqlalchemy.dialects import postgresql

revision = '001_configurator'
down_revision = None
branch_labels = None
depends_on = None

logger = logging.getLogger("alembic.001")


def _table_exists(conn, table_name: str) -> bool:
    result = conn.execute(
        text(
            "SELECT EXISTS("
            "  SELECT 1 FROM information_schema.tables"
            "  WHERE table_name = :tname"
            ")"
        ),
        {"tname": table_name},
    )
    return bool(result.scalar())


def _uuid_pk():
    return sa.Column('id', postgresql.UUID(as_uuid=False), primary_key=True)


def upgrade() -> None:
    conn = op.get_bind()

    # ── product_types ─────────────────────────────────────────────────────────
    if not _table_exists(conn, 'product_types'):
        op.create_table(
            'product_types',
            _uuid_pk(),
            sa.Column('name', sa.String(50), nullable=False, unique=True),
            sa.Column('display_name', sa.String(255), nullable=False),
            sa.Column('is_active', sa.Boolean, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        )
        logger.info("Created table: product_types")
    else:
        logger.info("Table product_types already exists — skipping create")

    # ── option_categories ─────────────────────────────────────────────────────
    if not _table_exists(conn, 'option_categories'):
        op.create_table(
            'option_categories',
            _uuid_pk(),
            sa.Column('product_type_id', postgresql.UUID(as_uuid=False),
                      sa.ForeignKey('product_types.id'), nullable=False),
            sa.Column('name', sa.String(100), nullable=False),
            sa.Column('title', sa.String(255), nullable=False),
            sa.Column('step_order', sa.Integer, nullable=False, server_default='0'),
            sa.Column('is_required', sa.Boolean, server_default=sa.true()),
            sa.Column('allows_multiple', sa.Boolean, server_default=sa.false()),
            sa.Column('conditional_display', postgresql.JSONB, nullable=True),
            sa.Column('status', sa.String(50), server_default='active'),
            sa.UniqueConstraint('product_type_id', 'name', name='uq_option_category_name'),
        )
        op.create_index('ix_option_categories_step', 'option_categories', ['product_type_id', 'step_order'])
        logger.info("Created table: option_categories")
    else:
        logger.info("Table option_categories already exists — skipping create")

    # ── option_values ─────────────────────────────────────────────────────────
    if not _table_exists(conn, 'option_values'):
        op.create_table(
            'option_values',
            _uuid_pk(),
            sa.Column('category_id', postgresql.UUID(as_uuid=False),
                      sa.ForeignKey('option_categories.id'), nullable=False),
            sa.Column('name', sa.String(255), nullable=False),
            sa.Column('description', sa.Text, nullable=True),
            sa.Column('image_url', sa.Text, nullable=True),
            sa.Column('price_factor', sa.Numeric(6, 3), server_default='1.0'),
            sa.Column('specifications', postgresql.JSONB, nullable=True),
            sa.Column('display_order', sa.Integer, server_default='0'),
            sa.Column('is_available', sa.Boolean, server_default=sa.true()),
        )
        logger.info("Created table: option_values")
    else:
        logger.info("Table option_values already exists — skipping create")

    # ── order_requests ────────────────────────────────────────────────────────
    if not _table_exists(conn, 'order_requests'):
        op.create_table(
            'order_requests',
            _uuid_pk(),
            sa.Column('product_type_id', postgresql.UUID(as_uuid=False),
                      sa.ForeignKey('product_types.id'), nullable=False),
            sa.Column('status', sa.String(50), server_default='SUBMITTED'),
            sa.Column('client_data', postgresql.JSONB, nullable=False),
            sa.Column('configuration_data', postgresql.JSONB, nullable=False),
            sa.Column('notes', sa.Text, nullable=True),
            sa.Column('created_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('submitted_date', sa.DateTime(timezone=True), nullable=True),
        )
        logger.info("Created table: order_requests")
    else:
        logger.info("Table order_requests already exists — skipping create")


def downgrade() -> None:
    conn = op.get_bind()

    # Children first
    for table in ['order_requests', 'option_values', 'option_categories', 'product_types']:
        if _table_exists(conn, table):
            op.drop_table(table)
            logger.info(f"Dropped table: {table}")
