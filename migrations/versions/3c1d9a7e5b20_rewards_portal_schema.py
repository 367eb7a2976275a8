"""rewards portal schema

Revision ID: 3c1d9a7e5b20
Revises:
Create Date: 2026-10-18 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d9a7e5b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('price_slabs', sa.JSON(), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('bulk_buy', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=True),
        sa.Column('sizes', sa.JSON(), nullable=True),
        sa.Column('category_ids', sa.JSON(), nullable=True),
        sa.Column('specifications', sa.Text(), nullable=True),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('gst', sa.String(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)

    op.create_table(
        'categories',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('employee_code', sa.String(), nullable=True, unique=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('bulk_buy_allowed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        sa.Column('login_attempts', sa.Integer(), nullable=True),
        sa.Column('is_locked', sa.Boolean(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_employees_email', 'employees', ['email'], unique=True)

    op.create_table(
        'campaigns',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('max_products_per_user', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'campaign_products',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('campaigns.id'), nullable=False),
        sa.Column('product_id', sa.String(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('campaign_id', 'product_id'),
    )

    op.create_table(
        'campaign_whitelist',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('campaigns.id'), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_campaign_whitelist_email', 'campaign_whitelist', ['email'])

    op.create_table(
        'cart_items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('employee_id', sa.String(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('product_id', sa.String(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('selected_color', sa.String(), nullable=True),
        sa.Column('selected_size', sa.String(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('campaigns.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_cart_items_employee_id', 'cart_items', ['employee_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('product_id', sa.String(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('selected_color', sa.String(), nullable=True),
        sa.Column('selected_size', sa.String(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('order_date', sa.DateTime(), nullable=True),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('campaigns.id'), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('payment_reference', sa.String(), nullable=True),
    )
    op.create_index('ix_orders_order_id', 'orders', ['order_id'])
    op.create_index('ix_orders_employee_id', 'orders', ['employee_id'])
    op.create_index('ix_orders_payment_reference', 'orders', ['payment_reference'])

    op.create_table(
        'bulk_buy_access',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('designation', sa.String(), nullable=True),
        sa.Column('is_procurement', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_bulk_buy_access_email', 'bulk_buy_access', ['email'], unique=True)

    op.create_table(
        'bulk_buy_cart_items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('employee_id', sa.String(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('product_id', sa.String(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('selected_color', sa.String(), nullable=True),
        sa.Column('selected_size', sa.String(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('campaign_id', sa.String(), sa.ForeignKey('campaigns.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'bulk_buy_requests',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending_approval'),
        sa.Column('delivery_method', sa.String(), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('requester_note', sa.Text(), nullable=True),
        sa.Column('procurement_note', sa.Text(), nullable=True),
        sa.Column('approved_by_employee_id', sa.String(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_bulk_buy_requests_status', 'bulk_buy_requests', ['status'])

    op.create_table(
        'branding',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('logo_url', sa.String(), nullable=True),
        sa.Column('primary_color', sa.String(), nullable=True),
        sa.Column('accent_color', sa.String(), nullable=True),
        sa.Column('banner_url', sa.String(), nullable=True),
        sa.Column('banner_text', sa.String(), nullable=True),
        sa.Column('inr_per_point', sa.Numeric(10, 2), nullable=False, server_default='1'),
        sa.Column('max_selections_per_user', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'domain_whitelist',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('domain', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('auto_create_user', sa.Boolean(), nullable=True),
        sa.Column('default_points', sa.Integer(), nullable=True),
        sa.Column('can_login_without_employee_id', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_domain_whitelist_domain', 'domain_whitelist', ['domain'], unique=True)


def downgrade():
    for table in (
        'domain_whitelist',
        'branding',
        'bulk_buy_requests',
        'bulk_buy_cart_items',
        'bulk_buy_access',
        'orders',
        'cart_items',
        'campaign_whitelist',
        'campaign_products',
        'campaigns',
        'employees',
        'categories',
        'products',
    ):
        op.drop_table(table)
