"""initial catalog schema

Revision ID: 3f9c1d2e7b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c1d2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def _link_table(name, target_column, target_table):
    op.create_table(
        name,
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column(target_column, sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint([target_column], [f'{target_table}.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('product_id', target_column),
    )
    op.create_index(f'ix_{name}_{target_column}', name, [target_column])


def upgrade():
    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('brand_slug', sa.String(length=140), nullable=True),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('ix_user_roles_role', 'user_roles', ['role'])

    op.create_table(
        'admin_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('slug', sa.String(length=140), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['admin_categories.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_categories_slug', 'admin_categories', ['slug'], unique=True)
    op.create_index('ix_admin_categories_parent_id', 'admin_categories', ['parent_id'])

    for table in ('admin_tags', 'admin_brands', 'admin_attributes'):
        columns = [
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=120), nullable=False),
            sa.Column('slug', sa.String(length=140), nullable=False),
            sa.Column('description', sa.String(length=500), nullable=True),
            sa.Column('created_by', sa.String(length=64), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        ]
        if table == 'admin_brands':
            columns.append(
                sa.Column(
                    'require_product_review_for_publish',
                    sa.Boolean(),
                    nullable=False,
                    server_default=sa.false(),
                )
            )
        op.create_table(table, *columns, sa.PrimaryKeyConstraint('id'))
        op.create_index(f'ix_{table}_slug', table, ['slug'], unique=True)
        op.create_index(f'ix_{table}_created_by', table, ['created_by'])

    op.create_table(
        'admin_attribute_options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('attribute_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('slug', sa.String(length=140), nullable=False),
        sa.Column('color_hex', sa.String(length=9), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['attribute_id'], ['admin_attributes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('attribute_id', 'slug', name='uq_attribute_option_slug'),
    )
    op.create_index(
        'ix_admin_attribute_options_attribute_id', 'admin_attribute_options', ['attribute_id']
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=140), nullable=False),
        sa.Column('slug', sa.String(length=160), nullable=False),
        sa.Column('short_description', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sku', sa.String(length=120), nullable=True),
        sa.Column('sku_auto_generated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='publish'),
        sa.Column('product_type', sa.String(length=20), nullable=False, server_default='simple'),
        sa.Column('condition', sa.String(length=30), nullable=True),
        sa.Column('packaging', sa.String(length=40), nullable=True),
        sa.Column('return_policy', sa.String(length=40), nullable=True),
        sa.Column('main_image_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_product_stock'),
        sa.CheckConstraint(
            'discount_price IS NULL OR discount_price <= price', name='ck_product_discount'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_slug', 'products', ['slug'], unique=True)
    op.create_index('ix_products_sku', 'products', ['sku'], unique=True)
    op.create_index('ix_products_status', 'products', ['status'])
    op.create_index('ix_products_created_by', 'products', ['created_by'])

    op.create_table(
        'product_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('storage_key', sa.String(length=512), nullable=False, server_default=''),
        sa.Column('alt_text', sa.String(length=255), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_images_product_id', 'product_images', ['product_id'])

    op.create_table(
        'product_variations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('attributes', sa.JSON(), nullable=False),
        sa.Column('regular_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sale_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('sku', sa.String(length=120), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_id', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_variations_product_id', 'product_variations', ['product_id'])

    op.create_table(
        'vendor_category_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('requester_user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('slug', sa.String(length=140), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(length=64), nullable=True),
        sa.Column('review_note', sa.String(length=600), nullable=True),
        sa.Column('approved_category_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['admin_categories.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(
            ['approved_category_id'], ['admin_categories.id'], ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('requester_user_id', 'slug', 'status', 'requested_at'):
        op.create_index(
            f'ix_vendor_category_requests_{column}', 'vendor_category_requests', [column]
        )

    _link_table('product_category_links', 'category_id', 'admin_categories')
    _link_table('product_tag_links', 'tag_id', 'admin_tags')
    _link_table('product_brand_links', 'brand_id', 'admin_brands')
    _link_table(
        'vendor_product_pending_category_requests',
        'category_request_id',
        'vendor_category_requests',
    )

    op.create_table(
        'admin_notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_user_id', sa.String(length=64), nullable=False),
        sa.Column('recipient_role', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=60), nullable=False),
        sa.Column('severity', sa.String(length=20), nullable=False),
        sa.Column('entity_type', sa.String(length=60), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.String(length=64), nullable=True),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_admin_notifications_recipient_user_id', 'admin_notifications', ['recipient_user_id']
    )
    op.create_index('ix_admin_notifications_created_at', 'admin_notifications', ['created_at'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_log_actor_id', 'audit_log', ['actor_id'])
    op.create_index('ix_audit_log_product_id', 'audit_log', ['product_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])


def downgrade():
    for table in (
        'audit_log',
        'admin_notifications',
        'vendor_product_pending_category_requests',
        'product_brand_links',
        'product_tag_links',
        'product_category_links',
        'vendor_category_requests',
        'product_variations',
        'product_images',
        'products',
        'admin_attribute_options',
        'admin_attributes',
        'admin_brands',
        'admin_tags',
        'admin_categories',
        'user_roles',
    ):
        op.drop_table(table)
