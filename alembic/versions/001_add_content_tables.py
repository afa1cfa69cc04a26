"""Add content tables: users, items, item sets, media, sites, pages, blocks, and link tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # -- users --
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # -- items / item_sets / media --
    op.create_table(
        'items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('values', sa.JSON(), nullable=True),
        sa.Column('primary_media_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_items_owner_id', 'items', ['owner_id'])

    op.create_table(
        'item_sets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('values', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_item_sets_owner_id', 'item_sets', ['owner_id'])

    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ingester', sa.String(255), nullable=False, server_default='upload'),
        sa.Column('source', sa.String(1024), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('data', sa.JSON(), nullable=True),
    )
    op.create_index('ix_media_item_id', 'media', ['item_id'])

    # -- sites / pages / blocks --
    op.create_table(
        'sites',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('slug', sa.String(190), nullable=False, unique=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('theme', sa.String(190), nullable=False, server_default='default'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('item_pool', sa.JSON(), nullable=True),
        sa.Column('navigation', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('homepage_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_sites_owner_id', 'sites', ['owner_id'])

    op.create_table(
        'site_page',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('site_id', sa.Integer(), sa.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False),
        sa.Column('slug', sa.String(190), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('site_id', 'slug', name='uq_site_page_site_slug'),
    )
    op.create_index('ix_site_page_site_id', 'site_page', ['site_id'])
    op.create_index('ix_site_page_slug', 'site_page', ['slug'])

    op.create_table(
        'site_page_block',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('page_id', sa.Integer(), sa.ForeignKey('site_page.id', ondelete='CASCADE'), nullable=False),
        sa.Column('layout', sa.String(80), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_site_page_block_page_id', 'site_page_block', ['page_id'])
    op.create_index('ix_site_page_block_layout', 'site_page_block', ['layout'])

    # -- link tables --
    op.create_table(
        'item_item_set',
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('item_set_id', sa.Integer(), sa.ForeignKey('item_sets.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'item_site',
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('site_id', sa.Integer(), sa.ForeignKey('sites.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'site_setting',
        sa.Column('id', sa.String(190), primary_key=True),
        sa.Column('site_id', sa.Integer(), sa.ForeignKey('sites.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('value', sa.JSON(), nullable=False),
    )


def downgrade():
    op.drop_table('site_setting')
    op.drop_table('item_site')
    op.drop_table('item_item_set')
    op.drop_table('site_page_block')
    op.drop_table('site_page')
    op.drop_table('sites')
    op.drop_table('media')
    op.drop_table('item_sets')
    op.drop_table('items')
    op.drop_table('users')
