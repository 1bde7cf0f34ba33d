"""Listing pipeline tables: category mappings, requirements, aspect cache, keyword rules, aspect misses, listings

Revision ID: 001_listing_pipeline_tables
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_listing_pipeline_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ebay_category_mappings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source_category', sa.String(), nullable=True),
        sa.Column('source_subtype', sa.String(), nullable=True),
        sa.Column('ebay_category_id', sa.String(), nullable=False),
        sa.Column('ebay_category_name', sa.String(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        'ix_ebay_category_mappings_source', 'ebay_category_mappings',
        ['source_category', 'source_subtype']
    )

    op.create_table(
        'ebay_category_requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.String(), nullable=False),
        sa.Column('category_name', sa.String(), nullable=False),
        sa.Column('parent_category_id', sa.String(), nullable=True),
        sa.Column('is_leaf', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('required_aspects', sa.JSON(), nullable=True),
        sa.Column('optional_aspects', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        'ix_ebay_category_requirements_category_id', 'ebay_category_requirements',
        ['category_id'], unique=True
    )
    op.create_index(
        'ix_ebay_category_requirements_parent_category_id', 'ebay_category_requirements',
        ['parent_category_id']
    )

    op.create_table(
        'ebay_category_aspects',
        sa.Column('category_id', sa.String(), primary_key=True),
        sa.Column('category_name', sa.String(), nullable=True),
        sa.Column('required_aspects', sa.JSON(), nullable=False),
        sa.Column('fetched_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_ebay_category_aspects_expires_at', 'ebay_category_aspects', ['expires_at'])

    op.create_table(
        'ebay_aspect_keywords',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('aspect_name', sa.String(), nullable=False),
        sa.Column('keyword_pattern', sa.Text(), nullable=False),
        sa.Column('aspect_value', sa.String(), nullable=False),
        sa.Column('category_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('aspect_name', 'keyword_pattern', 'category_id', name='uq_aspect_keyword_rule'),
    )
    op.create_index('ix_ebay_aspect_keywords_aspect_name', 'ebay_aspect_keywords', ['aspect_name'])
    op.create_index('ix_ebay_aspect_keywords_category_id', 'ebay_aspect_keywords', ['category_id'])

    op.create_table(
        'ebay_aspect_misses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('asin', sa.String(), nullable=False),
        sa.Column('category_id', sa.String(), nullable=True),
        sa.Column('category_name', sa.String(), nullable=True),
        sa.Column('aspect_name', sa.String(), nullable=False),
        sa.Column('product_title', sa.String(), nullable=False),
        sa.Column('source_brand', sa.String(), nullable=True),
        sa.Column('source_model', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('asin', 'aspect_name', name='uq_aspect_miss_asin_aspect'),
    )
    op.create_index('ix_ebay_aspect_misses_asin', 'ebay_aspect_misses', ['asin'])
    op.create_index('ix_ebay_aspect_misses_status', 'ebay_aspect_misses', ['status'])

    op.create_table(
        'ebay_listings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('asin', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('offer_id', sa.String(), nullable=True),
        sa.Column('ebay_item_id', sa.String(), nullable=True),
        sa.Column('listing_status', sa.String(), nullable=True),
        sa.Column('listing_url', sa.String(), nullable=True),
        sa.Column('ebay_category_id', sa.String(), nullable=True),
        sa.Column('ebay_category_name', sa.String(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('condition', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_ebay_listings_id', 'ebay_listings', ['id'])
    op.create_index('ix_ebay_listings_sku', 'ebay_listings', ['sku'], unique=True)
    op.create_index('ix_ebay_listings_asin', 'ebay_listings', ['asin'])
    op.create_index('ix_ebay_listings_offer_id', 'ebay_listings', ['offer_id'])
    op.create_index('ix_ebay_listings_ebay_item_id', 'ebay_listings', ['ebay_item_id'])


def downgrade() -> None:
    op.drop_table('ebay_listings')
    op.drop_table('ebay_aspect_misses')
    op.drop_table('ebay_aspect_keywords')
    op.drop_table('ebay_category_aspects')
    op.drop_table('ebay_category_requirements')
    op.drop_table('ebay_category_mappings')
