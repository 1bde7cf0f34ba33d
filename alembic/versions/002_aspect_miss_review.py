"""Aspect miss review columns: resolved_value, reviewed_at

Revision ID: 002_aspect_miss_review
Revises: 001_listing_pipeline_tables
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_aspect_miss_review'
down_revision: Union[str, None] = '001_listing_pipeline_tables'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('ebay_aspect_misses', sa.Column('resolved_value', sa.String(), nullable=True))
    op.add_column('ebay_aspect_misses', sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True))


def downgrade() -> None:
    op.drop_column('ebay_aspect_misses', 'reviewed_at')
    op.drop_column('ebay_aspect_misses', 'resolved_value')
