"""Add source fingerprint columns for duplicate detection

Revision ID: 002
Revises: 001
Create Date: 2026-10-03 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows keep NULL fingerprints
    op.add_column('favicons', sa.Column('source_hash', sa.String(length=32), nullable=True))
    op.add_column('favicons', sa.Column('source_size', sa.Integer(), nullable=True))
    op.create_index('idx_favicons_hash_size', 'favicons', ['source_hash', 'source_size'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_favicons_hash_size', table_name='favicons')
    op.drop_column('favicons', 'source_size')
    op.drop_column('favicons', 'source_hash')
