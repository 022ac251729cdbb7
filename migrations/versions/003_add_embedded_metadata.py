"""Add embedded metadata and steganography flag

Revision ID: 003
Revises: 002
Create Date: 2026-10-06 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '003'
down_revision: Union[str, None] = '002'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('favicons', sa.Column('embedded_metadata', sa.String(length=256), nullable=True))
    op.add_column(
        'favicons',
        sa.Column('has_steganography', sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    op.drop_column('favicons', 'has_steganography')
    op.drop_column('favicons', 'embedded_metadata')
