"""Initial schema with favicons and favicon_assets

Revision ID: 001
Revises: 
Create Date: 2026-10-01 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create favicons table
    op.create_table(
        'favicons',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('slug', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('target_domain', sa.String(length=256), nullable=True),
        sa.Column('published_url', sa.String(length=64), nullable=False),
        sa.Column('source_type', sa.String(length=16), nullable=False),
        sa.Column('source_original_mime', sa.String(length=100), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('generation_status', sa.String(length=16), nullable=False, server_default='PENDING'),
        sa.Column('generation_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("source_type IN ('UPLOAD', 'CANVAS')", name='ck_favicons_source_type'),
        sa.CheckConstraint(
            "generation_status IN ('PENDING', 'SUCCESS', 'FAILED')",
            name='ck_favicons_generation_status',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_favicons_slug'), 'favicons', ['slug'], unique=True)
    op.create_index(op.f('ix_favicons_created_at'), 'favicons', ['created_at'], unique=False)
    op.create_index(op.f('ix_favicons_published_url'), 'favicons', ['published_url'], unique=False)
    op.create_index(op.f('ix_favicons_target_domain'), 'favicons', ['target_domain'], unique=False)
    op.create_index(op.f('ix_favicons_is_published'), 'favicons', ['is_published'], unique=False)

    # Create favicon_assets table
    op.create_table(
        'favicon_assets',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('favicon_id', sa.String(length=32), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('size', sa.String(length=16), nullable=True),
        sa.Column('format', sa.String(length=8), nullable=False),
        sa.Column('storage_key', sa.String(length=1000), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['favicon_id'], ['favicons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_favicon_assets_favicon_id'), 'favicon_assets', ['favicon_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_favicon_assets_favicon_id'), table_name='favicon_assets')
    op.drop_table('favicon_assets')

    op.drop_index(op.f('ix_favicons_is_published'), table_name='favicons')
    op.drop_index(op.f('ix_favicons_target_domain'), table_name='favicons')
    op.drop_index(op.f('ix_favicons_published_url'), table_name='favicons')
    op.drop_index(op.f('ix_favicons_created_at'), table_name='favicons')
    op.drop_index(op.f('ix_favicons_slug'), table_name='favicons')
    op.drop_table('favicons')
