"""Add vocabulary_images table for generated illustration cache

Revision ID: add_vocabulary_images_table
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'add_vocabulary_images_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'vocabulary_images',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vocabulary_key', sa.String(255), nullable=False),
        sa.Column('language', sa.String(5), nullable=False, server_default='vi'),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vocabulary_key', 'language', name='unique_vocabulary_image')
    )

    op.create_index('ix_vocabulary_images_vocabulary_key', 'vocabulary_images', ['vocabulary_key'])


def downgrade():
    op.drop_index('ix_vocabulary_images_vocabulary_key', table_name='vocabulary_images')
    op.drop_table('vocabulary_images')
