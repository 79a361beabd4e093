"""Initial catalog schema: products, preparations, steps, users

Learn: prep_type and shift are plain strings pinned by CHECK
constraints instead of Postgres ENUM types, so adding a new prep type
is a one-line constraint change rather than an ALTER TYPE.

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:44.118203
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ─── products ─────────────────────────────────────────
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('supplier_name', sa.String(length=255), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('picture_url', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_supplier_name', 'products', ['supplier_name'])
    op.create_index('ix_products_location', 'products', ['location'])

    # ─── preparations ─────────────────────────────────────
    op.create_table(
        'preparations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('prep_type', sa.String(length=50), nullable=False),
        sa.Column('shift', sa.String(length=50), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('picture_url', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('steps', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint(
            "prep_type IN ('fruit', 'bread', 'veg', 'meat', 'seafood')",
            name='ck_preparations_prep_type',
        ),
        sa.CheckConstraint(
            "shift IN ('brekkie', 'lunch', 'both')",
            name='ck_preparations_shift',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_preparations_prep_type', 'preparations', ['prep_type'])
    op.create_index('ix_preparations_shift', 'preparations', ['shift'])

    # ─── preparation_steps ────────────────────────────────
    op.create_table(
        'preparation_steps',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('preparation_id', sa.Uuid(), nullable=False),
        sa.Column('step_number', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('picture_url', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['preparation_id'], ['preparations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('preparation_id', 'step_number', name='uq_preparation_steps_number'),
    )
    op.create_index('ix_preparation_steps_preparation_id', 'preparation_steps', ['preparation_id'])

    # ─── users ────────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )


def downgrade() -> None:
    op.drop_table('users')
    op.drop_index('ix_preparation_steps_preparation_id', table_name='preparation_steps')
    op.drop_table('preparation_steps')
    op.drop_index('ix_preparations_shift', table_name='preparations')
    op.drop_index('ix_preparations_prep_type', table_name='preparations')
    op.drop_table('preparations')
    op.drop_index('ix_products_location', table_name='products')
    op.drop_index('ix_products_supplier_name', table_name='products')
    op.drop_table('products')
