"""Initial asset-ledger schema

Revision ID: 0001_asset_ledger_initial
Revises: 
Create Date: 2026-10-17

Compatible with both SQLite and PostgreSQL:
- Uses CURRENT_TIMESTAMP instead of now()
- Direction enum stored as VARCHAR on SQLite
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_asset_ledger_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    """Create branches, warehouses, assets, transactions and asset_transactions."""

    # Branches
    op.create_table('branches',
        sa.Column('name_en', sa.String(length=255), nullable=True),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    # Warehouses
    op.create_table('warehouses',
        sa.Column('name_en', sa.String(length=255), nullable=True),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('branch_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], name='fk_warehouse_branch_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_warehouses_branch_id'), 'warehouses', ['branch_id'], unique=False)

    # Assets
    op.create_table('assets',
        sa.Column('name_en', sa.String(length=255), nullable=True),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('product_code', sa.String(length=100), nullable=False),
        sa.Column('quantity', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='1', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_asset_product_code', 'assets', ['product_code'], unique=True)

    # Transactions
    op.create_table('transactions',
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('warehouse_id', sa.Integer(), nullable=False),
        sa.Column('direction', sa.Enum('IN', 'OUT', name='transaction_direction_enum'), nullable=False),
        sa.Column('total_value', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('attached_file', sa.String(length=500), nullable=True),
        sa.Column('attached_file_name', sa.String(length=255), nullable=True),
        sa.Column('attached_file_checksum', sa.String(length=32), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['warehouse_id'], ['warehouses.id'], name='fk_transaction_warehouse_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_transactions_warehouse_id'), 'transactions', ['warehouse_id'], unique=False)
    op.create_index('idx_transaction_date', 'transactions', ['date'], unique=False)
    op.create_index('idx_transaction_warehouse_direction', 'transactions', ['warehouse_id', 'direction'], unique=False)

    # Asset transactions (line items)
    op.create_table('asset_transactions',
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('total_value', sa.Numeric(precision=15, scale=2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], ondelete='CASCADE', name='fk_asset_transaction_transaction_id'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], name='fk_asset_transaction_asset_id'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_asset_transaction_transaction_id', 'asset_transactions', ['transaction_id'], unique=False)
    op.create_index('idx_asset_transaction_asset_id', 'asset_transactions', ['asset_id'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('idx_asset_transaction_asset_id', table_name='asset_transactions')
    op.drop_index('idx_asset_transaction_transaction_id', table_name='asset_transactions')
    op.drop_table('asset_transactions')

    op.drop_index('idx_transaction_warehouse_direction', table_name='transactions')
    op.drop_index('idx_transaction_date', table_name='transactions')
    op.drop_index(op.f('ix_transactions_warehouse_id'), table_name='transactions')
    op.drop_table('transactions')

    op.drop_index('idx_asset_product_code', table_name='assets')
    op.drop_table('assets')

    op.drop_index(op.f('ix_warehouses_branch_id'), table_name='warehouses')
    op.drop_table('warehouses')

    op.drop_table('branches')
