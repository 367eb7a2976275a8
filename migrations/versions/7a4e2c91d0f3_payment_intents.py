"""payment intents

Revision ID: 7a4e2c91d0f3
Revises: 3c1d9a7e5b20
Create Date: 2026-10-18 09:41:07.552310

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7a4e2c91d0f3'
down_revision: Union[str, Sequence[str], None] = '3c1d9a7e5b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'payment_intents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('merchant_transaction_id', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('copay_inr', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index(
        'ix_payment_intents_merchant_transaction_id',
        'payment_intents',
        ['merchant_transaction_id'],
        unique=True,
    )
    op.create_index('ix_payment_intents_employee_id', 'payment_intents', ['employee_id'])


def downgrade():
    op.drop_index('ix_payment_intents_employee_id', table_name='payment_intents')
    op.drop_index('ix_payment_intents_merchant_transaction_id', table_name='payment_intents')
    op.drop_table('payment_intents')
