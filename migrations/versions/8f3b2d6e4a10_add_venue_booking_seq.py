"""add venue booking_seq

Revision ID: 8f3b2d6e4a10
Revises: 5a0e1c7d9b21
Create Date: 2026-03-09 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8f3b2d6e4a10'
down_revision = '5a0e1c7d9b21'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('venues', schema=None) as batch_op:
        batch_op.add_column(sa.Column('booking_seq', sa.Integer(), nullable=False, server_default='0'))


def downgrade():
    with op.batch_alter_table('venues', schema=None) as batch_op:
        batch_op.drop_column('booking_seq')
