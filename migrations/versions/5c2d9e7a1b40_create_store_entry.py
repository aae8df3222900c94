"""create store_entry key-value table

Revision ID: 5c2d9e7a1b40
Revises: 
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d9e7a1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Tables may already exist when the app created them with create_all()
    if 'store_entry' in set(insp.get_table_names()):
        return

    op.create_table(
        'store_entry',
        sa.Column('key', sa.String(length=191), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('expires_at', sa.Float(), nullable=True),
    )
    op.create_index('ix_store_entry_expires_at', 'store_entry', ['expires_at'])


def downgrade():
    op.drop_index('ix_store_entry_expires_at', table_name='store_entry')
    op.drop_table('store_entry')
