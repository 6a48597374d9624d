"""Create studio_storage_usage table

Revision ID: 004
Revises: 003
Create Date: 2026-09-28 13:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '004'
down_revision = '003'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'studio_storage_usage',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('studio_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('total_storage_bytes', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('per_kind_bytes', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('sections_json', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('quota_limit_bytes', sa.BigInteger(), nullable=False),
        sa.Column('last_calculated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE'),
        sa.CheckConstraint('total_storage_bytes >= 0', name='ck_studio_storage_usage_total_non_negative')
    )

    # One snapshot per studio; concurrent first runs collide here
    op.create_index('idx_studio_storage_usage_studio_id', 'studio_storage_usage', ['studio_id'], unique=True)

    op.execute("""
        CREATE TRIGGER update_studio_storage_usage_updated_at
        BEFORE UPDATE ON studio_storage_usage
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade():
    op.execute('DROP TRIGGER IF EXISTS update_studio_storage_usage_updated_at ON studio_storage_usage')
    op.drop_index('idx_studio_storage_usage_studio_id', table_name='studio_storage_usage')
    op.drop_table('studio_storage_usage')
