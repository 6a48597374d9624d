"""Create service catalog tables with category and item media

Revision ID: 002
Revises: 001
Create Date: 2026-09-28 11:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _studio_id():
    return sa.Column('studio_id', postgresql.UUID(as_uuid=True), nullable=False)


def _created_at():
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def upgrade():
    op.create_table(
        'service_section',
        _id(),
        _studio_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE')
    )
    op.create_index('ix_service_section_studio_id', 'service_section', ['studio_id'])

    op.create_table(
        'service_category',
        _id(),
        _studio_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE')
    )
    op.create_index('ix_service_category_studio_id', 'service_category', ['studio_id'])

    # A category belongs to at most one section
    op.create_table(
        'section_category',
        _id(),
        sa.Column('section_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['section_id'], ['service_section.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['service_category.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('category_id', name='uq_section_category_category_id')
    )

    op.create_table(
        'service_item',
        _id(),
        _studio_id(),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['service_category.id'], ondelete='CASCADE')
    )
    op.create_index('ix_service_item_studio_id', 'service_item', ['studio_id'])
    op.create_index('ix_service_item_category_id', 'service_item', ['category_id'])

    for table, owner_column, owner_table in (
        ('category_media', 'category_id', 'service_category'),
        ('item_media', 'item_id', 'service_item'),
    ):
        op.create_table(
            table,
            _id(),
            _studio_id(),
            sa.Column(owner_column, postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('file_url', sa.Text(), nullable=True),
            sa.Column('storage_path', sa.Text(), nullable=True),
            sa.Column('storage_bytes', sa.BigInteger(), nullable=True),
            _created_at(),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id'], ondelete='CASCADE')
        )
        op.create_index(f'ix_{table}_studio_id', table, ['studio_id'])


def downgrade():
    for table in ('item_media', 'category_media'):
        op.drop_index(f'ix_{table}_studio_id', table_name=table)
        op.drop_table(table)

    op.drop_index('ix_service_item_category_id', table_name='service_item')
    op.drop_index('ix_service_item_studio_id', table_name='service_item')
    op.drop_table('service_item')
    op.drop_table('section_category')
    op.drop_index('ix_service_category_studio_id', table_name='service_category')
    op.drop_table('service_category')
    op.drop_index('ix_service_section_studio_id', table_name='service_section')
    op.drop_table('service_section')
