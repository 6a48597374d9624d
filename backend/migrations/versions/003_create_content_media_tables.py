"""Create posts, portfolios, packages, offers, contacts and location media

Revision ID: 003
Revises: 002
Create Date: 2026-09-28 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None

# (media table, owner column, owner table)
MEDIA_TABLES = (
    ('post_media', 'post_id', 'post'),
    ('portfolio_media', 'portfolio_id', 'portfolio'),
    ('offer_media', 'offer_id', 'offer'),
)


def _id():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _studio_id():
    return sa.Column('studio_id', postgresql.UUID(as_uuid=True), nullable=False)


def _created_at():
    return sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def _studio_fk():
    return sa.ForeignKeyConstraint(['studio_id'], ['studio.id'], ondelete='CASCADE')


def upgrade():
    op.create_table(
        'post',
        _id(), _studio_id(),
        sa.Column('title', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    op.create_table(
        'portfolio',
        _id(), _studio_id(),
        sa.Column('title', sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    op.create_table(
        'package',
        _id(), _studio_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('cover_url', sa.Text(), nullable=True),
        sa.Column('cover_storage_bytes', sa.BigInteger(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    op.create_table(
        'offer',
        _id(), _studio_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('cover_url', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    op.create_table(
        'contact',
        _id(), _studio_id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    for table in ('post', 'portfolio', 'package', 'offer', 'contact'):
        op.create_index(f'ix_{table}_studio_id', table, ['studio_id'])

    for table, owner_column, owner_table in MEDIA_TABLES:
        op.create_table(
            table,
            _id(), _studio_id(),
            sa.Column(owner_column, postgresql.UUID(as_uuid=True), nullable=False),
            sa.Column('file_url', sa.Text(), nullable=True),
            sa.Column('storage_path', sa.Text(), nullable=True),
            sa.Column('storage_bytes', sa.BigInteger(), nullable=True),
            _created_at(),
            sa.PrimaryKeyConstraint('id'), _studio_fk(),
            sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id'], ondelete='CASCADE')
        )
        op.create_index(f'ix_{table}_studio_id', table, ['studio_id'])

    # Locations are owned by the scheduling service; no FK on location_id
    op.create_table(
        'location_media',
        _id(), _studio_id(),
        sa.Column('location_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('filename', sa.Text(), nullable=True),
        sa.Column('storage_path', sa.Text(), nullable=True),
        sa.Column('storage_bytes', sa.BigInteger(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        sa.PrimaryKeyConstraint('id'), _studio_fk()
    )
    op.create_index('ix_location_media_studio_id', 'location_media', ['studio_id'])


def downgrade():
    op.drop_index('ix_location_media_studio_id', table_name='location_media')
    op.drop_table('location_media')

    for table, _, _ in reversed(MEDIA_TABLES):
        op.drop_index(f'ix_{table}_studio_id', table_name=table)
        op.drop_table(table)

    for table in ('contact', 'offer', 'package', 'portfolio', 'post'):
        op.drop_index(f'ix_{table}_studio_id', table_name=table)
        op.drop_table(table)
