"""create scraped_paths table

Adds the scraped_paths table that tracks every requested website path
and its scrape status (queued -> scraping -> scraped/failed). The unique
constraint on (website_id, path_name, base_url) is what stops two
concurrent intake calls from creating the same job twice.

See also: path_scraper/entities/scraped_path.py (ScrapedPath entity)

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the scraped_paths table, its indexes and identity constraint.

    Columns match path_scraper/entities/scraped_path.py exactly:
    - id: UUID4 string primary key
    - website_id: external website identifier
    - path_name: requested path, starting with '/'
    - base_url: absolute http(s) origin of the website
    - status: queued, scraping, scraped or failed
    - created_at / updated_at: record timestamps
    """
    op.create_table(
        'scraped_paths',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('website_id', sa.String(length=64), nullable=False),
        sa.Column('path_name', sa.String(length=2048), nullable=False),
        sa.Column('base_url', sa.String(length=2048), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='queued'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'website_id', 'path_name', 'base_url',
            name='uq_scraped_paths_website_path_base_url',
        ),
    )
    op.create_index(op.f('ix_scraped_paths_website_id'), 'scraped_paths', ['website_id'])
    op.create_index(op.f('ix_scraped_paths_status'), 'scraped_paths', ['status'])


def downgrade() -> None:
    """Drop the scraped_paths table and its indexes."""
    op.drop_index(op.f('ix_scraped_paths_status'), table_name='scraped_paths')
    op.drop_index(op.f('ix_scraped_paths_website_id'), table_name='scraped_paths')
    op.drop_table('scraped_paths')
