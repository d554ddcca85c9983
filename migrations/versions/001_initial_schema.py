"""News aggregation initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-03-15

Named entities (categories, sources, authors), fingerprinted articles, and
API consumers with permissions and saved preferences.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    for table in ('categories', 'sources', 'authors'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
            sa.Column('name', sa.String(255), unique=True, nullable=False),
            sa.Column('created_at', sa.DateTime, nullable=False),
        )

    op.create_table(
        'articles',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('article_identifier', sa.String(32), unique=True, nullable=False),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('content', sa.Text, nullable=True),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('categories.id', ondelete='CASCADE'), nullable=True),
        sa.Column('source_id', sa.Integer, sa.ForeignKey('sources.id', ondelete='CASCADE'), nullable=True),
        sa.Column('author_id', sa.Integer, sa.ForeignKey('authors.id', ondelete='CASCADE'), nullable=True),
        sa.Column('published_at', sa.DateTime, nullable=False),
        sa.Column('published_at_estimated', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_articles_published_at', 'articles', ['published_at'])
    op.create_index('ix_articles_category_id', 'articles', ['category_id'])
    op.create_index('ix_articles_source_id', 'articles', ['source_id'])
    op.create_index('ix_articles_author_id', 'articles', ['author_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('api_key_hash', sa.String(64), unique=True, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'user_permissions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(64), nullable=False),
        sa.UniqueConstraint('user_id', 'name', name='uq_user_permission'),
    )

    op.create_table(
        'user_preferences',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('preferred_categories', sa.JSON, nullable=False),
        sa.Column('preferred_sources', sa.JSON, nullable=False),
        sa.Column('preferred_authors', sa.JSON, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )


def downgrade() -> None:
    op.drop_table('user_preferences')
    op.drop_table('user_permissions')
    op.drop_table('users')
    op.drop_index('ix_articles_author_id', table_name='articles')
    op.drop_index('ix_articles_source_id', table_name='articles')
    op.drop_index('ix_articles_category_id', table_name='articles')
    op.drop_index('ix_articles_published_at', table_name='articles')
    op.drop_table('articles')
    for table in ('authors', 'sources', 'categories'):
        op.drop_table(table)
