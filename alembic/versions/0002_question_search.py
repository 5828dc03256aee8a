"""full-text question search index

Revision ID: 0002_question_search
Revises: 0001_initial
Create Date: 2026-10-19 00:00:00.000000

SQLite gets an FTS5 table kept in sync by triggers; PostgreSQL gets a
weighted tsvector column with a GIN index and an update trigger.
"""

from alembic import op

from services.search import get_search_backend

# revision identifiers, used by Alembic.
revision = "0002_question_search"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    bind = op.get_bind()
    get_search_backend(bind.dialect.name).create_index(bind)


def downgrade() -> None:
    bind = op.get_bind()
    get_search_backend(bind.dialect.name).drop_index(bind)
