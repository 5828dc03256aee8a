"""PostgreSQL full-text search backend using tsvector/tsquery."""

from typing import List

from sqlalchemy import Integer, Select, select, text
from sqlalchemy.engine import Connection

from .base_backend import SearchBackend


class PostgreSQLFTSBackend(SearchBackend):
    """
    Weighted ``search_vector`` column on ``questions`` with a GIN index.

    Title terms weigh A and body terms B. A BEFORE INSERT/UPDATE trigger
    recomputes the vector, so rows are indexed in the same statement that
    writes them.
    """

    @property
    def backend_name(self) -> str:
        return "postgresql_fts"

    def create_index(self, connection: Connection) -> None:
        connection.execute(
            text("ALTER TABLE questions ADD COLUMN IF NOT EXISTS search_vector tsvector")
        )
        connection.execute(
            text("""
            CREATE INDEX IF NOT EXISTS idx_questions_search
            ON questions USING GIN(search_vector)
        """)
        )
        connection.execute(
            text("""
            CREATE OR REPLACE FUNCTION questions_search_vector_update() RETURNS trigger AS $$
            BEGIN
                NEW.search_vector :=
                    setweight(to_tsvector('english', COALESCE(NEW.title, '')), 'A') ||
                    setweight(to_tsvector('english', COALESCE(NEW.body, '')), 'B');
                RETURN NEW;
            END;
            $$ LANGUAGE plpgsql
        """)
        )
        connection.execute(
            text("DROP TRIGGER IF EXISTS questions_search_vector_trigger ON questions")
        )
        connection.execute(
            text("""
            CREATE TRIGGER questions_search_vector_trigger
                BEFORE INSERT OR UPDATE OF title, body ON questions
                FOR EACH ROW
                EXECUTE FUNCTION questions_search_vector_update()
        """)
        )
        connection.execute(
            text("""
            UPDATE questions SET search_vector =
                setweight(to_tsvector('english', COALESCE(title, '')), 'A') ||
                setweight(to_tsvector('english', COALESCE(body, '')), 'B')
        """)
        )

    def drop_index(self, connection: Connection) -> None:
        # CASCADE takes the trigger along; the table may already be gone
        connection.execute(
            text("DROP FUNCTION IF EXISTS questions_search_vector_update() CASCADE")
        )
        connection.execute(text("DROP INDEX IF EXISTS idx_questions_search"))
        connection.execute(
            text("ALTER TABLE IF EXISTS questions DROP COLUMN IF EXISTS search_vector")
        )

    def build_match_query(self, terms: List[str]) -> str:
        """OR the terms together; the last one also matches as a prefix (``sess:*``)."""
        return " | ".join(terms[:-1] + [f"{terms[-1]}:*"])

    def matching_ids(self, match_query: str) -> Select:
        matches = (
            text(
                "SELECT id AS question_id FROM questions "
                "WHERE search_vector @@ to_tsquery('english', :fts_query)"
            )
            .bindparams(fts_query=match_query)
            .columns(question_id=Integer)
            .subquery("fts_matches")
        )
        return select(matches.c.question_id)
