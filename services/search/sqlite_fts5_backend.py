"""SQLite FTS5 search backend."""

from typing import List

from sqlalchemy import Integer, Select, select, text
from sqlalchemy.engine import Connection

from .base_backend import SearchBackend

TRIGGER_NAMES = (
    "questions_fts_insert",
    "questions_fts_update",
    "questions_fts_delete",
)


class SQLiteFTS5Backend(SearchBackend):
    """FTS5 virtual table mirrored from ``questions`` by triggers."""

    FTS_TABLE_NAME = "questions_fts"

    @property
    def backend_name(self) -> str:
        return "sqlite_fts5"

    def create_index(self, connection: Connection) -> None:
        # Porter stemming over unicode61 folds case and diacritics
        connection.execute(
            text(f"""
            CREATE VIRTUAL TABLE IF NOT EXISTS {self.FTS_TABLE_NAME} USING fts5(
                question_id UNINDEXED,
                title,
                body,
                tokenize='porter unicode61'
            )
        """)  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
        )
        connection.execute(text(f"DELETE FROM {self.FTS_TABLE_NAME}"))  # nosec B608
        connection.execute(
            text(f"""
            INSERT INTO {self.FTS_TABLE_NAME}(question_id, title, body)
            SELECT id, title, body FROM questions
        """)  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
        )

        for trigger_name in TRIGGER_NAMES:
            connection.execute(text(f"DROP TRIGGER IF EXISTS {trigger_name}"))  # nosec B608

        connection.execute(
            text(f"""
            CREATE TRIGGER questions_fts_insert
            AFTER INSERT ON questions
            BEGIN
                INSERT INTO {self.FTS_TABLE_NAME}(question_id, title, body)
                VALUES (NEW.id, NEW.title, NEW.body);
            END
        """)  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
        )
        # Vote and view counters change often; only text edits reindex
        connection.execute(
            text(f"""
            CREATE TRIGGER questions_fts_update
            AFTER UPDATE OF title, body ON questions
            BEGIN
                UPDATE {self.FTS_TABLE_NAME} SET
                    title = NEW.title,
                    body = NEW.body
                WHERE question_id = NEW.id;
            END
        """)  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
        )
        connection.execute(
            text(f"""
            CREATE TRIGGER questions_fts_delete
            AFTER DELETE ON questions
            BEGIN
                DELETE FROM {self.FTS_TABLE_NAME} WHERE question_id = OLD.id;
            END
        """)  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
        )

    def drop_index(self, connection: Connection) -> None:
        for trigger_name in TRIGGER_NAMES:
            connection.execute(text(f"DROP TRIGGER IF EXISTS {trigger_name}"))  # nosec B608
        connection.execute(text(f"DROP TABLE IF EXISTS {self.FTS_TABLE_NAME}"))  # nosec B608

    def build_match_query(self, terms: List[str]) -> str:
        """Quote each term as an FTS5 string: ["open", "sess"] -> "open" OR "sess"*."""
        quoted = [f'"{term}"' for term in terms]
        quoted[-1] += "*"
        return " OR ".join(quoted)

    def matching_ids(self, match_query: str) -> Select:
        matches = (
            text(
                f"SELECT question_id FROM {self.FTS_TABLE_NAME} "
                f"WHERE {self.FTS_TABLE_NAME} MATCH :fts_query"
            )  # nosec B608 - FTS_TABLE_NAME is a class constant, not user input
            .bindparams(fts_query=match_query)
            .columns(question_id=Integer)
            .subquery("fts_matches")
        )
        return select(matches.c.question_id)
