"""Abstract base class for question search backends."""

import re
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import Select
from sqlalchemy.engine import Connection

# Terms shorter than this are dropped from the match expression
MIN_TERM_LENGTH = 2


class SearchBackend(ABC):
    """Full-text index over question title and body."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the name of this backend (e.g., 'sqlite_fts5')."""

    @abstractmethod
    def create_index(self, connection: Connection) -> None:
        """
        Create the index storage and the triggers that keep it in sync.

        Idempotent; rows already in ``questions`` are indexed.

        Args:
            connection: Connection inside the schema-creating transaction
        """

    @abstractmethod
    def drop_index(self, connection: Connection) -> None:
        """Remove the index storage and its triggers."""

    @abstractmethod
    def build_match_query(self, terms: List[str]) -> str:
        """Turn sanitized terms into the backend's match syntax."""

    @abstractmethod
    def matching_ids(self, match_query: str) -> Select:
        """Select the ids of questions matching ``match_query``."""

    @staticmethod
    def split_terms(search: str) -> List[str]:
        """Word tokens of the user's input, lowercased, short ones dropped."""
        return [
            word
            for word in re.findall(r"\w+", search.lower())
            if len(word) >= MIN_TERM_LENGTH
        ]

    def search_ids(self, search: str) -> Optional[Select]:
        """
        Select the ids of questions matching free text.

        Every term may match (OR); the last one also matches as a prefix.

        Returns:
            A select of question ids, or None when no usable term remains
        """
        terms = self.split_terms(search)
        if not terms:
            return None
        return self.matching_ids(self.build_match_query(terms))
