"""
Base repository class providing common database operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import update
from sqlalchemy.orm import Query, Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type parameter T should be a SQLAlchemy model class. Methods named
    ``add``/``increment``/``delete_*`` only stage work in the session; the
    service decides when to commit so multi-row changes land together.
    """

    def __init__(self, model: type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.db.query(self.model).filter(self.model.id == id).first()

    def exists(self, id: int) -> bool:
        """Return True when a row with this ID exists."""
        return (
            self.db.query(self.model.id).filter(self.model.id == id).first()
            is not None
        )

    def add(self, entity: T) -> None:
        """
        Add entity to session without committing.

        Args:
            entity: Entity to add
        """
        self.db.add(entity)

    def create(self, entity: T) -> T:
        """
        Create new entity and commit immediately.

        Args:
            entity: Entity to create

        Returns:
            Created entity
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """
        Commit pending changes on an entity and reload it.

        Args:
            entity: Entity to update

        Returns:
            Updated entity
        """
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        """
        Stage deletion of an entity.

        Args:
            entity: Entity to delete
        """
        self.db.delete(entity)

    def increment(self, id: int, **deltas: int) -> None:
        """
        Atomically add deltas to integer columns of one row.

        Emits ``UPDATE ... SET col = col + :delta`` so concurrent requests
        never lose updates.

        Args:
            id: Entity ID
            **deltas: Column name to signed delta
        """
        values: dict[str, Any] = {
            column: getattr(self.model, column) + delta
            for column, delta in deltas.items()
        }
        self.db.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    def count(self) -> int:
        """
        Count total number of entities.

        Returns:
            Total count
        """
        return self.db.query(self.model).count()

    def paginate(self, query: Query, page: int, limit: int) -> tuple[list, int]:
        """
        Apply page/limit to a query.

        Args:
            query: Filtered and ordered query
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (items on the page, total matching rows)
        """
        total = query.order_by(None).count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.db.rollback()

    def refresh(self, entity: T) -> None:
        """
        Refresh entity from database.

        Args:
            entity: Entity to refresh
        """
        self.db.refresh(entity)
