"""
Entity store contract shared by the per-kind repositories.

Each entity kind (category, account, transaction) has its own repository
with an explicit column mapping; this module holds the parts that are the
same for all of them: lookup by id, listing, and delete semantics.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .base import BaseRepository
from .validators import require_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityKind(str, Enum):
    """Record kinds reachable through the generic CRUD contract."""

    CATEGORY = "category"
    ACCOUNT = "account"
    TRANSACTION = "transaction"


class EntityRepository(BaseRepository, Generic[T], ABC):
    """
    Common CRUD capability for one entity kind.

    Subclasses describe their storage with `table`, `select_sql` (a SELECT
    without WHERE/ORDER BY, possibly joined), `id_column` and `order_by`, and
    implement `insert`, `update` and `_from_row`.

    Contract:
        insert(entity) -> new id (also written back onto the entity)
        update(entity) -> affected row count, 0 when the id does not exist
        delete(entity) -> affected row count, 0 when the id does not exist
        get_by_id(id)  -> entity, or None when absent
        get_all()      -> list of entities
    """

    kind: EntityKind
    table: str = ""
    select_sql: str = ""
    id_column: str = "id"
    order_by: str = "id"

    @abstractmethod
    def _from_row(self, row: sqlite3.Row) -> T:
        """Build the entity from a row of `select_sql`."""

    @abstractmethod
    def insert(self, entity: T) -> int:
        """Store a new entity and return its id."""

    @abstractmethod
    def update(self, entity: T) -> int:
        """Replace a stored entity and return the affected row count."""

    # =========================================================================
    # Read Operations
    # =========================================================================

    def _fetch_by_id(self, conn: sqlite3.Connection, entity_id: int) -> Optional[T]:
        row = conn.execute(
            f"{self.select_sql} WHERE {self.id_column} = ?", (entity_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """
        Get an entity by ID.

        Returns:
            The entity, or None if no row has that ID

        Raises:
            ValueError: If the ID is not a positive integer
        """
        require_id(f"{self.kind.value} id", entity_id)

        try:
            with self._get_connection() as conn:
                return self._fetch_by_id(conn, entity_id)
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error getting {self.kind.value} {entity_id}: {e}", exc_info=True
            )
            raise

    def get_all(self) -> list[T]:
        """Get every entity of this kind in display order."""
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(f"{self.select_sql} ORDER BY {self.order_by}")
                entities = [self._from_row(row) for row in cursor.fetchall()]
                logger.debug(f"Retrieved {len(entities)} {self.table}")
                return entities
        except Exception as e:
            logger.error(f"Error listing {self.table}: {e}", exc_info=True)
            raise

    def exists(self, conn: sqlite3.Connection, entity_id: int) -> bool:
        row = conn.execute(
            f"SELECT 1 FROM {self.table} WHERE id = ?", (entity_id,)
        ).fetchone()
        return row is not None

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def _delete_with(self, conn: sqlite3.Connection, entity_id: int) -> int:
        """Delete one row on an open connection; subclasses add side effects."""
        cursor = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))
        return cursor.rowcount

    def delete_by_id(self, entity_id: int) -> int:
        """
        Delete an entity by ID.

        Returns:
            Number of rows deleted (0 if the ID does not exist)
        """
        require_id(f"{self.kind.value} id", entity_id)

        try:
            with self._get_connection() as conn:
                affected = self._delete_with(conn, entity_id)
                if affected:
                    logger.info(f"Deleted {self.kind.value} {entity_id}")
                else:
                    logger.debug(f"No {self.kind.value} {entity_id} to delete")
                return affected
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error deleting {self.kind.value} {entity_id}: {e}", exc_info=True
            )
            raise

    def delete(self, entity: Any) -> int:
        """Delete the row backing an entity object."""
        if getattr(entity, "id", None) is None:
            raise ValueError(f"Cannot delete a {self.kind.value} without an id")
        return self.delete_by_id(entity.id)
