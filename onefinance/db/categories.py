"""
Categories repository module.

Handles category CRUD. Deleting a category never deletes transactions: the
foreign key nulls their category reference instead.
"""

import logging
import sqlite3
from typing import Optional

from onefinance.config import MAX_NAME_LENGTH
from onefinance.models import TransactionType

from .base import utc_now
from .models import Category
from .store import EntityKind, EntityRepository
from .validators import (
    optional_text,
    optional_transaction_type,
    require_id,
    require_text,
    validate_hex_color,
)

logger = logging.getLogger(__name__)


class CategoryRepository(EntityRepository[Category]):
    """Repository for managing transaction categories."""

    kind = EntityKind.CATEGORY
    table = "categories"
    select_sql = """
        SELECT id, name, color_code, icon, type, is_system, created_at, updated_at
        FROM categories
    """
    order_by = "name ASC"

    def __init__(self, db_path=None, init_schema: bool = False, seed: bool = True):
        """
        Initialize the category repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema (usually False,
                        as main repository handles this)
            seed: Whether bootstrapping inserts the default rows
        """
        super().__init__(db_path, init_schema=init_schema, seed=seed)

    def _from_row(self, row: sqlite3.Row) -> Category:
        return Category.from_row(row)

    def _validated(self, category: Category) -> Category:
        """Return a normalized copy of the category's fields, or raise."""
        return Category(
            id=category.id,
            name=require_text("name", category.name, MAX_NAME_LENGTH),
            color_code=validate_hex_color("color_code", category.color_code),
            icon=optional_text("icon", category.icon),
            type=optional_transaction_type(category.type),
            is_system=bool(category.is_system),
        )

    def _ensure_unique_name(
        self, conn: sqlite3.Connection, name: str, exclude_id: Optional[int] = None
    ):
        cursor = conn.execute(
            "SELECT id FROM categories WHERE name = ? AND id IS NOT ?",
            (name, exclude_id),
        )
        if cursor.fetchone():
            raise ValueError(f"Category '{name}' already exists")

    # =========================================================================
    # Create / Update
    # =========================================================================

    def insert(self, category: Category) -> int:
        """
        Insert a category and stamp its creation time.

        Returns:
            The new category ID (also set on the passed object)

        Raises:
            ValueError: If validation fails or the name is taken
        """
        clean = self._validated(category)
        created_at = utc_now()

        try:
            with self._get_connection() as conn:
                self._ensure_unique_name(conn, clean.name)
                cursor = conn.execute(
                    """
                    INSERT INTO categories
                    (name, color_code, icon, type, is_system, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        clean.name,
                        clean.color_code,
                        clean.icon,
                        clean.type.value if clean.type else None,
                        1 if clean.is_system else 0,
                        created_at.isoformat(),
                    ),
                )
                category.id = cursor.lastrowid
                category.name = clean.name
                category.color_code = clean.color_code
                category.icon = clean.icon
                category.type = clean.type
                category.created_at = created_at

                logger.info(f"Created category '{clean.name}' ({category.id})")
                return category.id
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error creating category: {e}", exc_info=True)
            raise

    def update(self, category: Category) -> int:
        """
        Update a category and stamp its modification time.

        Returns:
            Number of rows updated (0 if the category does not exist)
        """
        require_id("category id", category.id)
        clean = self._validated(category)
        updated_at = utc_now()

        try:
            with self._get_connection() as conn:
                if not self.exists(conn, category.id):
                    return 0
                self._ensure_unique_name(conn, clean.name, exclude_id=category.id)
                cursor = conn.execute(
                    """
                    UPDATE categories
                    SET name = ?, color_code = ?, icon = ?, type = ?,
                        is_system = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        clean.name,
                        clean.color_code,
                        clean.icon,
                        clean.type.value if clean.type else None,
                        1 if clean.is_system else 0,
                        updated_at.isoformat(),
                        category.id,
                    ),
                )
                category.updated_at = updated_at
                logger.info(f"Updated category {category.id} ('{clean.name}')")
                return cursor.rowcount
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error updating category {category.id}: {e}", exc_info=True)
            raise

    def create_category(
        self,
        name: str,
        color_code: Optional[str] = None,
        icon: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> Category:
        """Create a user category and return it."""
        category = Category(id=None, name=name, color_code=color_code, icon=icon, type=type)
        self.insert(category)
        return category

    def update_category(
        self,
        category_id: int,
        name: str,
        color_code: Optional[str] = None,
        icon: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> Optional[Category]:
        """
        Replace a category's editable fields.

        Returns:
            The updated Category, or None if it does not exist
        """
        require_id("category id", category_id)
        existing = self.get_by_id(category_id)
        if existing is None:
            return None

        existing.name = name
        existing.color_code = color_code
        existing.icon = icon
        existing.type = type
        if not self.update(existing):
            return None
        return self.get_by_id(category_id)

    # =========================================================================
    # Delete
    # =========================================================================

    def _delete_with(self, conn: sqlite3.Connection, entity_id: int) -> int:
        in_use = conn.execute(
            "SELECT COUNT(*) FROM transactions WHERE category_id = ?", (entity_id,)
        ).fetchone()[0]
        affected = super()._delete_with(conn, entity_id)
        if affected and in_use:
            logger.info(
                f"Category {entity_id} removed from {in_use} transaction(s)"
            )
        return affected

    def delete_category(self, category_id: int) -> int:
        """
        Delete a category; transactions using it keep existing with no category.

        Returns:
            Number of categories deleted (0 or 1)
        """
        return self.delete_by_id(category_id)

    def list_categories(self) -> list[Category]:
        """Get all categories ordered by name."""
        return self.get_all()
