"""Category domain service."""

from typing import Any, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import Category as CategoryEntity, TransactionType
from fintrack.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_category,
)
from fintrack.domain.ledger import DONATION_CATEGORY, DPS_CATEGORY, SAVINGS_CATEGORY

logger = structlog.get_logger()

DEFAULT_COLOR = "#3B82F6"
UPDATABLE_FIELDS = frozenset({"name", "color", "currency"})

# Seeded by ``fintrack category init``
DEFAULT_CATEGORIES = [
    ("Salary", TransactionType.INCOME),
    ("Business", TransactionType.INCOME),
    ("Investment", TransactionType.INCOME),
    (SAVINGS_CATEGORY, TransactionType.INCOME),
    (DONATION_CATEGORY, TransactionType.INCOME),
    (DPS_CATEGORY, TransactionType.INCOME),
    ("Other Income", TransactionType.INCOME),
    ("Food & Dining", TransactionType.EXPENSE),
    ("Transportation", TransactionType.EXPENSE),
    ("Shopping", TransactionType.EXPENSE),
    ("Bills & Utilities", TransactionType.EXPENSE),
    ("Entertainment", TransactionType.EXPENSE),
    ("Health & Fitness", TransactionType.EXPENSE),
    ("Travel", TransactionType.EXPENSE),
    ("Other", TransactionType.EXPENSE),
]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        type: TransactionType,
        color: str = DEFAULT_COLOR,
        currency: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            type: Income or expense
            color: Display color
            currency: Optional currency the category is meant for

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category of that type and name exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        type = TransactionType(type)
        if self.db.get_category_by_name(name, type) is not None:
            raise ConflictError(duplicate_category(name, type.value))

        category_id = self.db.create_category(
            name=name,
            type=type,
            color=color,
            currency=currency.upper() if currency else None,
        )
        logger.info("category_created", category_id=category_id, name=name, type=type.value)
        return category_id

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def list_categories(self, type: Optional[TransactionType] = None) -> list[CategoryEntity]:
        """List categories by type, then name."""
        return self.db.list_categories(type=type)

    def update_category(self, category_id: int, changes: dict[str, Any]) -> None:
        """Rename or recolor a category.

        Transactions keep the category name they were recorded with.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If a key is not updatable or the name is empty
            ConflictError: If the new name is taken within the category's type
        """
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update category field(s): {', '.join(unknown)}")

        patch = dict(changes)
        if "name" in patch:
            patch["name"] = (patch["name"] or "").strip()
            if not patch["name"]:
                raise ValidationError("Category name is required")
            existing = self.db.get_category_by_name(patch["name"], category.type)
            if existing is not None and existing.id != category_id:
                raise ConflictError(duplicate_category(patch["name"], category.type.value))
        if "currency" in patch:
            patch["currency"] = patch["currency"].upper() if patch["currency"] else None

        self.db.update_category(category_id, **patch)
        logger.info("category_updated", category_id=category_id, fields=sorted(patch))

    def delete_category(self, category_id: int) -> None:
        """Delete a category that no transaction uses.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If transactions still use it
        """
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))

        in_use = self.db.list_transactions(category=category.name, type=category.type)
        if in_use:
            raise DependencyError(
                f"Category '{category.name}' is used by {len(in_use)} transaction(s)"
            )

        self.db.delete_category(category_id)
        logger.info("category_deleted", category_id=category_id, name=category.name)

    def ensure_default_categories(self) -> int:
        """Create any missing default category. Returns how many were added."""
        added = 0
        for name, type in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(name, type) is None:
                self.db.create_category(name=name, type=type, color=DEFAULT_COLOR)
                added += 1
        logger.info("default_categories_ensured", added=added)
        return added
