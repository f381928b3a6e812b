"""
Category Service - flat set of uniquely named categories
"""
import logging
from typing import List

from ..db.crud import CategoryRepository, UniqueViolation
from ..db.schema import CategoryRecord
from .errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, categories: CategoryRepository):
        self.categories = categories

    async def list_categories(self) -> List[CategoryRecord]:
        """All categories; callers must not rely on the order."""
        return await self.categories.list_categories()

    async def create_category(self, name: str) -> CategoryRecord:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("The name field is required.", field="name")
        try:
            category = await self.categories.create_category(name.strip())
        except UniqueViolation as e:
            raise ConflictError("The name has already been taken.") from e
        logger.info("Created category %s (%s)", category.id, category.name)
        return category
