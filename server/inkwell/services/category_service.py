# server/inkwell/services/category_service.py

import logging
from typing import List, Optional

from inkwell.errors import Conflict, NotFound, ValidationError, invalid_id
from inkwell.models.category import Category
from inkwell.utils.helpers import is_valid_uuid
from inkwell.utils.slug import SlugGenerator
from inkwell.utils.validators import ContentValidator

logger = logging.getLogger(__name__)

CATEGORIES_CACHE_KEY = "categories"


class CategoryService:

    def __init__(self, store, cache=None, cache_ttl: int = 300):
        self.store = store
        self.cache = cache
        self.cache_ttl = cache_ttl

    def _validated_name(self, name) -> str:
        is_valid, normalized, error = ContentValidator.validate_category_name(name)
        if not is_valid:
            raise ValidationError(error, details={"name": error})
        return normalized

    def _ensure_unique(self, name: str, slug: str, exclude_id: Optional[str] = None) -> None:
        criteria = []
        if exclude_id:
            criteria.append(Category.id != exclude_id)

        if self.store.find_one(Category, self.store.iexact(Category.name, name), *criteria):
            raise Conflict("Category already exists", code="CATEGORY_EXISTS")

        if self.store.find_one(Category, Category.slug == slug, *criteria):
            raise Conflict("A category with the same URL slug already exists", code="CATEGORY_EXISTS")

    def get(self, category_id: str) -> Category:
        if not is_valid_uuid(category_id):
            raise invalid_id("category")

        category = self.store.find_by_id(Category, category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def list(self) -> List[dict]:
        if self.cache:
            cached = self.cache.get_cached_json(CATEGORIES_CACHE_KEY)
            if cached is not None:
                return cached

        categories = self.store.find(Category, order_by=[Category.created_at.desc(), Category.id])
        data = [c.to_dict() for c in categories]

        if self.cache:
            self.cache.cache_json(CATEGORIES_CACHE_KEY, data, ttl=self.cache_ttl)

        return data

    def create(self, name) -> Category:
        name = self._validated_name(name)
        slug = SlugGenerator.slugify(name)
        self._ensure_unique(name, slug)

        category = self.store.create(Category, name=name, slug=slug)
        self.invalidate_cache()

        logger.info(f"Category created: {category.id} ({category.name})")
        return category

    def rename(self, category_id: str, name) -> Category:
        category = self.get(category_id)
        name = self._validated_name(name)

        if name == category.name:
            return category

        slug = SlugGenerator.slugify(name)
        self._ensure_unique(name, slug, exclude_id=category.id)

        category = self.store.update_by_id(Category, category.id, values={"name": name, "slug": slug})
        self.invalidate_cache()

        logger.info(f"Category renamed: {category.id} -> {category.name}")
        return category

    def delete(self, category_id: str) -> dict:
        if not is_valid_uuid(category_id):
            raise invalid_id("category")

        deleted = self.store.delete_by_id(Category, category_id)
        if deleted is None:
            raise NotFound("Category not found")

        self.invalidate_cache()
        logger.info(f"Category deleted: {category_id} ({deleted['name']})")
        return deleted

    def adjust_article_count(self, category_name: str, delta: int) -> int:
        """Move a category's article_count by delta, never below zero."""
        if not category_name:
            return 0

        updated = self.store.update_where(
            Category,
            self.store.iexact(Category.name, category_name),
            increment={"article_count": delta},
            floor_zero=True,
        )

        if updated:
            self.invalidate_cache()
        else:
            logger.debug(f"No article_count change for category '{category_name}' ({delta:+d})")

        return updated

    def invalidate_cache(self) -> None:
        if self.cache:
            self.cache.invalidate(CATEGORIES_CACHE_KEY)
