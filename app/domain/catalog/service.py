"""Catalog service - Category administration and provider product listings"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import CurrentUser
from ...errors import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from ...models import Category, Product
from ...schemas import PageParams
from ..providers.repository import ProviderRepository
from .repository import CategoryRepository, ProductRepository
from .schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductFilters, ProductUpdate

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepository()

    def list_categories(self, user: CurrentUser | None) -> list[Category]:
        include_inactive = user is not None and user.is_admin
        return self.repo.list_categories(self.db, include_inactive=include_inactive)

    def get_category(self, category_id: str) -> Category:
        category = self.repo.get_by_id(self.db, category_id)
        if not category:
            raise NotFound("Category not found")
        return category

    def _check_parent(self, parent_id: str | None, category_id: str | None = None) -> None:
        if not parent_id:
            return
        if parent_id == category_id:
            raise ValidationFailed("A category cannot be its own parent")
        if not self.repo.get_by_id(self.db, parent_id):
            raise NotFound("Parent category not found")

    def create_category(self, data: CategoryCreate) -> Category:
        name = data.name.strip()
        if self.repo.get_by_name(self.db, name):
            raise Conflict(f"Category '{name}' already exists")
        self._check_parent(data.parent_id)

        try:
            category = self.repo.create_category(self.db, **data.model_dump(exclude={"name"}), name=name)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(f"Category '{name}' already exists") from e

        logger.info(f"🗂️ Category created: {category.name} ({category.id})")
        return category

    def update_category(self, category_id: str, data: CategoryUpdate) -> Category:
        category = self.get_category(category_id)
        updates = data.model_dump(exclude_none=True)

        if "name" in updates:
            updates["name"] = updates["name"].strip()
            existing = self.repo.get_by_name(self.db, updates["name"])
            if existing and existing.id != category.id:
                raise Conflict(f"Category '{updates['name']}' already exists")

        self._check_parent(updates.get("parent_id"), category.id)
        return self.repo.update_category(self.db, category, **updates)

    def delete_category(self, category_id: str) -> None:
        category = self.get_category(category_id)
        if self.repo.count_products(self.db, category.id):
            raise InvalidState("Cannot delete a category that still has products")
        self.repo.delete_category(self.db, category)
        logger.info(f"🗑️ Category deleted: {category_id}")


class ProductService:
    """Service layer for product business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository()
        self.categories = CategoryRepository()
        self.providers = ProviderRepository()

    def list_products(self, filters: ProductFilters, params: PageParams) -> tuple[list[Product], int]:
        return self.repo.list_products(self.db, filters, params)

    def get_product(self, product_id: str) -> Product:
        product = self.repo.get_by_id(self.db, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def _get_owned(self, product_id: str, user: CurrentUser) -> Product:
        product = self.get_product(product_id)
        if user.is_admin:
            return product
        provider = self.providers.get_by_user_id(self.db, user.user_id)
        if not provider or product.provider_id != provider.id:
            raise Forbidden("You can only modify your own products")
        return product

    def create_product(self, data: ProductCreate, user: CurrentUser) -> Product:
        """List a product; only verified providers may sell"""
        provider = self.providers.get_by_user_id(self.db, user.user_id)
        if not provider:
            raise Forbidden("A service provider profile is required")
        if not provider.is_verified:
            raise Forbidden("Only verified providers can list products")

        if not self.categories.get_by_id(self.db, data.category_id):
            raise NotFound("Category not found")

        if self.repo.get_by_sku(self.db, data.sku):
            raise Conflict(f"A product with SKU '{data.sku}' already exists")

        try:
            product = self.repo.create_product(self.db, provider.id, **data.model_dump())
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(f"A product with SKU '{data.sku}' already exists") from e

        logger.info(f"📦 Product {product.sku} listed by provider {provider.id}")
        return product

    def update_product(self, product_id: str, data: ProductUpdate, user: CurrentUser) -> Product:
        product = self._get_owned(product_id, user)
        updates = data.model_dump(exclude_none=True)

        if "category_id" in updates and not self.categories.get_by_id(self.db, updates["category_id"]):
            raise NotFound("Category not found")

        if "sku" in updates and updates["sku"] != product.sku and self.repo.get_by_sku(self.db, updates["sku"]):
            raise Conflict(f"A product with SKU '{updates['sku']}' already exists")

        price = updates.get("price", product.price)
        original_price = updates.get("original_price", product.original_price)
        if original_price is not None and original_price < price:
            raise ValidationFailed("original_price must be greater than or equal to price")

        try:
            return self.repo.update_product(self.db, product, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(f"A product with SKU '{updates.get('sku')}' already exists") from e

    def delete_product(self, product_id: str, user: CurrentUser) -> None:
        product = self._get_owned(product_id, user)
        self.repo.delete_product(self.db, product)
        logger.info(f"🗑️ Product deleted: {product_id}")
