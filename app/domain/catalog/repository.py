"""Catalog repository - Database operations for categories and products"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Category, Product
from ...schemas import PageParams
from ...shared.pagination import paginate
from .schemas import ProductFilters


class CategoryRepository:
    """Repository for category database operations"""

    @staticmethod
    def get_by_id(db: Session, category_id: str) -> Optional[Category]:
        return db.query(Category).filter(Category.id == category_id).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[Category]:
        """Case-insensitive lookup"""
        return db.query(Category).filter(func.lower(Category.name) == name.strip().lower()).first()

    @staticmethod
    def list_categories(db: Session, include_inactive: bool = False) -> list[Category]:
        query = db.query(Category)
        if not include_inactive:
            query = query.filter(Category.is_active.is_(True))
        return query.order_by(Category.sort_order.asc(), Category.name.asc()).all()

    @staticmethod
    def create_category(db: Session, **category_data) -> Category:
        category = Category(**category_data)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def update_category(db: Session, category: Category, **updates) -> Category:
        for key, value in updates.items():
            if value is not None and hasattr(category, key):
                setattr(category, key, value)

        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def count_products(db: Session, category_id: str) -> int:
        return db.query(func.count(Product.id)).filter(Product.category_id == category_id).scalar() or 0

    @staticmethod
    def delete_category(db: Session, category: Category) -> None:
        db.delete(category)
        db.commit()


class ProductRepository:
    """Repository for product database operations"""

    @staticmethod
    def get_by_id(db: Session, product_id: str) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    @staticmethod
    def get_by_sku(db: Session, sku: str) -> Optional[Product]:
        return db.query(Product).filter(Product.sku == sku).first()

    @staticmethod
    def list_products(db: Session, filters: ProductFilters, params: PageParams) -> tuple[list[Product], int]:
        """Active products only, newest first"""
        query = db.query(Product).filter(Product.is_active.is_(True))

        if filters.category_id:
            query = query.filter(Product.category_id == filters.category_id)

        if filters.provider_id:
            query = query.filter(Product.provider_id == filters.provider_id)

        if filters.min_price is not None:
            query = query.filter(Product.price >= filters.min_price)

        if filters.max_price is not None:
            query = query.filter(Product.price <= filters.max_price)

        if filters.is_featured is not None:
            query = query.filter(Product.is_featured.is_(filters.is_featured))

        if filters.search:
            term = f"%{filters.search.lower()}%"
            query = query.filter(
                or_(
                    Product.name.ilike(term),
                    Product.description.ilike(term),
                    Product.sku.ilike(term),
                )
            )

        query = query.order_by(Product.created_at.desc())
        return paginate(query, params)

    @staticmethod
    def create_product(db: Session, provider_id: str, **product_data) -> Product:
        product = Product(provider_id=provider_id, **product_data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def update_product(db: Session, product: Product, **updates) -> Product:
        for key, value in updates.items():
            if value is not None and hasattr(product, key):
                setattr(product, key, value)

        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()
