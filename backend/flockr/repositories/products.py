"""
SQLAlchemy product repository
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flockr.models import Product
from flockr.repositories.base import ProductFilter, ProductRepository


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlProductRepository(ProductRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    def _conditions(self, filter: ProductFilter) -> list:
        conditions = []
        if filter.category:
            conditions.append(Product.category == filter.category)
        if filter.search:
            pattern = f"%{_escape_like(filter.search)}%"
            conditions.append(Product.title.ilike(pattern, escape="\\"))
        return conditions

    async def find_by_id(self, product_id: str, with_owner: bool = False) -> Optional[Product]:
        query = select(Product).where(Product.id == product_id)
        if with_owner:
            query = query.options(selectinload(Product.owner))
        # Views may have been bumped by a bulk UPDATE in this session
        query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def search(self, filter: ProductFilter, page: int, limit: int) -> Tuple[List[Product], int]:
        conditions = self._conditions(filter)

        count_result = await self.db.execute(
            select(func.count(Product.id)).where(*conditions)
        )
        total = count_result.scalar() or 0

        offset = (page - 1) * limit
        query = (
            select(Product)
            .where(*conditions)
            .options(selectinload(Product.owner))
            .order_by(Product.created_at.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def atomic_increment_views(self, product_id: str) -> bool:
        result = await self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(views=Product.views + 1, updated_at=Product.updated_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def add(self, product: Product) -> Product:
        self.db.add(product)
        await self.db.flush()
        await self.db.refresh(product)
        return product

    async def save(self, product: Product) -> Product:
        await self.db.flush()
        await self.db.refresh(product)
        return product

    async def delete(self, product: Product) -> None:
        await self.db.delete(product)
        await self.db.flush()
