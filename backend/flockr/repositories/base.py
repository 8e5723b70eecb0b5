"""
Repository interfaces

Services depend on these rather than on query code, so the storage engine
can change without touching business rules.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from flockr.models import Product, User


@dataclass
class ProductFilter:
    """Discovery filter: exact category, case-insensitive title substring."""
    category: Optional[str] = None
    search: Optional[str] = None


class UserRepository(ABC):

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_verification_token(self, token_digest: str, now: datetime) -> Optional[User]:
        """Return the user holding this token digest, only if it expires after ``now``."""

    @abstractmethod
    async def add(self, user: User) -> User:
        ...

    @abstractmethod
    async def save(self, user: User) -> User:
        ...

    @abstractmethod
    async def delete(self, user: User) -> None:
        ...


class ProductRepository(ABC):

    @abstractmethod
    async def find_by_id(self, product_id: str, with_owner: bool = False) -> Optional[Product]:
        ...

    @abstractmethod
    async def search(self, filter: ProductFilter, page: int, limit: int) -> Tuple[List[Product], int]:
        """
        Page through matching products, newest first, owners loaded.

        Returns:
            Tuple of (products on the page, total matching count)
        """

    @abstractmethod
    async def atomic_increment_views(self, product_id: str) -> bool:
        """Add one view without a read-modify-write. False if no such product."""

    @abstractmethod
    async def add(self, product: Product) -> Product:
        ...

    @abstractmethod
    async def save(self, product: Product) -> Product:
        ...

    @abstractmethod
    async def delete(self, product: Product) -> None:
        ...
