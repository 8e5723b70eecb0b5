"""
Data access layer
"""
from flockr.repositories.base import ProductFilter, ProductRepository, UserRepository
from flockr.repositories.products import SqlProductRepository
from flockr.repositories.users import SqlUserRepository

__all__ = [
    "ProductFilter",
    "ProductRepository",
    "UserRepository",
    "SqlProductRepository",
    "SqlUserRepository",
]
