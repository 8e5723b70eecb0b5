"""
Database models
"""
from flockr.models.user import User, UserRole
from flockr.models.product import Product

__all__ = ["User", "UserRole", "Product"]
