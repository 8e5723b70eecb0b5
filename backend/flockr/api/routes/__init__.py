"""
API routers
"""
from flockr.api.routes import auth, health, products

__all__ = ["auth", "health", "products"]
