"""
Product schemas
"""
from datetime import datetime
from typing import List, Optional

from flockr.models import Product
from flockr.schemas.base import CamelModel
from flockr.schemas.user import OwnerSummary


class ProductBase(CamelModel):
    id: str
    title: str
    description: str
    price: float
    category: Optional[str] = None
    is_available: bool
    video_url: str
    media_handle: str
    views: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def _fields(product: Product) -> dict:
        return {
            "id": product.id,
            "title": product.title,
            "description": product.description,
            "price": product.price,
            "category": product.category,
            "is_available": product.is_available,
            "video_url": product.video_url,
            "media_handle": product.media_handle,
            "views": product.views,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }


class ProductResponse(ProductBase):
    """Product with the owner as a bare id."""
    owner: str

    @classmethod
    def from_model(cls, product: Product) -> "ProductResponse":
        return cls(owner=product.owner_id, **cls._fields(product))


class ProductDetailResponse(ProductBase):
    """Product with the owner expanded to name and email."""
    owner: OwnerSummary

    @classmethod
    def from_model(cls, product: Product) -> "ProductDetailResponse":
        return cls(owner=OwnerSummary.model_validate(product.owner), **cls._fields(product))


class DiscoverResponse(CamelModel):
    page: int
    limit: int
    total: int
    products: List[ProductDetailResponse]
