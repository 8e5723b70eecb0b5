"""
Product Service

Listing lifecycle for sellers plus public discovery.

Ownership rule: only the user whose id is the product's owner may update or
delete it. The seller role itself is enforced by the API layer before these
methods are called.

Media handling:
- create: upload first, no record if the upload fails
- update: upload the replacement first; the old object is removed only after
  the record points at the new one
- delete: media removal is best-effort and never blocks deleting the record
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from flockr.core.config import Settings
from flockr.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from flockr.core.upload_validation import VideoUpload
from flockr.core.utils import is_valid_id
from flockr.models import Product
from flockr.repositories import ProductFilter, ProductRepository, SqlProductRepository
from flockr.services.storage import MediaAsset, MediaStore, RESOURCE_TYPE_VIDEO

logger = logging.getLogger(__name__)

PriceInput = Union[str, int, float, Decimal, None]


@dataclass
class ProductPatch:
    """Fields to change; None means leave as is."""
    title: Optional[str] = None
    description: Optional[str] = None
    price: PriceInput = None
    category: Optional[str] = None
    is_available: Optional[bool] = None


@dataclass
class DiscoverPage:
    page: int
    limit: int
    total: int
    products: list


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def parse_price(value: PriceInput) -> Decimal:
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Price must be a number")
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number")
    return price


def _parse_positive_int(value, default: int, name: str) -> int:
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer")
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer")
    return number


class ProductService:

    def __init__(
        self,
        db: AsyncSession,
        media: MediaStore,
        settings: Settings,
        products: Optional[ProductRepository] = None,
    ):
        self.db = db
        self.media = media
        self.settings = settings
        self.products = products or SqlProductRepository(db)

    # ============================================================
    # Helpers
    # ============================================================

    async def _upload_video(self, video: VideoUpload) -> MediaAsset:
        try:
            return await self.media.upload(
                content=video.content,
                filename=video.filename,
                content_type=video.content_type,
                resource_type=RESOURCE_TYPE_VIDEO,
            )
        except UploadError:
            raise
        except Exception as e:
            logger.error(f"Unexpected media upload failure: {type(e).__name__}: {e}")
            raise UploadError(details={"error": str(e)}) from e

    async def _discard_media(self, handle: str, reason: str) -> None:
        """Best-effort media removal; failures leave an orphan and are logged."""
        try:
            await self.media.delete(handle, resource_type=RESOURCE_TYPE_VIDEO)
        except Exception as e:
            logger.warning(f"Could not delete media {handle} ({reason}): {e}")

    async def _get_owned(self, product_id: str, caller_id: str, action: str) -> Product:
        if not is_valid_id(product_id):
            raise ValidationError("Invalid product ID")

        product = await self.products.find_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if not product.is_owned_by(caller_id):
            logger.warning(f"User {caller_id} tried to {action} product {product_id} owned by {product.owner_id}")
            raise ForbiddenError(f"Not authorized to {action} this product")

        return product

    # ============================================================
    # Operations
    # ============================================================

    async def create_product(
        self,
        owner_id: str,
        title: Optional[str],
        description: Optional[str],
        price: PriceInput,
        category: Optional[str] = None,
        video: Optional[VideoUpload] = None,
    ) -> Product:
        if not (_present(title) and _present(description) and _present(price)):
            raise ValidationError("Title, description, and price are required")
        if video is None:
            raise ValidationError("Product video is required")

        parsed_price = parse_price(price)
        asset = await self._upload_video(video)

        product = Product(
            owner_id=owner_id,
            title=title.strip(),
            description=description.strip(),
            price=parsed_price,
            category=category.strip() if _present(category) else None,
            video_url=asset.url,
            media_handle=asset.handle,
            is_available=True,
            views=0,
        )
        try:
            product = await self.products.add(product)
        except Exception:
            await self._discard_media(asset.handle, "product insert failed")
            raise

        logger.info(f"Product {product.id} created by {owner_id}")
        return product

    async def discover(
        self,
        page=None,
        limit=None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> DiscoverPage:
        page = _parse_positive_int(page, 1, "page")
        limit = min(_parse_positive_int(limit, 10, "limit"), self.settings.DISCOVER_MAX_LIMIT)

        filter = ProductFilter(
            category=category if _present(category) else None,
            search=search.strip() if _present(search) else None,
        )
        products, total = await self.products.search(filter, page, limit)
        return DiscoverPage(page=page, limit=limit, total=total, products=products)

    async def get_product(self, product_id: str) -> Product:
        """Fetch one product; every successful read counts as a view."""
        if not is_valid_id(product_id):
            raise ValidationError("Invalid product ID")

        if not await self.products.atomic_increment_views(product_id):
            raise NotFoundError("Product not found")

        product = await self.products.find_by_id(product_id, with_owner=True)
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def update_product(
        self,
        product_id: str,
        caller_id: str,
        patch: ProductPatch,
        video: Optional[VideoUpload] = None,
    ) -> Product:
        product = await self._get_owned(product_id, caller_id, "update")

        # Validate everything before touching the media store
        new_price = parse_price(patch.price) if _present(patch.price) else None

        new_asset = await self._upload_video(video) if video is not None else None

        if _present(patch.title):
            product.title = patch.title.strip()
        if _present(patch.description):
            product.description = patch.description.strip()
        if new_price is not None:
            product.price = new_price
        if _present(patch.category):
            product.category = patch.category.strip()
        if patch.is_available is not None:
            product.is_available = patch.is_available

        old_handle = None
        if new_asset:
            old_handle = product.media_handle
            product.video_url = new_asset.url
            product.media_handle = new_asset.handle

        try:
            product = await self.products.save(product)
            # Old media goes only once the new reference is durable
            await self.db.commit()
        except Exception:
            if new_asset:
                await self._discard_media(new_asset.handle, "product update failed")
            raise

        if old_handle:
            await self._discard_media(old_handle, "replaced by new video")

        logger.info(f"Product {product.id} updated by {caller_id}")
        return product

    async def delete_product(self, product_id: str, caller_id: str) -> None:
        product = await self._get_owned(product_id, caller_id, "delete")

        await self._discard_media(product.media_handle, "product deleted")
        await self.products.delete(product)
        logger.info(f"Product {product_id} deleted by {caller_id}")
