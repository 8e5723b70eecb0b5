"""
Product routes

Public: discover, single product (counts a view).
Seller + owner: create, update, delete. Create/update take multipart forms
with an optional "video" file part.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status

from flockr.api.deps import TokenClaims, get_product_service, require_seller
from flockr.core.upload_validation import read_video_upload
from flockr.schemas import DiscoverResponse, MessageResponse, ProductDetailResponse, ProductResponse
from flockr.services.product_service import ProductPatch, ProductService

router = APIRouter()


@router.post("/create_product", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    seller: TokenClaims = Depends(require_seller),
    product_service: ProductService = Depends(get_product_service),
):
    """Create a listing with its video (sellers only)."""
    upload = await read_video_upload(video, request.app.state.settings.max_video_size_bytes)
    product = await product_service.create_product(
        owner_id=seller.id,
        title=title,
        description=description,
        price=price,
        category=category,
        video=upload,
    )
    return ProductResponse.from_model(product)


@router.get("/discover", response_model=DiscoverResponse)
async def discover_products(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    product_service: ProductService = Depends(get_product_service),
):
    """Newest-first product feed with optional category and title search."""
    result = await product_service.discover(page=page, limit=limit, category=category, search=search)
    return DiscoverResponse(
        page=result.page,
        limit=result.limit,
        total=result.total,
        products=[ProductDetailResponse.from_model(p) for p in result.products],
    )


@router.get("/product/{product_id}", response_model=ProductDetailResponse)
async def get_product(
    product_id: str,
    product_service: ProductService = Depends(get_product_service),
):
    """Get a single product. Each call adds one view."""
    product = await product_service.get_product(product_id)
    return ProductDetailResponse.from_model(product)


@router.put("/update_product/{product_id}", response_model=ProductResponse)
async def update_product(
    request: Request,
    product_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    is_available: Optional[bool] = Form(None, alias="isAvailable"),
    video: Optional[UploadFile] = File(None),
    seller: TokenClaims = Depends(require_seller),
    product_service: ProductService = Depends(get_product_service),
):
    """Update any subset of fields, optionally replacing the video (owner only)."""
    upload = await read_video_upload(video, request.app.state.settings.max_video_size_bytes)
    product = await product_service.update_product(
        product_id=product_id,
        caller_id=seller.id,
        patch=ProductPatch(
            title=title,
            description=description,
            price=price,
            category=category,
            is_available=is_available,
        ),
        video=upload,
    )
    return ProductResponse.from_model(product)


@router.delete("/delete_product/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    seller: TokenClaims = Depends(require_seller),
    product_service: ProductService = Depends(get_product_service),
):
    """Delete a listing and its video (owner only)."""
    await product_service.delete_product(product_id, seller.id)
    return MessageResponse(message="Product deleted successfully")
