import logging
from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional

from hojaverde.core.exceptions import ConflictError
from hojaverde.models.product import Product
from hojaverde.models.user import User
from hojaverde.qr.codec import generate_qr_code, generate_detailed_qr_code, parse_detailed_qr_code
from hojaverde.qr.links import generate_qr_code_url, create_shareable_product_url, generate_product_page_qr_url
from hojaverde.schemas.pagination import PaginatedResponse
from hojaverde.schemas.producer import CertificationUpdate
from hojaverde.schemas.product import (
    Product as ProductSchema,
    ProductCreate,
    ProductUpdate,
    ProductWithProducer,
    ProductQR,
)
from hojaverde.storage.database import DatabaseStorage, ProductFilter, PRODUCT_SORT_FIELDS, get_storage
from hojaverde.auth.security import get_current_active_user, is_validator

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_404(storage: DatabaseStorage, product_id: int) -> Product:
    product = storage.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def _require_owner(storage: DatabaseStorage, product: Product, user: User):
    producer = storage.get_producer_by_user_id(user.id)
    if producer is None or product.producer_id != producer.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
    return producer


def _qr_response(product: Product) -> ProductQR:
    return ProductQR(
        product_id=product.id,
        qr_code=product.qr_code,
        is_detailed=parse_detailed_qr_code(product.qr_code) is not None,
        image_url=generate_qr_code_url(product.qr_code),
        product_url=create_shareable_product_url(product.id),
        product_page_image_url=generate_product_page_qr_url(product.id),
    )


@router.post(
    "/",
    response_model=ProductSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product for the current user's farm. A QR code is assigned automatically.",
)
def create_product(
    product: ProductCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    """
    Create a new product listing.

    - **name**: Product name (required)
    - **description**: Product description (required)
    - **category**: Product category (required)
    - **price**: Unit price (required)
    - **unit**: Measurement unit (kg, g, unidad, etc.)
    - **stock_quantity**: Units available for ordering
    """
    producer = storage.get_producer_by_user_id(current_user.id)
    if producer is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is not a registered producer",
        )
    return storage.create_product(producer.id, product.model_dump())


@router.get(
    "/",
    response_model=PaginatedResponse[ProductSchema],
    summary="Get products with filtering",
)
def read_products(
    page: int = Query(1, ge=1, description="Page number starting from 1"),
    per_page: int = Query(20, ge=1, le=100, description="Items per page (1-100)"),
    category: Optional[str] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Search in product name"),
    certified: bool = Query(False, description="Only products with approved certification"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price filter"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum price filter"),
    in_stock: Optional[bool] = Query(None, description="Only products in stock"),
    sort_by: str = Query("created_at", description="Sort by field: name, price, created_at, updated_at"),
    sort_order: str = Query("desc", description="Sort order: asc or desc"),
    storage: DatabaseStorage = Depends(get_storage),
):
    if sort_by not in PRODUCT_SORT_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort field. Must be one of: {', '.join(PRODUCT_SORT_FIELDS)}",
        )

    if sort_order not in ["asc", "desc"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sort order must be 'asc' or 'desc'",
        )

    filters = ProductFilter(
        category=category,
        search=search,
        certified=certified,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    total_count = storage.count_products(filters)
    total_pages = (total_count + per_page - 1) // per_page
    products = storage.get_products(filters, offset=(page - 1) * per_page, limit=per_page)

    return {
        "items": products,
        "total": total_count,
        "page": page,
        "per_page": per_page,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


@router.get(
    "/qr/{qr_code:path}",
    response_model=ProductWithProducer,
    summary="Look up a product by QR code",
)
def read_product_by_qr(qr_code: str, storage: DatabaseStorage = Depends(get_storage)):
    """
    Resolve a scanned code to its product and producer.

    Stored codes match exactly. A detailed code that is not stored (for
    example one generated for sharing) resolves through its embedded
    product id.
    """
    product = storage.get_product_by_qr(qr_code)
    if product is None:
        detailed = parse_detailed_qr_code(qr_code)
        if detailed:
            product = storage.get_product(detailed.product_id)

    if product is None:
        logger.info("QR lookup miss for %s", qr_code)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    return {"product": product, "producer": storage.get_producer(product.producer_id)}


@router.get("/producer/{producer_id}", response_model=List[ProductSchema])
def read_products_by_producer(producer_id: int, storage: DatabaseStorage = Depends(get_storage)):
    return storage.get_products_by_producer(producer_id)


@router.get("/{product_id}", response_model=ProductSchema, summary="Get product by ID")
def read_product(product_id: int, storage: DatabaseStorage = Depends(get_storage)):
    return _get_or_404(storage, product_id)


@router.put("/{product_id}", response_model=ProductSchema, summary="Update a product")
def update_product(
    product_id: int,
    product: ProductUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    db_product = _get_or_404(storage, product_id)
    _require_owner(storage, db_product, current_user)
    return storage.update_product(product_id, product.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_200_OK, summary="Delete a product")
def delete_product(
    product_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    db_product = _get_or_404(storage, product_id)
    _require_owner(storage, db_product, current_user)

    try:
        storage.delete_product(product_id)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return {"ok": True, "message": "Product deleted successfully"}


@router.get("/{product_id}/qr", response_model=ProductQR, summary="QR code and image links")
def read_product_qr(product_id: int, storage: DatabaseStorage = Depends(get_storage)):
    product = _get_or_404(storage, product_id)
    if not product.qr_code:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product has no QR code")
    return _qr_response(product)


@router.post("/{product_id}/qr", response_model=ProductQR, summary="Regenerate the product QR code")
def regenerate_product_qr(
    product_id: int,
    detailed: bool = Query(False, description="Embed product and farm names in the code"),
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    product = _get_or_404(storage, product_id)
    producer = _require_owner(storage, product, current_user)

    if detailed:
        qr_code = generate_detailed_qr_code(product.id, product.name, producer.farm_name)
    else:
        qr_code = generate_qr_code(product.id)

    try:
        product = storage.update_product_qr(product_id, qr_code)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _qr_response(product)


@router.patch(
    "/{product_id}/certification",
    response_model=ProductSchema,
    summary="Set certification status",
    description="Set a product's certification status. Requires validator privileges.",
)
def update_product_certification(
    product_id: int,
    certification: CertificationUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(is_validator),
):
    product = storage.update_product_certification(product_id, certification.status)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product
