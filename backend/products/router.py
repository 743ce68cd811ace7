"""
Product catalog endpoints.

Listing is public.  Create, update and delete are guarded by
``require_admin``: a request with a valid JWT belonging to a ``user`` role
receives 403 before any catalog row is touched.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import MAX_ID, get_db
from core.logger import logger
from core.security import require_admin
from models.product import Product
from models.user import User
from products.schemas import ProductRequest, ProductResponse

router = APIRouter(prefix="/products", tags=["products"])


def _server_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Server error {action} product.",
    )


def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


# ---------------------------------------------------------------------------
# GET /products  – public catalog
# ---------------------------------------------------------------------------


@router.get("", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    """Return every product.  No pagination."""
    try:
        return db.query(Product).order_by(Product.id).all()
    except SQLAlchemyError:
        logger.exception("Listing products failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching products.",
        )


# ---------------------------------------------------------------------------
# POST /products
# ---------------------------------------------------------------------------


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    product = Product(name=body.name, price=body.price, image_url=body.image_url)
    try:
        db.add(product)
        db.commit()
        db.refresh(product)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Creating product failed")
        raise _server_error("creating")

    logger.info("Product %s created by admin_id=%s", product.id, admin.id)
    return product


# ---------------------------------------------------------------------------
# PUT /products/{id}
# ---------------------------------------------------------------------------


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    body: ProductRequest,
    product_id: int = Path(..., le=MAX_ID),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Replace name, price and image URL of an existing product."""
    try:
        product = _get_product(db, product_id)
        product.name = body.name
        product.price = body.price
        product.image_url = body.image_url
        db.commit()
        db.refresh(product)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Updating product %s failed", product_id)
        raise _server_error("updating")

    logger.info("Product %s updated by admin_id=%s", product_id, admin.id)
    return product


# ---------------------------------------------------------------------------
# DELETE /products/{id}
# ---------------------------------------------------------------------------


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int = Path(..., le=MAX_ID),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        product = _get_product(db, product_id)
        db.delete(product)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Deleting product %s failed", product_id)
        raise _server_error("deleting")

    logger.info("Product %s deleted by admin_id=%s", product_id, admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
