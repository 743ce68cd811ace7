"""
Order endpoints.

Any authenticated user may place an order for themselves; only admins may
list orders.

Trust boundary
--------------
``totalPrice`` is stored exactly as the client sent it.  The server does not
recompute it from catalog prices; a mismatch is logged as a warning and
otherwise accepted.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from core.logger import logger
from core.security import TokenClaims, get_current_claims, require_admin
from models.order import Order, OrderItem
from models.product import Product
from models.user import User
from orders.schemas import CreateOrderRequest, OrderCreatedResponse, OrderRow, PopulatedOrderRow

router = APIRouter(prefix="/orders", tags=["orders"])

# Tolerance when comparing client and catalog totals (float prices)
_PRICE_EPSILON = 0.005


# ---------------------------------------------------------------------------
# GET /orders  – admin listing with references resolved
# ---------------------------------------------------------------------------


@router.get("", response_model=List[PopulatedOrderRow])
def list_orders(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Return every order with ``user.email`` and product names filled in."""
    try:
        orders = db.query(Order).order_by(Order.id).all()
        return [PopulatedOrderRow.model_validate(order) for order in orders]
    except SQLAlchemyError:
        logger.exception("Listing orders failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching orders.",
        )


# ---------------------------------------------------------------------------
# POST /orders  – place an order for the caller
# ---------------------------------------------------------------------------


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    body: CreateOrderRequest,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    if not body.products:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot place an empty order.",
        )

    product_ids = {line.product for line in body.products}
    try:
        catalog = {
            p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
        }
        missing = sorted(product_ids - catalog.keys())
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown product id(s): {', '.join(str(i) for i in missing)}",
            )

        catalog_total = sum(catalog[line.product].price * line.quantity for line in body.products)
        if abs(catalog_total - body.total_price) > _PRICE_EPSILON:
            logger.warning(
                "Order total from user_id=%s is %.2f, catalog total is %.2f",
                claims.user_id,
                body.total_price,
                catalog_total,
            )

        order = Order(
            user_id=claims.user_id,
            total_price=body.total_price,
            items=[OrderItem(product_id=line.product, quantity=line.quantity) for line in body.products],
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        row = OrderRow.model_validate(order)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Placing order failed for user_id=%s", claims.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error placing order.",
        )

    logger.info("Order %s placed by user_id=%s", order.id, claims.user_id)
    return OrderCreatedResponse(message="Order placed successfully!", order=row)
