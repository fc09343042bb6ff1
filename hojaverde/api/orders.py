from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from hojaverde.core.exceptions import InsufficientStockError, OrderStatusError, RecordNotFoundError
from hojaverde.models.user import User
from hojaverde.schemas.order import (
    Order as OrderSchema,
    OrderItem as OrderItemSchema,
    OrderCreate,
    OrderStatusUpdate,
    OrderWithItems,
)
from hojaverde.storage.database import DatabaseStorage, get_storage
from hojaverde.auth.security import get_current_active_user

router = APIRouter()


def _check_access(order, current_user: User):
    # Only validators or the user who placed the order can see it
    if current_user.role != "validator" and current_user.id != order.user_id:
        raise HTTPException(status_code=403, detail="Not enough permissions")


@router.post("/", response_model=OrderWithItems, status_code=status.HTTP_201_CREATED)
def create_order(
    order: OrderCreate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    try:
        db_order = storage.create_order(
            current_user.id,
            [(item.product_id, item.quantity) for item in order.items],
            delivery_address=order.delivery_address,
            notes=order.notes,
        )
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return db_order


@router.get("/user/{user_id}", response_model=List[OrderSchema])
def read_user_orders(
    user_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    if current_user.role != "validator" and current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not enough permissions")

    return storage.get_orders_by_user(user_id)


@router.get("/{order_id}", response_model=OrderWithItems)
def read_order(
    order_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    db_order = storage.get_order(order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    _check_access(db_order, current_user)

    items = storage.get_order_items(order_id)
    return {
        **OrderSchema.model_validate(db_order).model_dump(),
        "items": [OrderItemSchema.model_validate(item) for item in items],
    }


@router.patch("/{order_id}/status", response_model=OrderSchema)
def update_order_status(
    order_id: int,
    update: OrderStatusUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_active_user),
):
    db_order = storage.get_order(order_id)
    if db_order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    _check_access(db_order, current_user)

    # customers may only cancel their own orders
    if current_user.role != "validator" and update.status != "cancelled":
        raise HTTPException(status_code=403, detail="Only validators can advance orders")

    try:
        return storage.update_order_status(order_id, update.status)
    except OrderStatusError as e:
        raise HTTPException(status_code=409, detail=str(e))
