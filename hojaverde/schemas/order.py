from typing import List, Optional, Literal
from pydantic import BaseModel, Field
from hojaverde.schemas.base import BaseSchema, TimestampSchema

OrderStatus = Literal["pending", "confirmed", "delivered", "cancelled"]


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(min_length=1)
    delivery_address: str = Field(min_length=1)
    notes: Optional[str] = None


class OrderItem(BaseSchema):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: float


class Order(TimestampSchema):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: float
    delivery_address: str
    notes: Optional[str] = None


class OrderWithItems(Order):
    items: List[OrderItem]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
