from sqlalchemy import Column, Enum, Numeric, String, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship
from hojaverde.models.base import BaseModel

ORDER_STATUSES = ("pending", "confirmed", "delivered", "cancelled")


class Order(BaseModel):
    __tablename__ = "orders"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(*ORDER_STATUSES, name="order_statuses"), nullable=False, default="pending")
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_address = Column(String(255), nullable=False)
    notes = Column(Text)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.id")


class OrderItem(BaseModel):
    __tablename__ = "order_items"

    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
