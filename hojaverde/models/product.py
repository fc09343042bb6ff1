from sqlalchemy import Column, String, Text, Integer, Boolean, Enum, Numeric, ForeignKey, JSON
from sqlalchemy.orm import relationship
from hojaverde.models.base import BaseModel, CERTIFICATION_STATUSES


class Product(BaseModel):
    __tablename__ = "products"

    producer_id = Column(Integer, ForeignKey("producers.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    unit = Column(String(20), nullable=False)  # kg, g, unidad...
    in_stock = Column(Boolean, nullable=False, default=True)
    stock_quantity = Column(Integer, default=0)
    images = Column(JSON, default=list)
    qr_code = Column(String(2400), unique=True, index=True)  # fits detailed codes
    certification_status = Column(
        Enum(*CERTIFICATION_STATUSES, name="product_certification_statuses"),
        nullable=False,
        default="pending",
    )
    sustainability_info = Column(JSON)

    producer = relationship("Producer", back_populates="products")
    order_items = relationship("OrderItem", back_populates="product")
