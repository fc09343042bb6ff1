from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator
from hojaverde.schemas.base import BaseSchema, TimestampSchema
from hojaverde.schemas.producer import CertificationStatus, Producer


class ProductBase(BaseSchema):
    name: str = Field(min_length=1, max_length=100)
    description: str
    category: str = Field(min_length=1, max_length=50)
    price: float = Field(ge=0)
    unit: str = Field(min_length=1, max_length=20)
    in_stock: bool = True
    stock_quantity: int = Field(default=0, ge=0)
    images: Optional[List[str]] = None
    sustainability_info: Optional[Any] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    price: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=20)
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    sustainability_info: Optional[Any] = None

    # columns are NOT NULL: a field may be left out but not cleared
    @field_validator("name", "description", "category", "price", "unit", "in_stock")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class Product(TimestampSchema, ProductBase):
    id: int
    producer_id: int
    qr_code: Optional[str] = None
    certification_status: CertificationStatus
    stock_quantity: Optional[int] = None


class ProductWithProducer(BaseModel):
    product: Product
    producer: Optional[Producer] = None


class ProductQR(BaseModel):
    product_id: int
    qr_code: str
    is_detailed: bool
    image_url: str
    product_url: str
    product_page_image_url: str
