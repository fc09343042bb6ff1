from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class QRInfo(BaseModel):
    product_id: Optional[int] = None
    is_detailed: bool
    timestamp: Optional[datetime] = None
    farm_name: Optional[str] = None
    product_name: Optional[str] = None
    display_code: str


class QRDecodeResponse(BaseModel):
    is_valid: bool
    message: str
    data: Optional[QRInfo] = None
