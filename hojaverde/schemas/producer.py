from typing import List, Optional, Literal
from pydantic import BaseModel, Field, field_validator
from hojaverde.schemas.base import TimestampSchema

CertificationStatus = Literal["pending", "approved", "rejected"]


class ProducerBase(BaseModel):
    farm_name: str = Field(min_length=1, max_length=150)
    description: Optional[str] = None
    location: str = Field(min_length=1)
    coordinates: Optional[str] = Field(default=None, pattern=r"^-?\d+(\.\d+)?,\s*-?\d+(\.\d+)?$")
    sustainability_practices: List[str] = []
    story: Optional[str] = None
    images: List[str] = []


class ProducerCreate(ProducerBase):
    pass


class ProducerUpdate(BaseModel):
    farm_name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1)
    coordinates: Optional[str] = Field(default=None, pattern=r"^-?\d+(\.\d+)?,\s*-?\d+(\.\d+)?$")
    sustainability_practices: Optional[List[str]] = None
    story: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("farm_name", "location")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class Producer(TimestampSchema, ProducerBase):
    id: int
    user_id: int
    certification_status: CertificationStatus
    # stored as JSON, may be NULL on rows written outside the API
    sustainability_practices: Optional[List[str]] = None
    images: Optional[List[str]] = None


class CertificationUpdate(BaseModel):
    status: CertificationStatus
