from sqlalchemy import Column, String, Text, Integer, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship
from hojaverde.models.base import BaseModel, CERTIFICATION_STATUSES


class Producer(BaseModel):
    __tablename__ = "producers"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    farm_name = Column(String(150), nullable=False)
    description = Column(Text)
    location = Column(String(255), nullable=False)
    coordinates = Column(String(50))  # lat,lng
    certification_status = Column(
        Enum(*CERTIFICATION_STATUSES, name="producer_certification_statuses"),
        nullable=False,
        default="pending",
    )
    sustainability_practices = Column(JSON, default=list)
    story = Column(Text)
    images = Column(JSON, default=list)

    user = relationship("User", back_populates="producer")
    products = relationship("Product", back_populates="producer")
