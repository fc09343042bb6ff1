from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship
from hojaverde.models.base import BaseModel

USER_ROLES = ("consumer", "producer", "validator")


class User(BaseModel):
    __tablename__ = "users"

    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(Enum(*USER_ROLES, name="user_roles"), nullable=False, default="consumer")
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20))
    location = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)

    producer = relationship("Producer", back_populates="user", uselist=False)
    orders = relationship("Order", back_populates="user")
