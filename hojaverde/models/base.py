from sqlalchemy import Column, Integer, TIMESTAMP
from sqlalchemy.sql import func
from hojaverde.db.session import Base

CERTIFICATION_STATUSES = ("pending", "approved", "rejected")


class BaseModel(Base):
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
