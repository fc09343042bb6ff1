import logging

from hojaverde.models.user import User
from hojaverde.models.producer import Producer
from hojaverde.models.product import Product
from hojaverde.models.order import Order, OrderItem
from hojaverde.db.session import engine, Base

logger = logging.getLogger(__name__)


def init_db(bind=None):
    # Create all tables
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ready (%s)", ", ".join(sorted(Base.metadata.tables)))
