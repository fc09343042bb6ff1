import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hojaverde.core.exceptions import (
    ConflictError,
    DuplicateRecordError,
    InsufficientStockError,
    OrderStatusError,
    RecordNotFoundError,
)
from hojaverde.db.session import get_db
from hojaverde.models.order import Order, OrderItem
from hojaverde.models.producer import Producer
from hojaverde.models.product import Product
from hojaverde.models.user import User
from hojaverde.qr.codec import generate_qr_code

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
PRODUCT_SORT_FIELDS = ("name", "price", "created_at", "updated_at")
CANCELLABLE_STATUSES = ("pending", "confirmed")


class ProductFilter:
    def __init__(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        certified: bool = False,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ):
        self.category = category
        self.search = search
        self.certified = certified
        self.min_price = min_price
        self.max_price = max_price
        self.in_stock = in_stock
        self.sort_by = sort_by
        self.sort_order = sort_order


class DatabaseStorage:
    """Typed CRUD and filtered queries over one SQLAlchemy session.

    Lookups return ``None`` when the row does not exist; writes that break
    a business rule raise one of the errors in ``hojaverde.core.exceptions``
    after rolling the session back.
    """

    def __init__(self, db: Session):
        self.db = db

    def _save(self, instance):
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    def _apply(self, instance, updates: dict):
        for field, value in updates.items():
            setattr(instance, field, value)
        return self._save(instance)

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, user_data: dict, hashed_password: str) -> User:
        existing_user = self.db.query(User).filter(
            (User.username == user_data["username"]) | (User.email == user_data["email"])
        ).first()
        if existing_user:
            raise DuplicateRecordError("Username or email already registered")

        user_data = {k: v for k, v in user_data.items() if k != "password"}
        user = self._save(User(hashed_password=hashed_password, **user_data))
        logger.info("Registered user %s (%s)", user.username, user.role)
        return user

    def update_user(self, user_id: int, updates: dict) -> Optional[User]:
        user = self.get_user(user_id)
        if user is None:
            return None

        if "email" in updates and updates["email"] != user.email:
            if self.get_user_by_email(updates["email"]):
                raise DuplicateRecordError("Email already registered")
        return self._apply(user, updates)

    # Producers

    def get_producer(self, producer_id: int) -> Optional[Producer]:
        return self.db.query(Producer).filter(Producer.id == producer_id).first()

    def get_producer_by_user_id(self, user_id: int) -> Optional[Producer]:
        return self.db.query(Producer).filter(Producer.user_id == user_id).first()

    def create_producer(self, user_id: int, producer_data: dict) -> Producer:
        if self.get_producer_by_user_id(user_id):
            raise DuplicateRecordError("User is already registered as a producer")

        producer = self._save(Producer(user_id=user_id, **producer_data))
        logger.info("Registered producer %s for user %s", producer.id, user_id)
        return producer

    def update_producer(self, producer_id: int, updates: dict) -> Optional[Producer]:
        producer = self.get_producer(producer_id)
        if producer is None:
            return None
        return self._apply(producer, updates)

    def update_producer_certification(self, producer_id: int, status: str) -> Optional[Producer]:
        producer = self.get_producer(producer_id)
        if producer is None:
            return None

        logger.info(
            "Producer %s certification: %s -> %s",
            producer_id, producer.certification_status, status,
        )
        return self._apply(producer, {"certification_status": status})

    def get_producers(self, limit: int = 50) -> List[Producer]:
        return (
            self.db.query(Producer)
            .order_by(Producer.created_at.desc(), Producer.id.desc())
            .limit(limit)
            .all()
        )

    # Products

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_product_by_qr(self, qr_code: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.qr_code == qr_code).first()

    def _product_query(self, filters: Optional[ProductFilter]):
        query = self.db.query(Product)
        if filters is None:
            return query

        if filters.category:
            query = query.filter(Product.category == filters.category)

        if filters.search:
            query = query.filter(Product.name.ilike(f"%{filters.search}%"))

        if filters.certified:
            query = query.filter(Product.certification_status == "approved")

        if filters.min_price is not None:
            query = query.filter(Product.price >= filters.min_price)

        if filters.max_price is not None:
            query = query.filter(Product.price <= filters.max_price)

        if filters.in_stock is not None:
            query = query.filter(Product.in_stock.is_(filters.in_stock))

        return query

    def get_products(
        self,
        filters: Optional[ProductFilter] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Product]:
        query = self._product_query(filters)

        sort_by = filters.sort_by if filters else "created_at"
        sort_order = filters.sort_order if filters else "desc"
        if sort_by not in PRODUCT_SORT_FIELDS:
            raise ValueError(f"Invalid sort field: {sort_by}")

        sort_column = getattr(Product, sort_by)
        tiebreak = Product.id
        if sort_order == "desc":
            sort_column, tiebreak = sort_column.desc(), tiebreak.desc()
        query = query.order_by(sort_column, tiebreak)

        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_products(self, filters: Optional[ProductFilter] = None) -> int:
        return self._product_query(filters).count()

    def get_products_by_producer(self, producer_id: int) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.producer_id == producer_id)
            .order_by(Product.id)
            .all()
        )

    def create_product(self, producer_id: int, product_data: dict) -> Product:
        product = Product(producer_id=producer_id, **product_data)
        self.db.add(product)
        self.db.flush()  # need the id for the QR code

        product.qr_code = generate_qr_code(product.id)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Created product %s with QR code %s", product.id, product.qr_code)
        return product

    def update_product(self, product_id: int, updates: dict) -> Optional[Product]:
        product = self.get_product(product_id)
        if product is None:
            return None
        return self._apply(product, updates)

    def update_product_qr(self, product_id: int, qr_code: str) -> Optional[Product]:
        product = self.get_product(product_id)
        if product is None:
            return None

        try:
            return self._apply(product, {"qr_code": qr_code})
        except IntegrityError:
            self.db.rollback()
            raise DuplicateRecordError(f"QR code {qr_code} is already assigned")

    def update_product_certification(self, product_id: int, status: str) -> Optional[Product]:
        return self.update_product(product_id, {"certification_status": status})

    def delete_product(self, product_id: int) -> bool:
        product = self.get_product(product_id)
        if product is None:
            return False

        if product.order_items:
            raise ConflictError("Product has orders and cannot be deleted")

        self.db.delete(product)
        self.db.commit()
        return True

    # Orders

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_orders_by_user(self, user_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def _reserve(self, product_id: int, quantity: int) -> Product:
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )
        if product is None:
            raise RecordNotFoundError("Product", product_id)

        available = product.stock_quantity or 0
        if not product.in_stock or available < quantity:
            raise InsufficientStockError(product.name, available, quantity)

        product.stock_quantity = available - quantity
        if product.stock_quantity == 0:
            product.in_stock = False
        return product

    def create_order(
        self,
        user_id: int,
        items: Iterable[Tuple[int, int]],
        delivery_address: str,
        notes: Optional[str] = None,
    ) -> Order:
        """Create an order from ``(product_id, quantity)`` pairs.

        Each line captures the product's current price and the total is
        the sum of price * quantity. Stock is decremented in the same
        transaction.
        """
        total_amount = Decimal("0")
        lines = []
        try:
            for product_id, quantity in items:
                product = self._reserve(product_id, quantity)
                price = Decimal(str(product.price)).quantize(CENTS)
                total_amount += price * quantity
                lines.append((product.id, quantity, price))
        except (RecordNotFoundError, InsufficientStockError):
            self.db.rollback()
            raise

        order = Order(
            user_id=user_id,
            total_amount=total_amount.quantize(CENTS),
            delivery_address=delivery_address,
            notes=notes,
        )
        self.db.add(order)
        self.db.flush()

        for product_id, quantity, price in lines:
            self.db.add(OrderItem(order_id=order.id, product_id=product_id, quantity=quantity, price=price))

        self.db.commit()
        self.db.refresh(order)
        logger.info("Created order %s for user %s, total %s", order.id, user_id, order.total_amount)
        return order

    def update_order_status(self, order_id: int, status: str) -> Optional[Order]:
        order = self.get_order(order_id)
        if order is None:
            return None

        if order.status == status:
            return order

        if order.status == "cancelled":
            raise OrderStatusError("Cancelled orders cannot be reopened")

        if status == "cancelled":
            if order.status not in CANCELLABLE_STATUSES:
                raise OrderStatusError(f"Orders that are {order.status} cannot be cancelled")

            # return reserved stock
            for item in order.items:
                product = item.product
                product.stock_quantity = (product.stock_quantity or 0) + item.quantity
                product.in_stock = True
                self.db.add(product)

        logger.info("Order %s status: %s -> %s", order_id, order.status, status)
        return self._apply(order, {"status": status})

    # Order items

    def create_order_item(self, order_id: int, product_id: int, quantity: int, price) -> OrderItem:
        return self._save(
            OrderItem(order_id=order_id, product_id=product_id, quantity=quantity, price=price)
        )

    def get_order_items(self, order_id: int) -> List[OrderItem]:
        return (
            self.db.query(OrderItem)
            .filter(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
            .all()
        )


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    return DatabaseStorage(db)
