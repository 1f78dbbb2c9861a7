"""SQLAlchemy implementations of the repository contracts.

Each repository is bound to the session of one unit of work and never
commits; the transaction manager owns the boundary.
"""

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from orderflow.core.deadline import Deadline
from orderflow.db import models
from orderflow.domain import errors
from orderflow.domain.order import Order, OrderItem, OrderStatus
from orderflow.domain.product import Product, ProductSnapshot
from orderflow.domain.repositories import (
    OrderRepository,
    ProductRepository,
    TransactionalRepositories,
    UserRepository,
)
from orderflow.domain.user import User


def user_to_entity(row: models.User) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        age=row.age,
        is_married=row.is_married,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def product_to_entity(row: models.Product) -> Product:
    return Product(
        id=row.id,
        description=row.description,
        tags=list(row.tags or []),
        quantity=row.quantity,
        price=row.price,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def order_to_entity(row: models.Order) -> Order:
    return Order(
        id=row.id,
        user_id=row.user_id,
        status=OrderStatus(row.status),
        total=row.total,
        items=[
            OrderItem(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                product_snapshot=ProductSnapshot.from_dict(it.product_snapshot),
                quantity=it.quantity,
                price_per_item=it.price_per_item,
                total=it.total,
                created_at=it.created_at,
            )
            for it in row.items
        ],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class _SqlRepository:
    def __init__(self, session: Session, deadline: Deadline | None = None):
        self.session = session
        self.deadline = deadline

    def _check(self) -> None:
        if self.deadline is not None:
            self.deadline.check()


class SqlUserRepository(_SqlRepository, UserRepository):
    def create(self, user: User) -> None:
        self._check()
        self.session.add(models.User(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            age=user.age,
            is_married=user.is_married,
            password_hash=user.password_hash,
            created_at=user.created_at,
            updated_at=user.updated_at,
        ))
        self.session.flush()

    def get_by_id(self, user_id: uuid.UUID) -> User:
        self._check()
        row = self.session.get(models.User, user_id)
        if row is None:
            raise errors.UserNotFound()
        return user_to_entity(row)


class SqlProductRepository(_SqlRepository, ProductRepository):
    def create(self, product: Product) -> None:
        self._check()
        self.session.add(models.Product(
            id=product.id,
            description=product.description,
            tags=list(product.tags),
            quantity=product.quantity,
            price=product.price,
            created_at=product.created_at,
            updated_at=product.updated_at,
        ))
        self.session.flush()

    def get_by_id(self, product_id: uuid.UUID) -> Product:
        self._check()
        row = self.session.get(models.Product, product_id)
        if row is None:
            raise errors.ProductNotFound()
        return product_to_entity(row)

    def get_by_id_for_update(self, product_id: uuid.UUID) -> Product:
        self._check()
        stmt = (
            select(models.Product)
            .where(models.Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        if row is None:
            raise errors.ProductNotFound()
        return product_to_entity(row)

    def get_all(self, limit: int, offset: int) -> list[Product]:
        self._check()
        stmt = (
            select(models.Product)
            .order_by(models.Product.created_at, models.Product.id)
            .offset(offset)
            .limit(limit)
        )
        return [product_to_entity(r) for r in self.session.execute(stmt).scalars().all()]

    def count(self) -> int:
        self._check()
        return self.session.scalar(select(func.count()).select_from(models.Product))

    def update(self, product: Product) -> None:
        self._check()
        row = self.session.get(models.Product, product.id)
        if row is None:
            raise errors.ProductNotFound()
        row.description = product.description
        row.tags = list(product.tags)
        row.quantity = product.quantity
        row.price = product.price
        row.updated_at = product.updated_at
        self.session.flush()


class SqlOrderRepository(_SqlRepository, OrderRepository):
    def create(self, order: Order) -> None:
        self._check()
        row = models.Order(
            id=order.id,
            user_id=order.user_id,
            status=order.status.value,
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        for position, it in enumerate(order.items):
            row.items.append(models.OrderItem(
                id=it.id,
                position=position,
                product_id=it.product_id,
                product_snapshot=it.product_snapshot.to_dict(),
                quantity=it.quantity,
                price_per_item=it.price_per_item,
                total=it.total,
                created_at=it.created_at,
            ))
        self.session.add(row)
        self.session.flush()

    def get_by_id(self, order_id: uuid.UUID) -> Order:
        self._check()
        stmt = (
            select(models.Order)
            .where(models.Order.id == order_id)
            .options(selectinload(models.Order.items))
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        if row is None:
            raise errors.OrderNotFound()
        return order_to_entity(row)

    def get_by_user_id(self, user_id: uuid.UUID, limit: int, offset: int) -> list[Order]:
        self._check()
        stmt = (
            select(models.Order)
            .where(models.Order.user_id == user_id)
            .options(selectinload(models.Order.items))
            .order_by(models.Order.created_at.desc(), models.Order.id)
            .offset(offset)
            .limit(limit)
        )
        return [order_to_entity(r) for r in self.session.execute(stmt).scalars().all()]

    def update(self, order: Order) -> None:
        # Items are immutable once persisted; only the header changes.
        self._check()
        row = self.session.get(models.Order, order.id)
        if row is None:
            raise errors.OrderNotFound()
        row.status = order.status.value
        row.total = order.total
        row.updated_at = order.updated_at
        self.session.flush()

    def delete(self, order_id: uuid.UUID) -> None:
        self._check()
        row = self.session.get(models.Order, order_id)
        if row is None:
            raise errors.OrderNotFound()
        self.session.delete(row)
        self.session.flush()


def build_repositories(session: Session, deadline: Deadline | None = None) -> TransactionalRepositories:
    return TransactionalRepositories(
        users=SqlUserRepository(session, deadline),
        products=SqlProductRepository(session, deadline),
        orders=SqlOrderRepository(session, deadline),
    )
