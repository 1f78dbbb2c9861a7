"""Persistence contracts consumed by the services.

Implementations are bound to one unit of work; a fresh set is built for every
transaction by the ``TransactionManager`` and never shared between two.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, TypeVar

from orderflow.core.deadline import Deadline
from orderflow.domain.order import Order
from orderflow.domain.product import Product
from orderflow.domain.user import User

T = TypeVar("T")


class UserRepository(ABC):
    @abstractmethod
    def create(self, user: User) -> None: ...

    @abstractmethod
    def get_by_id(self, user_id: uuid.UUID) -> User:
        """Raises ``UserNotFound``."""


class ProductRepository(ABC):
    @abstractmethod
    def create(self, product: Product) -> None: ...

    @abstractmethod
    def get_by_id(self, product_id: uuid.UUID) -> Product:
        """Raises ``ProductNotFound``."""

    @abstractmethod
    def get_by_id_for_update(self, product_id: uuid.UUID) -> Product:
        """Read the product and hold an exclusive row lock on it until the
        enclosing transaction ends. Blocks while another transaction holds
        the lock. Raises ``ProductNotFound``.
        """

    @abstractmethod
    def get_all(self, limit: int, offset: int) -> list[Product]: ...

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def update(self, product: Product) -> None: ...


class OrderRepository(ABC):
    @abstractmethod
    def create(self, order: Order) -> None: ...

    @abstractmethod
    def get_by_id(self, order_id: uuid.UUID) -> Order:
        """Raises ``OrderNotFound``."""

    @abstractmethod
    def get_by_user_id(self, user_id: uuid.UUID, limit: int, offset: int) -> list[Order]: ...

    @abstractmethod
    def update(self, order: Order) -> None: ...

    @abstractmethod
    def delete(self, order_id: uuid.UUID) -> None: ...


@dataclass
class TransactionalRepositories:
    users: UserRepository
    products: ProductRepository
    orders: OrderRepository


class TransactionManager(ABC):
    """The only component allowed to begin, commit or roll back."""

    @abstractmethod
    def with_transaction(
        self,
        work: Callable[[TransactionalRepositories], T],
        deadline: Deadline | None = None,
    ) -> T:
        """Run ``work`` exactly once against repositories bound to a new unit
        of work. Commits when ``work`` returns, rolls back when it raises and
        re-raises. Nested calls are not supported.
        """
